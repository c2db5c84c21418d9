from nftkit.expr.base import NFTA_EXPR_DATA, NFTA_EXPR_NAME
from nftkit.expr.flowoffload import NFTNL_EXPR_FLOW_TABLE_NAME, FlowOffload
from nftkit.nlattr import Attribute, decode, encode


def _data_of(marshalled):
    for attr in decode(marshalled):
        if attr.kind == NFTA_EXPR_DATA:
            return attr.data
    raise AssertionError("no data attribute")


def test_round_trip():
    expr = FlowOffload(name="ft0")
    assert FlowOffload.unmarshal(0, _data_of(expr.marshal(0))) == expr


def test_marshal_data_has_unterminated_name():
    attrs = decode(FlowOffload(name="ft0").marshal_data(0))
    assert attrs == [Attribute(NFTNL_EXPR_FLOW_TABLE_NAME, b"ft0")]


def test_marshal_carries_expression_name():
    attrs = decode(FlowOffload(name="ft0").marshal(0))
    assert attrs[0] == Attribute(NFTA_EXPR_NAME, b"flow_offload\x00")


def test_unmarshal_ignores_unknown_attributes():
    data = encode([Attribute(7, b"x"), Attribute(NFTNL_EXPR_FLOW_TABLE_NAME, b"ft\x00")])
    assert FlowOffload.unmarshal(0, data).name == "ft"


def test_unmarshal_empty_gives_default():
    assert FlowOffload.unmarshal(0, b"") == FlowOffload()