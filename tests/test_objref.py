import pytest

from nftkit.expr.base import NFTA_EXPR_DATA, NFTA_EXPR_NAME
from nftkit.expr.objref import Objref, Rt, RtKey
from nftkit.nlattr import Attribute, AttributeDecodeError, decode


def _expr_data(blob):
    return next(a.data for a in decode(blob) if a.kind == NFTA_EXPR_DATA)


def test_objref_round_trip():
    ref = Objref(type=1, name="fwded")
    assert Objref.unmarshal(0, _expr_data(ref.marshal(0))) == ref


def test_objref_name_is_not_nul_terminated():
    attrs = decode(Objref(type=1, name="fwded").marshal_data(0))
    assert attrs[1] == Attribute(2, b"fwded")


def test_objref_name_attribute():
    attrs = decode(Objref(type=1, name="fwded").marshal(0))
    assert attrs[0] == Attribute(NFTA_EXPR_NAME, b"objref\x00")


@pytest.mark.parametrize("key", list(RtKey))
def test_rt_round_trip(key):
    rt = Rt(register=1, key=key)
    recovered = Rt.unmarshal(0, _expr_data(rt.marshal(0)))
    assert recovered == rt
    assert recovered.key is key


def test_rt_key_precedes_register():
    attrs = decode(Rt(register=1, key=RtKey.TCPMSS).marshal_data(0))
    assert [a.kind for a in attrs] == [2, 1]
    assert attrs[1].uint32() == 1


def test_objref_unmarshal_rejects_truncated_stream():
    with pytest.raises(AttributeDecodeError):
        Objref.unmarshal(0, b"\x08\x00\x01")