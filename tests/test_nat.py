import pytest

from nftkit.expr.base import NFTA_EXPR_DATA, NFTA_EXPR_NAME
from nftkit.expr.nat import (
    NAT,
    NFTA_NAT_FLAGS,
    NFTA_NAT_REG_ADDR_MAX,
    NFTA_NAT_REG_ADDR_MIN,
    NFTA_NAT_REG_PROTO_MIN,
    NFTA_TPROXY_REG_ADDR,
    NATType,
    Redir,
    TProxy,
)
from nftkit.nlattr import decode

NFPROTO_IPV4 = 2


def _roundtrip(expr):
    data = expr.marshal(0)
    for attr in decode(data):
        if attr.kind == NFTA_EXPR_DATA:
            return type(expr).unmarshal(0, attr.data)
    raise AssertionError("no expression data")


@pytest.mark.parametrize(
    "nat",
    [
        NAT(
            type=NATType.DEST_NAT,
            family=NFPROTO_IPV4,
            reg_addr_min=1,
            reg_proto_min=2,
            specified=True,
        ),
        NAT(
            type=NATType.SOURCE_NAT,
            family=NFPROTO_IPV4,
            reg_addr_min=1,
            reg_proto_min=2,
            persistent=True,
        ),
    ],
)
def test_nat_roundtrip(nat):
    assert _roundtrip(nat) == nat


def test_nat_name():
    attrs = decode(NAT().marshal(0))
    assert attrs[0].kind == NFTA_EXPR_NAME
    assert attrs[0].data == b"nat\x00"


def test_nat_addr_max_requires_min():
    kinds = [a.kind for a in decode(NAT(reg_addr_max=3).marshal_data(0))]
    assert NFTA_NAT_REG_ADDR_MAX not in kinds
    assert NFTA_NAT_REG_ADDR_MIN not in kinds
    assert NFTA_NAT_FLAGS not in kinds


def test_nat_all_flags_roundtrip():
    nat = NAT(
        reg_addr_min=1,
        reg_addr_max=2,
        reg_proto_min=3,
        reg_proto_max=4,
        random=True,
        fully_random=True,
        persistent=True,
        prefix=True,
        specified=True,
    )
    assert _roundtrip(nat) == nat


def test_nat_specified_flag_value():
    attrs = decode(NAT(specified=True, reg_proto_min=2).marshal_data(0))
    flags = next(a for a in attrs if a.kind == NFTA_NAT_FLAGS)
    assert flags.uint32() == 0x02
    assert any(a.kind == NFTA_NAT_REG_PROTO_MIN for a in attrs)


@pytest.mark.parametrize(
    "redir",
    [
        Redir(),
        Redir(register_proto_min=1),
        Redir(register_proto_min=1, register_proto_max=2, flags=4),
    ],
)
def test_redir_roundtrip(redir):
    assert _roundtrip(redir) == redir


def test_redir_empty_marshals_nothing():
    assert Redir().marshal_data(0) == b""


def test_tproxy_roundtrip():
    tp = TProxy(family=NFPROTO_IPV4, reg_addr=1, reg_port=2)
    assert _roundtrip(tp) == tp


def test_tproxy_without_addr():
    kinds = [a.kind for a in decode(TProxy(reg_port=2).marshal_data(0))]
    assert NFTA_TPROXY_REG_ADDR not in kinds
    assert _roundtrip(TProxy(reg_port=2)) == TProxy(reg_port=2)