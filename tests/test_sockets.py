import pytest

from nftkit.binaryutil import BIG_ENDIAN
from nftkit.expr.sockets import (
    NF_SYNPROXY_OPT_MSS,
    NF_SYNPROXY_OPT_SACK_PERM,
    NFTA_SYNPROXY_FLAGS,
    Socket,
    SocketKey,
    SynProxy,
)
from nftkit.nlattr import decode

_EXPR_DATA = 2


def _expr_data(raw: bytes) -> bytes:
    for attr in decode(raw):
        if attr.kind & 0x3FFF == _EXPR_DATA:
            return attr.data
    raise AssertionError("no expression data attribute")


@pytest.mark.parametrize(
    "socket",
    [
        Socket(key=SocketKey.TRANSPARENT, level=0, register=1),
        Socket(key=SocketKey.CGROUPV2, level=5, register=1),
        Socket(key=SocketKey.CGROUPV2, level=1, register=1),
        Socket(key=SocketKey.WILDCARD, level=0, register=1),
        Socket(key=SocketKey.MARK, level=0, register=1),
    ],
)
def test_socket_round_trip(socket):
    recovered = Socket.unmarshal(0, _expr_data(socket.marshal(0)))
    assert recovered == socket


def test_socket_key_is_enum_after_unmarshal():
    recovered = Socket.unmarshal(0, Socket(key=SocketKey.MARK, register=1).marshal_data(0))
    assert recovered.key is SocketKey.MARK


def test_synproxy_round_trip():
    proxy = SynProxy(
        mss=1460,
        wscale=7,
        timestamp=True,
        sack_perm=True,
        mss_value_set=True,
        wscale_value_set=True,
    )
    assert SynProxy.unmarshal(0, _expr_data(proxy.marshal(0))) == proxy


def test_synproxy_flags():
    data = SynProxy(mss=1460, sack_perm=True).marshal_data(0)
    flags = [a for a in decode(data) if a.kind == NFTA_SYNPROXY_FLAGS][0]
    assert BIG_ENDIAN.uint32(flags.data) == NF_SYNPROXY_OPT_MSS | NF_SYNPROXY_OPT_SACK_PERM


def test_synproxy_zero_mss_value_set():
    recovered = SynProxy.unmarshal(0, SynProxy(mss_value_set=True).marshal_data(0))
    assert recovered.mss_value_set is True
    assert recovered.wscale_value_set is False
    assert recovered.mss == 0