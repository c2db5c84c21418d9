import pytest

from nftkit.expr.xtables import Match, Target
from nftkit.nlattr import decode

_EXPR_NAME = 1
_EXPR_DATA = 2
PAYLOAD = bytes([0xB0, 0x1D, 0xCA, 0xFE, 0x00])


def _expr_data(raw: bytes) -> bytes:
    for attr in decode(raw):
        if attr.kind & 0x3FFF == _EXPR_DATA:
            return attr.data
    raise AssertionError("no expression data attribute")


@pytest.mark.parametrize("cls", [Match, Target])
def test_round_trip(cls):
    original = cls(name="foobar", rev=1234567890, info=PAYLOAD)
    recovered = cls.unmarshal(0, _expr_data(original.marshal(0)))
    assert recovered == original


@pytest.mark.parametrize("cls,name", [(Match, b"match\x00"), (Target, b"target\x00")])
def test_expression_name(cls, name):
    attrs = decode(cls(name="foobar").marshal(0))
    assert [a.data for a in attrs if a.kind & 0x3FFF == _EXPR_NAME] == [name]


@pytest.mark.parametrize("cls", [Match, Target])
def test_long_name_truncated(cls):
    long_name = "x" * 40
    recovered = cls.unmarshal(0, cls(name=long_name).marshal_data(0))
    assert recovered.name == "x" * 28


def test_name_attribute_nul_terminated():
    attrs = decode(Match(name="tcp").marshal_data(0))
    assert attrs[0].data == b"tcp\x00"