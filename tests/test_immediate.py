import pytest

from nftkit.expr.base import NFTA_EXPR_DATA, NFTA_EXPR_NAME
from nftkit.expr.immediate import Immediate, Verdict, VerdictKind
from nftkit.nlattr import Attribute, AttributeDecodeError, decode


def _expr_data(blob):
    return next(a.data for a in decode(blob) if a.kind == NFTA_EXPR_DATA)


def test_immediate_round_trip():
    imm = Immediate(register=1, data=b"\x01\x02\x03\x04")
    assert Immediate.unmarshal(0, _expr_data(imm.marshal(0))) == imm


def test_immediate_name_attribute():
    attrs = decode(Immediate(register=1, data=b"\x01").marshal(0))
    assert attrs[0] == Attribute(NFTA_EXPR_NAME, b"immediate\x00")


@pytest.mark.parametrize("kind", list(VerdictKind))
def test_verdict_round_trip(kind):
    verdict = Verdict(kind=kind)
    recovered = Verdict.unmarshal(0, _expr_data(verdict.marshal(0)))
    assert recovered == verdict
    assert recovered.kind is kind


@pytest.mark.parametrize("kind", [VerdictKind.JUMP, VerdictKind.GOTO])
def test_verdict_with_chain_round_trip(kind):
    verdict = Verdict(kind=kind, chain="input")
    assert Verdict.unmarshal(0, verdict.marshal_data(0)) == verdict


def test_verdict_marshals_under_immediate_name():
    attrs = decode(Verdict(kind=VerdictKind.ACCEPT).marshal(0))
    assert attrs[0] == Attribute(NFTA_EXPR_NAME, b"immediate\x00")


def test_verdict_writes_verdict_register():
    attrs = decode(Verdict(kind=VerdictKind.DROP).marshal_data(0))
    assert attrs[0].uint32() == 0


def test_verdict_parsed_as_immediate_has_no_data():
    imm = Immediate.unmarshal(0, Verdict(kind=VerdictKind.ACCEPT).marshal_data(0))
    assert imm.register == 0
    assert imm.data == b""


def test_immediate_unmarshal_rejects_malformed_data():
    with pytest.raises(AttributeDecodeError):
        Immediate.unmarshal(0, b"\x01")