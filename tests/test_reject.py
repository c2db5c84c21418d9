import pytest

from nftkit.expr.base import NFTA_EXPR_DATA
from nftkit.expr.reject import (
    NFTA_DUP_SREG_DEV,
    NFTA_FIB_DREG,
    NFTA_FIB_FLAGS,
    NFTA_FIB_F_DADDR,
    NFTA_FIB_F_SADDR,
    NFTA_FIB_RESULT,
    NFTA_REJECT_ICMP_CODE,
    NFTA_REJECT_TYPE,
    NFT_FIB_RESULT_OIF,
    Dup,
    Fib,
    Reject,
)
from nftkit.nlattr import decode


def _data(expr):
    for attr in decode(expr.marshal(0)):
        if attr.kind == NFTA_EXPR_DATA:
            return attr.data
    raise AssertionError("no expression data")


@pytest.mark.parametrize("reject", [Reject(), Reject(type=1, code=3), Reject(type=2, code=10)])
def test_reject_round_trip(reject):
    assert Reject.unmarshal(0, _data(reject)) == reject


def test_reject_attribute_layout():
    attrs = decode(Reject(type=1, code=3).marshal_data(0))
    assert [a.kind for a in attrs] == [NFTA_REJECT_TYPE, NFTA_REJECT_ICMP_CODE]
    assert attrs[1].data == bytes([3])


def test_reject_expression_name():
    assert decode(Reject().marshal(0))[0].data == b"reject\x00"


def test_dup_round_trip_address_only():
    dup = Dup(reg_addr=1)
    assert Dup.unmarshal(0, _data(dup)) == dup


def test_dup_device_only_sent_when_set():
    assert NFTA_DUP_SREG_DEV not in [a.kind for a in decode(Dup(reg_addr=1, reg_dev=2).marshal_data(0))]
    attrs = {a.kind: a for a in decode(Dup(reg_addr=1, reg_dev=2, is_reg_dev_set=True).marshal_data(0))}
    assert attrs[NFTA_DUP_SREG_DEV].uint32() == 2


def test_dup_unmarshal_reads_device():
    dup = Dup.unmarshal(0, Dup(reg_addr=1, reg_dev=2, is_reg_dev_set=True).marshal_data(0))
    assert (dup.reg_addr, dup.reg_dev) == (1, 2)


def test_fib_flags_encoded_together():
    attrs = {a.kind: a for a in decode(Fib(register=1, flag_saddr=True, flag_daddr=True).marshal_data(0))}
    assert attrs[NFTA_FIB_FLAGS].uint32() == NFTA_FIB_F_SADDR | NFTA_FIB_F_DADDR
    assert NFTA_FIB_RESULT not in attrs


def test_fib_only_register_when_nothing_set():
    attrs = decode(Fib(register=4).marshal_data(0))
    assert [a.kind for a in attrs] == [NFTA_FIB_DREG]
    assert attrs[0].uint32() == 4


def test_fib_result_attribute():
    attrs = {a.kind: a for a in decode(Fib(result_oif=True).marshal_data(0))}
    assert attrs[NFTA_FIB_RESULT].uint32() == NFT_FIB_RESULT_OIF