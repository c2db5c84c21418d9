import pytest

from nftkit.expr.base import NFTA_EXPR_DATA
from nftkit.expr.log import (
    NFTA_LOG_FLAGS,
    NFTA_LOG_GROUP,
    NFTA_LOG_LEVEL,
    NFTA_LOG_PREFIX,
    NFTA_QUEUE_TOTAL,
    Log,
    LogFlags,
    LogLevel,
    Queue,
    QueueFlag,
)
from nftkit.nlattr import decode


def _data(expr):
    for attr in decode(expr.marshal(0)):
        if attr.kind == NFTA_EXPR_DATA:
            return attr.data
    raise AssertionError("no expression data")


def test_log_round_trip_prefix_and_level():
    log = Log(
        key=(1 << NFTA_LOG_PREFIX) | (1 << NFTA_LOG_LEVEL),
        data=b"nft: ",
        level=LogLevel.WARNING,
    )
    assert Log.unmarshal(0, _data(log)) == log


def test_log_round_trip_group_and_flags():
    log = Log(
        key=(1 << NFTA_LOG_GROUP) | (1 << NFTA_LOG_FLAGS),
        group=5,
        flags=LogFlags.TCP_SEQ | LogFlags.UID,
    )
    assert Log.unmarshal(0, _data(log)) == log


def test_log_without_key_has_no_attributes():
    assert Log(data=b"x", group=3).marshal_data(0) == b""


def test_log_prefix_is_nul_terminated():
    log = Log(key=1 << NFTA_LOG_PREFIX, data=b"abc")
    attrs = decode(log.marshal_data(0))
    assert [a.kind for a in attrs] == [NFTA_LOG_PREFIX]
    assert attrs[0].data == b"abc\x00"


def test_log_unmarshal_sets_key_from_attributes():
    data = Log(key=1 << NFTA_LOG_GROUP, group=9).marshal_data(0)
    log = Log.unmarshal(0, data)
    assert log.key == 1 << NFTA_LOG_GROUP
    assert log.group == 9


def test_log_expression_name():
    assert decode(Log().marshal(0))[0].data == b"log\x00"


def test_queue_total_defaults_to_one():
    queue = Queue(num=3)
    attrs = {a.kind: a for a in decode(queue.marshal_data(0))}
    assert attrs[NFTA_QUEUE_TOTAL].uint16() == 1
    assert queue.total == 1


@pytest.mark.parametrize(
    "queue",
    [
        Queue(num=1, total=4, flag=QueueFlag.BYPASS),
        Queue(num=7, total=2, flag=QueueFlag.BYPASS | QueueFlag.FANOUT),
    ],
)
def test_queue_round_trip(queue):
    assert Queue.unmarshal(0, _data(queue)) == queue