"""Log and queue expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_LOG_GROUP = 1
NFTA_LOG_PREFIX = 2
NFTA_LOG_SNAPLEN = 3
NFTA_LOG_QTHRESHOLD = 4
NFTA_LOG_LEVEL = 5
NFTA_LOG_FLAGS = 6

NFTA_QUEUE_NUM = 1
NFTA_QUEUE_TOTAL = 2
NFTA_QUEUE_FLAGS = 3


class LogLevel(IntEnum):
    """Syslog-style log levels, plus audit."""

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7
    AUDIT = 8


class LogFlags(IntFlag):
    """What extra information to log."""

    TCP_SEQ = 0x01
    TCP_OPT = 0x02
    IP_OPT = 0x04
    UID = 0x08
    NFLOG = 0x10
    MAC_DECODE = 0x20
    MASK = 0x2F


def _level(value: int) -> LogLevel | int:
    try:
        return LogLevel(value)
    except ValueError:
        return value


def _flags(value: int) -> LogFlags | int:
    try:
        return LogFlags(value)
    except ValueError:
        return value


@dataclass
class Log(Expression):
    """Logs packets.

    ``key`` has bit ``1 << NFTA_LOG_*`` set for every option present.
    """

    expr_name: ClassVar[str] = "log"

    level: LogLevel | int = LogLevel.EMERG
    flags: LogFlags | int = 0
    key: int = 0
    snaplen: int = 0
    group: int = 0
    qthreshold: int = 0
    data: bytes = b""

    def _has(self, attr_type: int) -> bool:
        return bool(self.key & (1 << attr_type))

    def marshal_data(self, family: int) -> bytes:
        attrs: list[Attribute] = []
        if self._has(NFTA_LOG_GROUP):
            attrs.append(Attribute(NFTA_LOG_GROUP, BIG_ENDIAN.put_uint16(self.group)))
        if self._has(NFTA_LOG_PREFIX):
            attrs.append(Attribute(NFTA_LOG_PREFIX, bytes(self.data) + b"\x00"))
        if self._has(NFTA_LOG_SNAPLEN):
            attrs.append(Attribute(NFTA_LOG_SNAPLEN, BIG_ENDIAN.put_uint32(self.snaplen)))
        if self._has(NFTA_LOG_QTHRESHOLD):
            attrs.append(Attribute(NFTA_LOG_QTHRESHOLD, BIG_ENDIAN.put_uint16(self.qthreshold)))
        if self._has(NFTA_LOG_LEVEL):
            attrs.append(Attribute(NFTA_LOG_LEVEL, BIG_ENDIAN.put_uint32(int(self.level))))
        if self._has(NFTA_LOG_FLAGS):
            attrs.append(Attribute(NFTA_LOG_FLAGS, BIG_ENDIAN.put_uint32(int(self.flags))))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Log:
        expr = cls()
        for attr in decode(data):
            expr.key |= 1 << attr.kind
            if attr.kind == NFTA_LOG_GROUP:
                expr.group = BIG_ENDIAN.uint16(attr.data)
            elif attr.kind == NFTA_LOG_PREFIX:
                expr.data = attr.data[:-1]
            elif attr.kind == NFTA_LOG_SNAPLEN:
                expr.snaplen = BIG_ENDIAN.uint32(attr.data)
            elif attr.kind == NFTA_LOG_QTHRESHOLD:
                expr.qthreshold = BIG_ENDIAN.uint16(attr.data)
            elif attr.kind == NFTA_LOG_LEVEL:
                expr.level = _level(BIG_ENDIAN.uint32(attr.data))
            elif attr.kind == NFTA_LOG_FLAGS:
                expr.flags = _flags(BIG_ENDIAN.uint32(attr.data))
        return expr


class QueueFlag(IntFlag):
    """Options for queueing packets to user space."""

    BYPASS = 0x01
    FANOUT = 0x02
    MASK = 0x03


@dataclass
class Queue(Expression):
    """Queues packets to user space."""

    expr_name: ClassVar[str] = "queue"

    num: int = 0
    total: int = 0
    flag: QueueFlag | int = 0

    def marshal_data(self, family: int) -> bytes:
        if self.total == 0:
            self.total = 1
        return encode(
            [
                Attribute(NFTA_QUEUE_NUM, BIG_ENDIAN.put_uint16(self.num)),
                Attribute(NFTA_QUEUE_TOTAL, BIG_ENDIAN.put_uint16(self.total)),
                Attribute(NFTA_QUEUE_FLAGS, BIG_ENDIAN.put_uint16(int(self.flag))),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Queue:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_QUEUE_NUM:
                expr.num = attr.uint16()
            elif attr.kind == NFTA_QUEUE_TOTAL:
                expr.total = attr.uint16()
            elif attr.kind == NFTA_QUEUE_FLAGS:
                value = attr.uint16()
                try:
                    expr.flag = QueueFlag(value)
                except ValueError:
                    expr.flag = value
        return expr