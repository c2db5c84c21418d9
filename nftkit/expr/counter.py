"""Counter, connection limit, quota and rate limit expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_COUNTER_BYTES = 1
NFTA_COUNTER_PACKETS = 2

NFTA_CONNLIMIT_UNSPEC = 0
NFTA_CONNLIMIT_COUNT = 1
NFTA_CONNLIMIT_FLAGS = 2
NFT_CONNLIMIT_F_INV = 1

NFTA_QUOTA_BYTES = 1
NFTA_QUOTA_FLAGS = 2
NFTA_QUOTA_CONSUMED = 4
NFT_QUOTA_F_INV = 1

NFTA_LIMIT_RATE = 1
NFTA_LIMIT_UNIT = 2
NFTA_LIMIT_BURST = 3
NFTA_LIMIT_TYPE = 4
NFTA_LIMIT_FLAGS = 5
NFT_LIMIT_F_INV = 1


@dataclass
class Counter(Expression):
    """Counts bytes and packets."""

    expr_name: ClassVar[str] = "counter"

    bytes: int = 0
    packets: int = 0

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_COUNTER_BYTES, BIG_ENDIAN.put_uint64(self.bytes)),
                Attribute(NFTA_COUNTER_PACKETS, BIG_ENDIAN.put_uint64(self.packets)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Counter:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_COUNTER_BYTES:
                expr.bytes = attr.uint64()
            elif attr.kind == NFTA_COUNTER_PACKETS:
                expr.packets = attr.uint64()
        return expr


@dataclass
class Connlimit(Expression):
    """Matches on the number of connections."""

    expr_name: ClassVar[str] = "connlimit"

    count: int = 0
    flags: int = 0

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_CONNLIMIT_COUNT, BIG_ENDIAN.put_uint32(self.count)),
                Attribute(NFTA_CONNLIMIT_FLAGS, BIG_ENDIAN.put_uint32(self.flags)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Connlimit:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CONNLIMIT_COUNT:
                expr.count = BIG_ENDIAN.uint32(attr.data)
            elif attr.kind == NFTA_CONNLIMIT_FLAGS:
                expr.flags = BIG_ENDIAN.uint32(attr.data)
        return expr


@dataclass
class Quota(Expression):
    """A threshold against a number of bytes."""

    expr_name: ClassVar[str] = "quota"

    bytes: int = 0
    consumed: int = 0
    over: bool = False

    def marshal_data(self, family: int) -> bytes:
        flags = NFT_QUOTA_F_INV if self.over else 0
        return encode(
            [
                Attribute(NFTA_QUOTA_BYTES, BIG_ENDIAN.put_uint64(self.bytes)),
                Attribute(NFTA_QUOTA_CONSUMED, BIG_ENDIAN.put_uint64(self.consumed)),
                Attribute(NFTA_QUOTA_FLAGS, BIG_ENDIAN.put_uint32(flags)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Quota:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_QUOTA_BYTES:
                expr.bytes = attr.uint64()
            elif attr.kind == NFTA_QUOTA_CONSUMED:
                expr.consumed = attr.uint64()
            elif attr.kind == NFTA_QUOTA_FLAGS:
                expr.over = (attr.uint32() & NFT_QUOTA_F_INV) == 1
        return expr


class LimitType(IntEnum):
    """Whether a limit counts packets or bytes."""

    PKTS = 0
    PKT_BYTES = 1


class LimitTime(IntEnum):
    """The time unit of a rate limit, in seconds."""

    SECOND = 1
    MINUTE = 60
    HOUR = 60 * 60
    DAY = 60 * 60 * 24
    WEEK = 60 * 60 * 24 * 7


@dataclass
class Limit(Expression):
    """A rate limit."""

    expr_name: ClassVar[str] = "limit"

    type: LimitType = LimitType.PKTS
    rate: int = 0
    over: bool = False
    unit: LimitTime | int = 0
    burst: int = 0

    def marshal_data(self, family: int) -> bytes:
        flags = NFT_LIMIT_F_INV if self.over else 0
        return encode(
            [
                Attribute(NFTA_LIMIT_RATE, BIG_ENDIAN.put_uint64(self.rate)),
                Attribute(NFTA_LIMIT_UNIT, BIG_ENDIAN.put_uint64(int(self.unit))),
                Attribute(NFTA_LIMIT_BURST, BIG_ENDIAN.put_uint32(self.burst)),
                Attribute(NFTA_LIMIT_TYPE, BIG_ENDIAN.put_uint32(int(self.type))),
                Attribute(NFTA_LIMIT_FLAGS, BIG_ENDIAN.put_uint32(flags)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Limit:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_LIMIT_RATE:
                expr.rate = attr.uint64()
            elif attr.kind == NFTA_LIMIT_UNIT:
                value = attr.uint64()
                try:
                    expr.unit = LimitTime(value)
                except ValueError:
                    raise ValueError(f"expr: invalid limit unit value {value}") from None
            elif attr.kind == NFTA_LIMIT_BURST:
                expr.burst = attr.uint32()
            elif attr.kind == NFTA_LIMIT_TYPE:
                value = attr.uint32()
                try:
                    expr.type = LimitType(value)
                except ValueError:
                    raise ValueError(f"expr: invalid limit type {value}") from None
            elif attr.kind == NFTA_LIMIT_FLAGS:
                expr.over = (attr.uint32() & NFT_LIMIT_F_INV) == 1
            else:
                raise ValueError("expr: unhandled limit netlink attribute")
        return expr