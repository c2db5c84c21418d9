"""Meta, masquerade, comparison and notrack expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, TypeVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import NLA_F_NESTED, Attribute, decode, encode
from .base import NFTA_EXPR_NAME, Expression

NFTA_DATA_VALUE = 1

NFTA_META_DREG = 1
NFTA_META_KEY = 2
NFTA_META_SREG = 3

NFTA_MASQ_FLAGS = 1
NFTA_MASQ_REG_PROTO_MIN = 2
NFTA_MASQ_REG_PROTO_MAX = 3

NFTA_CMP_SREG = 1
NFTA_CMP_OP = 2
NFTA_CMP_DATA = 3

NF_NAT_RANGE_PROTO_SPECIFIED = 0x02
NF_NAT_RANGE_PROTO_RANDOM = 0x04
NF_NAT_RANGE_PERSISTENT = 0x08
NF_NAT_RANGE_PROTO_RANDOM_FULLY = 0x10
NF_NAT_RANGE_PREFIX = 0x40

_T = TypeVar("_T", bound=IntEnum)


def _coerce(enum_cls: type[_T], value: int) -> _T | int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


class MetaKey(IntEnum):
    """Which piece of packet meta information to load."""

    LEN = 0
    PROTOCOL = 1
    PRIORITY = 2
    MARK = 3
    IIF = 4
    OIF = 5
    IIFNAME = 6
    OIFNAME = 7
    IIFTYPE = 8
    OIFTYPE = 9
    SKUID = 10
    SKGID = 11
    NFTRACE = 12
    RTCLASSID = 13
    SECMARK = 14
    NFPROTO = 15
    L4PROTO = 16
    BRIIIFNAME = 17
    BRIOIFNAME = 18
    PKTTYPE = 19
    CPU = 20
    IIFGROUP = 21
    OIFGROUP = 22
    CGROUP = 23
    PRANDOM = 24


@dataclass
class Meta(Expression):
    """Loads packet meta information into a register, or sets it from one."""

    expr_name: ClassVar[str] = "meta"

    key: MetaKey | int = MetaKey.LEN
    source_register: bool = False
    register: int = 0

    def marshal_data(self, family: int) -> bytes:
        reg_type = NFTA_META_SREG if self.source_register else NFTA_META_DREG
        return encode(
            [
                Attribute(NFTA_META_KEY, BIG_ENDIAN.put_uint32(int(self.key))),
                Attribute(reg_type, BIG_ENDIAN.put_uint32(self.register)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Meta:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_META_SREG:
                expr.register = attr.uint32()
                expr.source_register = True
            elif attr.kind == NFTA_META_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_META_KEY:
                expr.key = _coerce(MetaKey, attr.uint32())
        return expr


@dataclass
class Masq(Expression):
    """Source NAT to the address of the output interface."""

    expr_name: ClassVar[str] = "masq"

    random: bool = False
    fully_random: bool = False
    persistent: bool = False
    to_ports: bool = False
    reg_proto_min: int = 0
    reg_proto_max: int = 0

    def marshal_data(self, family: int) -> bytes:
        attrs: list[Attribute] = []
        if not self.to_ports:
            flags = 0
            if self.random:
                flags |= NF_NAT_RANGE_PROTO_RANDOM
            if self.fully_random:
                flags |= NF_NAT_RANGE_PROTO_RANDOM_FULLY
            if self.persistent:
                flags |= NF_NAT_RANGE_PERSISTENT
            if flags:
                attrs.append(Attribute(NFTA_MASQ_FLAGS, BIG_ENDIAN.put_uint32(flags)))
        else:
            attrs.append(
                Attribute(NFTA_MASQ_REG_PROTO_MIN, BIG_ENDIAN.put_uint32(self.reg_proto_min))
            )
            if self.reg_proto_max:
                attrs.append(
                    Attribute(NFTA_MASQ_REG_PROTO_MAX, BIG_ENDIAN.put_uint32(self.reg_proto_max))
                )
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Masq:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_MASQ_REG_PROTO_MIN:
                expr.to_ports = True
                expr.reg_proto_min = attr.uint32()
            elif attr.kind == NFTA_MASQ_REG_PROTO_MAX:
                expr.reg_proto_max = attr.uint32()
            elif attr.kind == NFTA_MASQ_FLAGS:
                flags = attr.uint32()
                expr.persistent = bool(flags & NF_NAT_RANGE_PERSISTENT)
                expr.random = bool(flags & NF_NAT_RANGE_PROTO_RANDOM)
                expr.fully_random = bool(flags & NF_NAT_RANGE_PROTO_RANDOM_FULLY)
        return expr


class CmpOp(IntEnum):
    """Comparison operators."""

    EQ = 0
    NEQ = 1
    LT = 2
    LTE = 3
    GT = 4
    GTE = 5


@dataclass
class Cmp(Expression):
    """Compares a register with constant data."""

    expr_name: ClassVar[str] = "cmp"

    op: CmpOp | int = CmpOp.EQ
    register: int = 0
    data: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        cmp_data = encode([Attribute(NFTA_DATA_VALUE, bytes(self.data))])
        return encode(
            [
                Attribute(NFTA_CMP_SREG, BIG_ENDIAN.put_uint32(self.register)),
                Attribute(NFTA_CMP_OP, BIG_ENDIAN.put_uint32(int(self.op))),
                Attribute(NLA_F_NESTED | NFTA_CMP_DATA, cmp_data),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Cmp:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CMP_SREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_CMP_OP:
                expr.op = _coerce(CmpOp, attr.uint32())
            elif attr.kind == NFTA_CMP_DATA:
                nested = attr.nested()
                if nested and nested[0].kind == NFTA_DATA_VALUE:
                    expr.data = nested[0].data
        return expr


@dataclass
class Notrack(Expression):
    """Disables connection tracking for matching packets."""

    expr_name: ClassVar[str] = "notrack"

    def marshal(self, family: int) -> bytes:
        return encode([Attribute(NFTA_EXPR_NAME, b"notrack\x00")])

    def marshal_data(self, family: int) -> bytes:
        return b"notrack\x00"

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Notrack:
        decode(data)
        return cls()