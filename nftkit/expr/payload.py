"""Payload, extension header and range expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, TypeVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import NLA_F_NESTED, Attribute, decode, encode
from .base import Expression
from .meta import CmpOp

NFTA_DATA_VALUE = 1

NFTA_PAYLOAD_DREG = 1
NFTA_PAYLOAD_BASE = 2
NFTA_PAYLOAD_OFFSET = 3
NFTA_PAYLOAD_LEN = 4
NFTA_PAYLOAD_SREG = 5
NFTA_PAYLOAD_CSUM_TYPE = 6
NFTA_PAYLOAD_CSUM_OFFSET = 7
NFTA_PAYLOAD_CSUM_FLAGS = 8

NFTA_EXTHDR_DREG = 1
NFTA_EXTHDR_TYPE = 2
NFTA_EXTHDR_OFFSET = 3
NFTA_EXTHDR_LEN = 4
NFTA_EXTHDR_FLAGS = 5
NFTA_EXTHDR_OP = 6
NFTA_EXTHDR_SREG = 7

NFTA_RANGE_SREG = 1
NFTA_RANGE_OP = 2
NFTA_RANGE_FROM_DATA = 3
NFTA_RANGE_TO_DATA = 4

_T = TypeVar("_T", bound=IntEnum)


def _coerce(enum_cls: type[_T], value: int) -> _T | int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


class PayloadBase(IntEnum):
    """Header a payload offset is relative to."""

    LL_HEADER = 0
    NETWORK_HEADER = 1
    TRANSPORT_HEADER = 2


class PayloadCsumType(IntEnum):
    """Checksum to update when writing payload."""

    NONE = 0
    INET = 1


class PayloadOperationType(IntEnum):
    """Whether payload is loaded into or written from a register."""

    LOAD = 0
    WRITE = 1


@dataclass
class Payload(Expression):
    """Loads packet payload into a register, or writes it from one."""

    expr_name: ClassVar[str] = "payload"

    operation_type: PayloadOperationType = PayloadOperationType.LOAD
    dest_register: int = 0
    source_register: int = 0
    base: PayloadBase | int = PayloadBase.LL_HEADER
    offset: int = 0
    length: int = 0
    csum_type: PayloadCsumType | int = PayloadCsumType.NONE
    csum_offset: int = 0
    csum_flags: int = 0

    def marshal_data(self, family: int) -> bytes:
        if self.operation_type == PayloadOperationType.WRITE:
            attrs = [Attribute(NFTA_PAYLOAD_SREG, BIG_ENDIAN.put_uint32(self.source_register))]
        else:
            attrs = [Attribute(NFTA_PAYLOAD_DREG, BIG_ENDIAN.put_uint32(self.dest_register))]
        attrs += [
            Attribute(NFTA_PAYLOAD_BASE, BIG_ENDIAN.put_uint32(int(self.base))),
            Attribute(NFTA_PAYLOAD_OFFSET, BIG_ENDIAN.put_uint32(self.offset)),
            Attribute(NFTA_PAYLOAD_LEN, BIG_ENDIAN.put_uint32(self.length)),
        ]
        if int(self.csum_type) > 0:
            attrs += [
                Attribute(NFTA_PAYLOAD_CSUM_TYPE, BIG_ENDIAN.put_uint32(int(self.csum_type))),
                Attribute(NFTA_PAYLOAD_CSUM_OFFSET, BIG_ENDIAN.put_uint32(self.csum_offset)),
            ]
            if self.csum_flags > 0:
                attrs.append(
                    Attribute(NFTA_PAYLOAD_CSUM_FLAGS, BIG_ENDIAN.put_uint32(self.csum_flags))
                )
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Payload:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_PAYLOAD_DREG:
                expr.dest_register = attr.uint32()
            elif attr.kind == NFTA_PAYLOAD_SREG:
                expr.source_register = attr.uint32()
                expr.operation_type = PayloadOperationType.WRITE
            elif attr.kind == NFTA_PAYLOAD_BASE:
                expr.base = _coerce(PayloadBase, attr.uint32())
            elif attr.kind == NFTA_PAYLOAD_OFFSET:
                expr.offset = attr.uint32()
            elif attr.kind == NFTA_PAYLOAD_LEN:
                expr.length = attr.uint32()
            elif attr.kind == NFTA_PAYLOAD_CSUM_TYPE:
                expr.csum_type = _coerce(PayloadCsumType, attr.uint32())
            elif attr.kind == NFTA_PAYLOAD_CSUM_OFFSET:
                expr.csum_offset = attr.uint32()
            elif attr.kind == NFTA_PAYLOAD_CSUM_FLAGS:
                expr.csum_flags = attr.uint32()
        return expr


class ExthdrOp(IntEnum):
    """Which kind of extension header to inspect."""

    IPV6 = 0
    TCPOPT = 1


@dataclass
class Exthdr(Expression):
    """Loads or writes IPv6 extension headers and TCP options."""

    expr_name: ClassVar[str] = "exthdr"

    dest_register: int = 0
    type: int = 0
    offset: int = 0
    length: int = 0
    flags: int = 0
    op: ExthdrOp | int = ExthdrOp.IPV6
    source_register: int = 0

    def marshal_data(self, family: int) -> bytes:
        # Source and destination registers select different operations;
        # mixing them is rejected by the kernel.
        if self.source_register:
            attrs = [Attribute(NFTA_EXTHDR_SREG, BIG_ENDIAN.put_uint32(self.source_register))]
        else:
            attrs = [Attribute(NFTA_EXTHDR_DREG, BIG_ENDIAN.put_uint32(self.dest_register))]
        attrs += [
            Attribute(NFTA_EXTHDR_TYPE, bytes([self.type])),
            Attribute(NFTA_EXTHDR_OFFSET, BIG_ENDIAN.put_uint32(self.offset)),
            Attribute(NFTA_EXTHDR_LEN, BIG_ENDIAN.put_uint32(self.length)),
            Attribute(NFTA_EXTHDR_OP, BIG_ENDIAN.put_uint32(int(self.op))),
        ]
        if self.dest_register:
            attrs.append(Attribute(NFTA_EXTHDR_FLAGS, BIG_ENDIAN.put_uint32(self.flags)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Exthdr:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_EXTHDR_DREG:
                expr.dest_register = attr.uint32()
            elif attr.kind == NFTA_EXTHDR_TYPE:
                expr.type = attr.uint8()
            elif attr.kind == NFTA_EXTHDR_OFFSET:
                expr.offset = attr.uint32()
            elif attr.kind == NFTA_EXTHDR_LEN:
                expr.length = attr.uint32()
            elif attr.kind == NFTA_EXTHDR_FLAGS:
                expr.flags = attr.uint32()
            elif attr.kind == NFTA_EXTHDR_OP:
                expr.op = _coerce(ExthdrOp, attr.uint32())
            elif attr.kind == NFTA_EXTHDR_SREG:
                expr.source_register = attr.uint32()
        return expr


def _nested_value(data: bytes, attr_type: int) -> bytes:
    inner = encode([Attribute(NFTA_DATA_VALUE, bytes(data))])
    return encode([Attribute(NLA_F_NESTED | attr_type, inner)])


def _first_value(attr: Attribute) -> bytes | None:
    nested = attr.nested()
    if nested and nested[0].kind == NFTA_DATA_VALUE:
        return nested[0].data
    return None


@dataclass
class Range(Expression):
    """Compares a register against an inclusive range of values."""

    expr_name: ClassVar[str] = "range"

    op: CmpOp | int = CmpOp.EQ
    register: int = 0
    from_data: bytes = b""
    to_data: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        attrs: list[Attribute] = []
        if self.register > 0:
            attrs.append(Attribute(NFTA_RANGE_SREG, BIG_ENDIAN.put_uint32(self.register)))
        attrs.append(Attribute(NFTA_RANGE_OP, BIG_ENDIAN.put_uint32(int(self.op))))
        out = encode(attrs)
        if self.from_data:
            out += _nested_value(self.from_data, NFTA_RANGE_FROM_DATA)
        if self.to_data:
            out += _nested_value(self.to_data, NFTA_RANGE_TO_DATA)
        return out

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Range:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_RANGE_OP:
                expr.op = _coerce(CmpOp, attr.uint32())
            elif attr.kind == NFTA_RANGE_SREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_RANGE_FROM_DATA:
                value = _first_value(attr)
                if value is not None:
                    expr.from_data = value
            elif attr.kind == NFTA_RANGE_TO_DATA:
                value = _first_value(attr)
                if value is not None:
                    expr.to_data = value
        return expr