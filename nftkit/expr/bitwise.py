"""Bitwise and byte-order expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import NLA_F_NESTED, Attribute, decode, encode
from .base import Expression

NFTA_DATA_VALUE = 1

NFTA_BITWISE_SREG = 1
NFTA_BITWISE_DREG = 2
NFTA_BITWISE_LEN = 3
NFTA_BITWISE_MASK = 4
NFTA_BITWISE_XOR = 5

NFTA_BYTEORDER_SREG = 1
NFTA_BYTEORDER_DREG = 2
NFTA_BYTEORDER_OP = 3
NFTA_BYTEORDER_LEN = 4
NFTA_BYTEORDER_SIZE = 5


def _data_value(attr: Attribute) -> bytes | None:
    for nested in attr.nested():
        if nested.kind == NFTA_DATA_VALUE:
            return nested.data
    return None


@dataclass
class Bitwise(Expression):
    """Computes ``(register & mask) ^ xor`` into a destination register."""

    expr_name: ClassVar[str] = "bitwise"

    source_register: int = 0
    dest_register: int = 0
    length: int = 0
    mask: bytes = b""
    xor: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        mask = encode([Attribute(NFTA_DATA_VALUE, bytes(self.mask))])
        xor = encode([Attribute(NFTA_DATA_VALUE, bytes(self.xor))])
        return encode(
            [
                Attribute(NFTA_BITWISE_SREG, BIG_ENDIAN.put_uint32(self.source_register)),
                Attribute(NFTA_BITWISE_DREG, BIG_ENDIAN.put_uint32(self.dest_register)),
                Attribute(NFTA_BITWISE_LEN, BIG_ENDIAN.put_uint32(self.length)),
                Attribute(NLA_F_NESTED | NFTA_BITWISE_MASK, mask),
                Attribute(NLA_F_NESTED | NFTA_BITWISE_XOR, xor),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Bitwise:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_BITWISE_SREG:
                expr.source_register = attr.uint32()
            elif attr.kind == NFTA_BITWISE_DREG:
                expr.dest_register = attr.uint32()
            elif attr.kind == NFTA_BITWISE_LEN:
                expr.length = attr.uint32()
            elif attr.kind == NFTA_BITWISE_MASK:
                value = _data_value(attr)
                if value is not None:
                    expr.mask = value
            elif attr.kind == NFTA_BITWISE_XOR:
                value = _data_value(attr)
                if value is not None:
                    expr.xor = value
        return expr


class ByteorderOp(IntEnum):
    """Direction of a byte-order conversion."""

    NTOH = 0
    HTON = 1


@dataclass
class Byteorder(Expression):
    """Converts register contents between host and network byte order."""

    expr_name: ClassVar[str] = "byteorder"

    source_register: int = 0
    dest_register: int = 0
    op: ByteorderOp | int = ByteorderOp.NTOH
    length: int = 0
    size: int = 0

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_BYTEORDER_SREG, BIG_ENDIAN.put_uint32(self.source_register)),
                Attribute(NFTA_BYTEORDER_DREG, BIG_ENDIAN.put_uint32(self.dest_register)),
                Attribute(NFTA_BYTEORDER_OP, BIG_ENDIAN.put_uint32(int(self.op))),
                Attribute(NFTA_BYTEORDER_LEN, BIG_ENDIAN.put_uint32(self.length)),
                Attribute(NFTA_BYTEORDER_SIZE, BIG_ENDIAN.put_uint32(self.size)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Byteorder:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_BYTEORDER_SREG:
                expr.source_register = attr.uint32()
            elif attr.kind == NFTA_BYTEORDER_DREG:
                expr.dest_register = attr.uint32()
            elif attr.kind == NFTA_BYTEORDER_OP:
                op = attr.uint32()
                try:
                    expr.op = ByteorderOp(op)
                except ValueError:
                    expr.op = op
            elif attr.kind == NFTA_BYTEORDER_LEN:
                expr.length = attr.uint32()
            elif attr.kind == NFTA_BYTEORDER_SIZE:
                expr.size = attr.uint32()
        return expr