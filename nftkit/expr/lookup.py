"""Set lookup expression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_LOOKUP_SET = 1
NFTA_LOOKUP_SREG = 2
NFTA_LOOKUP_DREG = 3
NFTA_LOOKUP_SET_ID = 4
NFTA_LOOKUP_FLAGS = 5

NFT_LOOKUP_F_INV = 1


@dataclass
class Lookup(Expression):
    """Matches a register against the contents of a set."""

    expr_name: ClassVar[str] = "lookup"

    source_register: int = 0
    dest_register: int = 0
    is_dest_reg_set: bool = False
    set_id: int = 0
    set_name: str = ""
    invert: bool = False

    def marshal_data(self, family: int) -> bytes:
        attrs: list[Attribute] = []
        if self.source_register:
            attrs.append(Attribute(NFTA_LOOKUP_SREG, BIG_ENDIAN.put_uint32(self.source_register)))
        if self.is_dest_reg_set:
            attrs.append(Attribute(NFTA_LOOKUP_DREG, BIG_ENDIAN.put_uint32(self.dest_register)))
        if self.invert:
            attrs.append(Attribute(NFTA_LOOKUP_FLAGS, BIG_ENDIAN.put_uint32(NFT_LOOKUP_F_INV)))
        attrs += [
            Attribute(NFTA_LOOKUP_SET, self.set_name.encode() + b"\x00"),
            Attribute(NFTA_LOOKUP_SET_ID, BIG_ENDIAN.put_uint32(self.set_id)),
        ]
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Lookup:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_LOOKUP_SET:
                expr.set_name = attr.string()
            elif attr.kind == NFTA_LOOKUP_SET_ID:
                expr.set_id = attr.uint32()
            elif attr.kind == NFTA_LOOKUP_SREG:
                expr.source_register = attr.uint32()
            elif attr.kind == NFTA_LOOKUP_DREG:
                expr.dest_register = attr.uint32()
                expr.is_dest_reg_set = True
            elif attr.kind == NFTA_LOOKUP_FLAGS:
                expr.invert = bool(attr.uint32() & NFT_LOOKUP_F_INV)
        return expr