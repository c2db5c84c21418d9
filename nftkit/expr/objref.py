"""Object reference and routing expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_OBJREF_IMM_TYPE = 1
NFTA_OBJREF_IMM_NAME = 2

NFTA_RT_DREG = 1
NFTA_RT_KEY = 2


@dataclass
class Objref(Expression):
    """References a stateful object by type and name."""

    expr_name: ClassVar[str] = "objref"

    type: int = 0
    name: str = ""

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_OBJREF_IMM_TYPE, BIG_ENDIAN.put_uint32(self.type)),
                Attribute(NFTA_OBJREF_IMM_NAME, self.name.encode()),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Objref:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_OBJREF_IMM_TYPE:
                expr.type = attr.uint32()
            elif attr.kind == NFTA_OBJREF_IMM_NAME:
                expr.name = attr.string()
        return expr


class RtKey(IntEnum):
    """Which routing information to load."""

    CLASSID = 0
    NEXTHOP4 = 1
    NEXTHOP6 = 2
    TCPMSS = 3


@dataclass
class Rt(Expression):
    """Loads routing information into a register."""

    expr_name: ClassVar[str] = "rt"

    register: int = 0
    key: RtKey | int = RtKey.CLASSID

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_RT_KEY, BIG_ENDIAN.put_uint32(int(self.key))),
                Attribute(NFTA_RT_DREG, BIG_ENDIAN.put_uint32(self.register)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Rt:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_RT_KEY:
                key = attr.uint32()
                try:
                    expr.key = RtKey(key)
                except ValueError:
                    expr.key = key
            elif attr.kind == NFTA_RT_DREG:
                expr.register = attr.uint32()
        return expr