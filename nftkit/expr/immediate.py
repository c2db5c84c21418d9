"""Immediate and verdict expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import NLA_F_NESTED, Attribute, decode, encode
from .base import Expression

NFTA_DATA_VALUE = 1
NFTA_DATA_VERDICT = 2

NFTA_VERDICT_CODE = 1
NFTA_VERDICT_CHAIN = 2

NFTA_IMMEDIATE_DREG = 1
NFTA_IMMEDIATE_DATA = 2

NFT_REG_VERDICT = 0


@dataclass
class Immediate(Expression):
    """Loads constant data into a register."""

    expr_name: ClassVar[str] = "immediate"

    register: int = 0
    data: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        imm_data = encode([Attribute(NFTA_DATA_VALUE, bytes(self.data))])
        return encode(
            [
                Attribute(NFTA_IMMEDIATE_DREG, BIG_ENDIAN.put_uint32(self.register)),
                Attribute(NLA_F_NESTED | NFTA_IMMEDIATE_DATA, imm_data),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Immediate:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_IMMEDIATE_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_IMMEDIATE_DATA:
                for nested in attr.nested():
                    if nested.kind == NFTA_DATA_VALUE:
                        expr.data = nested.data
        return expr


class VerdictKind(IntEnum):
    """Verdict codes as defined by netfilter."""

    RETURN = -5
    GOTO = -4
    JUMP = -3
    BREAK = -2
    CONTINUE = -1
    DROP = 0
    ACCEPT = 1
    STOLEN = 2
    QUEUE = 3
    REPEAT = 4
    STOP = 5


def _signed32(v: int) -> int:
    return v - (1 << 32) if v & 0x80000000 else v


@dataclass
class Verdict(Expression):
    """A verdict, optionally naming a chain to jump or go to."""

    expr_name: ClassVar[str] = "immediate"

    kind: VerdictKind | int = VerdictKind.DROP
    chain: str = ""

    def marshal_data(self, family: int) -> bytes:
        attrs = [
            Attribute(NFTA_VERDICT_CODE, BIG_ENDIAN.put_uint32(int(self.kind) & 0xFFFFFFFF))
        ]
        if self.chain:
            attrs.append(Attribute(NFTA_VERDICT_CHAIN, self.chain.encode() + b"\x00"))
        imm_data = encode([Attribute(NLA_F_NESTED | NFTA_DATA_VERDICT, encode(attrs))])
        return encode(
            [
                Attribute(NFTA_IMMEDIATE_DREG, BIG_ENDIAN.put_uint32(NFT_REG_VERDICT)),
                Attribute(NLA_F_NESTED | NFTA_IMMEDIATE_DATA, imm_data),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Verdict:
        expr = cls()
        for attr in decode(data):
            if attr.kind != NFTA_IMMEDIATE_DATA:
                continue
            for nested in attr.nested():
                if nested.kind != NFTA_DATA_VERDICT:
                    continue
                for field in nested.nested():
                    if field.kind == NFTA_VERDICT_CODE:
                        code = _signed32(field.uint32())
                        try:
                            expr.kind = VerdictKind(code)
                        except ValueError:
                            expr.kind = code
                    elif field.kind == NFTA_VERDICT_CHAIN:
                        expr.chain = field.data.strip(b"\x00").decode(
                            "utf-8", "surrogateescape"
                        )
        return expr