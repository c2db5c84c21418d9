"""Security mark expression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_SECMARK_CTX = 0x01


@dataclass
class SecMark(Expression):
    """Sets a security context on packets."""

    expr_name: ClassVar[str] = "secmark"

    ctx: str = ""

    def marshal_data(self, family: int) -> bytes:
        return encode([Attribute(NFTA_SECMARK_CTX, self.ctx.encode())])

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> SecMark:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_SECMARK_CTX:
                expr.ctx = attr.string()
        return expr