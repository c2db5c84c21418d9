"""Flow offload expression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTNL_EXPR_FLOW_TABLE_NAME = 1


@dataclass
class FlowOffload(Expression):
    """Offloads matching flows to the named flowtable."""

    expr_name: ClassVar[str] = "flow_offload"

    name: str = ""

    def marshal_data(self, family: int) -> bytes:
        return encode([Attribute(NFTNL_EXPR_FLOW_TABLE_NAME, self.name.encode())])

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> FlowOffload:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTNL_EXPR_FLOW_TABLE_NAME:
                expr.name = attr.string()
        return expr