"""Common interface of nftables rule expressions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, TypeVar

from ..nlattr import NLA_F_NESTED, Attribute, encode

NFTA_EXPR_NAME = 1
NFTA_EXPR_DATA = 2

E = TypeVar("E", bound="Expression")


class Expression(ABC):
    """An expression that can be serialised into netlink attributes."""

    expr_name: ClassVar[str]

    def marshal(self, family: int) -> bytes:
        """Serialise the expression with its name and nested data."""
        return encode(
            [
                Attribute(NFTA_EXPR_NAME, self.expr_name.encode() + b"\x00"),
                Attribute(NLA_F_NESTED | NFTA_EXPR_DATA, self.marshal_data(family)),
            ]
        )

    @abstractmethod
    def marshal_data(self, family: int) -> bytes:
        """Serialise only the expression's data attributes."""

    @classmethod
    @abstractmethod
    def unmarshal(cls: type[E], family: int, data: bytes) -> E:
        """Build an expression from its data attributes."""


def marshal(family: int, expr: Expression) -> bytes:
    """Serialise an expression."""
    return expr.marshal(family)


def marshal_data(family: int, expr: Expression) -> bytes:
    """Serialise an expression's data attributes."""
    return expr.marshal_data(family)


def unmarshal(family: int, data: bytes, expr_type: type[E]) -> E:
    """Build an expression of the given type from its data attributes."""
    return expr_type.unmarshal(family, data)