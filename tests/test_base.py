from dataclasses import dataclass
from typing import ClassVar

import pytest

from nftkit.expr.base import (
    NFTA_EXPR_DATA,
    NFTA_EXPR_NAME,
    Expression,
    marshal,
    marshal_data,
    unmarshal,
)
from nftkit.nlattr import NLA_F_NESTED, Attribute, decode, encode


@dataclass
class _Echo(Expression):
    expr_name: ClassVar[str] = "echo"
    body: bytes = b""
    family: int = 0

    def marshal_data(self, family):
        return encode([Attribute(1, self.body), Attribute(2, bytes([family]))])

    @classmethod
    def unmarshal(cls, family, data):
        result = cls(family=family)
        for attr in decode(data):
            if attr.kind == 1:
                result.body = attr.data
        return result


def test_marshal_layout():
    expr = _Echo(body=b"xy")
    attrs = decode(expr.marshal(2))
    assert attrs[0] == Attribute(NFTA_EXPR_NAME, b"echo\x00")
    assert attrs[1].type == NLA_F_NESTED | NFTA_EXPR_DATA
    assert attrs[1].data == expr.marshal_data(2)


def test_module_functions_match_methods():
    expr = _Echo(body=b"abc")
    assert marshal(10, expr) == expr.marshal(10)
    assert marshal_data(10, expr) == expr.marshal_data(10)


def test_unmarshal_round_trip():
    expr = _Echo(body=b"abc", family=2)
    data_attr = decode(expr.marshal(2))[1]
    assert unmarshal(2, data_attr.data, _Echo) == expr


def test_family_reaches_marshal_data():
    attrs = decode(_Echo().marshal_data(7))
    assert attrs[1].data == bytes([7])


def test_abstract_expression_cannot_be_built():
    with pytest.raises(TypeError):
        Expression()


def test_incomplete_subclass_cannot_be_built():
    class Partial(Expression):
        expr_name = "partial"

    with pytest.raises(TypeError):
        marshal(0, Partial())