"""Decoding expressions by name, and the dynamic set expression."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import NFTA_EXPR_NAME, Expression
from .bitwise import Bitwise
from .counter import Connlimit, Counter, Limit, Quota
from .ct import Ct, CtExpect, CtHelper, CtTimeout
from .flowoffload import FlowOffload
from .hashing import Hash
from .immediate import NFT_REG_VERDICT, Immediate, Verdict
from .log import Log, Queue
from .lookup import Lookup
from .meta import Cmp, Masq, Meta, Notrack
from .nat import NAT, Redir
from .objref import Objref
from .payload import Exthdr, Payload, Range
from .reject import Reject
from .secmark import SecMark
from .sockets import SynProxy
from .xtables import Match, Target

NFTA_EXPR_DATA = 2
NFTA_LIST_ELEM = 1

NFTA_DYNSET_SET_NAME = 1
NFTA_DYNSET_SET_ID = 2
NFTA_DYNSET_OP = 3
NFTA_DYNSET_SREG_KEY = 4
NFTA_DYNSET_SREG_DATA = 5
NFTA_DYNSET_TIMEOUT = 6
NFTA_DYNSET_EXPR = 7
NFTA_DYNSET_FLAGS = 9
NFTA_DYNSET_EXPRESSIONS = 0xA

NFT_DYNSET_F_INV = 1 << 0
NFT_DYNSET_F_EXPR = 1 << 1

_TYPE_MASK = 0x3FFF
_MILLISECOND = timedelta(milliseconds=1)


@dataclass
class Dynset(Expression):
    """Adds or updates set or map elements from incoming packets."""

    expr_name: ClassVar[str] = "dynset"

    src_reg_key: int = 0
    src_reg_data: int = 0
    set_id: int = 0
    set_name: str = ""
    operation: int = 0
    timeout: timedelta = timedelta(0)
    invert: bool = False
    exprs: list[Expression] = field(default_factory=list)

    def marshal_data(self, family: int) -> bytes:
        attrs = [Attribute(NFTA_DYNSET_SREG_KEY, BIG_ENDIAN.put_uint32(self.src_reg_key))]
        if self.src_reg_data:
            attrs.append(Attribute(NFTA_DYNSET_SREG_DATA, BIG_ENDIAN.put_uint32(self.src_reg_data)))
        attrs.append(Attribute(NFTA_DYNSET_OP, BIG_ENDIAN.put_uint32(self.operation)))
        if self.timeout:
            millis = self.timeout // _MILLISECOND
            attrs.append(Attribute(NFTA_DYNSET_TIMEOUT, BIG_ENDIAN.put_uint64(millis)))
        flags = NFT_DYNSET_F_INV if self.invert else 0
        attrs += [
            Attribute(NFTA_DYNSET_SET_NAME, self.set_name.encode() + b"\x00"),
            Attribute(NFTA_DYNSET_SET_ID, BIG_ENDIAN.put_uint32(self.set_id)),
        ]
        if len(self.exprs) == 1:
            attrs.append(Attribute(NFTA_DYNSET_EXPR, self.exprs[0].marshal(family)))
        elif self.exprs:
            flags |= NFT_DYNSET_F_EXPR
            elems = encode(Attribute(NFTA_LIST_ELEM, e.marshal(family)) for e in self.exprs)
            attrs.append(Attribute(NFTA_DYNSET_EXPRESSIONS, elems))
        attrs.append(Attribute(NFTA_DYNSET_FLAGS, BIG_ENDIAN.put_uint32(flags)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Dynset:
        expr = cls()
        for attr in decode(data):
            kind = attr.kind & _TYPE_MASK
            if kind == NFTA_DYNSET_SET_NAME:
                expr.set_name = attr.string()
            elif kind == NFTA_DYNSET_SET_ID:
                expr.set_id = attr.uint32()
            elif kind == NFTA_DYNSET_SREG_KEY:
                expr.src_reg_key = attr.uint32()
            elif kind == NFTA_DYNSET_SREG_DATA:
                expr.src_reg_data = attr.uint32()
            elif kind == NFTA_DYNSET_OP:
                expr.operation = attr.uint32()
            elif kind == NFTA_DYNSET_TIMEOUT:
                expr.timeout = timedelta(milliseconds=attr.uint64())
            elif kind == NFTA_DYNSET_FLAGS:
                expr.invert = bool(attr.uint32() & NFT_DYNSET_F_INV)
            elif kind == NFTA_DYNSET_EXPR:
                parsed = parse_expression(family, attr.data)
                expr.exprs = [] if parsed is None else [parsed]
            elif kind == NFTA_DYNSET_EXPRESSIONS:
                expr.exprs = parse_expression_list(family, attr.data)
        return expr


_EXPRESSION_TYPES: dict[str, type[Expression]] = {
    "ct": Ct,
    "range": Range,
    "meta": Meta,
    "cmp": Cmp,
    "counter": Counter,
    "objref": Objref,
    "payload": Payload,
    "lookup": Lookup,
    "immediate": Immediate,
    "bitwise": Bitwise,
    "redir": Redir,
    "nat": NAT,
    "limit": Limit,
    "quota": Quota,
    "dynset": Dynset,
    "log": Log,
    "exthdr": Exthdr,
    "match": Match,
    "target": Target,
    "connlimit": Connlimit,
    "queue": Queue,
    "flow_offload": FlowOffload,
    "reject": Reject,
    "masq": Masq,
    "hash": Hash,
    "cthelper": CtHelper,
    "synproxy": SynProxy,
    "ctexpect": CtExpect,
    "secmark": SecMark,
    "cttimeout": CtTimeout,
}


def expr_type_from_name(name: str) -> type[Expression] | None:
    """Return the expression class decoded for ``name``, or None if unsupported."""
    return _EXPRESSION_TYPES.get(name)


def parse_expression(family: int, data: bytes) -> Expression | None:
    """Decode one expression (name and data attributes); None if unsupported."""
    name = ""
    result: Expression | None = None
    for attr in decode(data):
        kind = attr.kind & _TYPE_MASK
        if kind == NFTA_EXPR_NAME:
            name = attr.string()
            if name == "notrack":
                result = Notrack()
        elif kind == NFTA_EXPR_DATA:
            expr_type = expr_type_from_name(name)
            if expr_type is None:
                continue
            expr = expr_type.unmarshal(family, attr.data)
            # An immediate writing nothing to the verdict register is a verdict.
            if (
                isinstance(expr, Immediate)
                and expr.register == NFT_REG_VERDICT
                and not expr.data
            ):
                expr = Verdict.unmarshal(family, attr.data)
            result = expr
    return result


def parse_expression_list(family: int, data: bytes) -> list[Expression]:
    """Decode a list of nested expressions, skipping unsupported ones."""
    return [
        expr
        for attr in decode(data)
        if (expr := parse_expression(family, attr.data)) is not None
    ]