"""NAT, redirect and transparent proxy expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression
from .meta import (
    NF_NAT_RANGE_PERSISTENT,
    NF_NAT_RANGE_PREFIX,
    NF_NAT_RANGE_PROTO_RANDOM,
    NF_NAT_RANGE_PROTO_RANDOM_FULLY,
    NF_NAT_RANGE_PROTO_SPECIFIED,
)

NFTA_NAT_TYPE = 1
NFTA_NAT_FAMILY = 2
NFTA_NAT_REG_ADDR_MIN = 3
NFTA_NAT_REG_ADDR_MAX = 4
NFTA_NAT_REG_PROTO_MIN = 5
NFTA_NAT_REG_PROTO_MAX = 6
NFTA_NAT_FLAGS = 7

NFTA_REDIR_REG_PROTO_MIN = 1
NFTA_REDIR_REG_PROTO_MAX = 2
NFTA_REDIR_FLAGS = 3

NFTA_TPROXY_FAMILY = 0x01
NFTA_TPROXY_REG_ADDR = 0x02
NFTA_TPROXY_REG_PORT = 0x03


class NATType(IntEnum):
    """Source or destination NAT."""

    SOURCE_NAT = 0
    DEST_NAT = 1


@dataclass
class NAT(Expression):
    """Network address translation using addresses and ports from registers."""

    expr_name: ClassVar[str] = "nat"

    type: NATType | int = NATType.SOURCE_NAT
    family: int = 0
    reg_addr_min: int = 0
    reg_addr_max: int = 0
    reg_proto_min: int = 0
    reg_proto_max: int = 0
    random: bool = False
    fully_random: bool = False
    persistent: bool = False
    prefix: bool = False
    specified: bool = False

    def marshal_data(self, family: int) -> bytes:
        attrs = [
            Attribute(NFTA_NAT_TYPE, BIG_ENDIAN.put_uint32(int(self.type))),
            Attribute(NFTA_NAT_FAMILY, BIG_ENDIAN.put_uint32(self.family)),
        ]
        if self.reg_addr_min:
            attrs.append(Attribute(NFTA_NAT_REG_ADDR_MIN, BIG_ENDIAN.put_uint32(self.reg_addr_min)))
            if self.reg_addr_max:
                attrs.append(
                    Attribute(NFTA_NAT_REG_ADDR_MAX, BIG_ENDIAN.put_uint32(self.reg_addr_max))
                )
        if self.reg_proto_min:
            attrs.append(
                Attribute(NFTA_NAT_REG_PROTO_MIN, BIG_ENDIAN.put_uint32(self.reg_proto_min))
            )
            if self.reg_proto_max:
                attrs.append(
                    Attribute(NFTA_NAT_REG_PROTO_MAX, BIG_ENDIAN.put_uint32(self.reg_proto_max))
                )
        flags = 0
        if self.random:
            flags |= NF_NAT_RANGE_PROTO_RANDOM
        if self.fully_random:
            flags |= NF_NAT_RANGE_PROTO_RANDOM_FULLY
        if self.persistent:
            flags |= NF_NAT_RANGE_PERSISTENT
        if self.prefix:
            flags |= NF_NAT_RANGE_PREFIX
        if self.specified:
            flags |= NF_NAT_RANGE_PROTO_SPECIFIED
        if flags:
            attrs.append(Attribute(NFTA_NAT_FLAGS, BIG_ENDIAN.put_uint32(flags)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> NAT:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_NAT_TYPE:
                value = attr.uint32()
                try:
                    expr.type = NATType(value)
                except ValueError:
                    expr.type = value
            elif attr.kind == NFTA_NAT_FAMILY:
                expr.family = attr.uint32()
            elif attr.kind == NFTA_NAT_REG_ADDR_MIN:
                expr.reg_addr_min = attr.uint32()
            elif attr.kind == NFTA_NAT_REG_ADDR_MAX:
                expr.reg_addr_max = attr.uint32()
            elif attr.kind == NFTA_NAT_REG_PROTO_MIN:
                expr.reg_proto_min = attr.uint32()
            elif attr.kind == NFTA_NAT_REG_PROTO_MAX:
                expr.reg_proto_max = attr.uint32()
            elif attr.kind == NFTA_NAT_FLAGS:
                flags = attr.uint32()
                expr.persistent = bool(flags & NF_NAT_RANGE_PERSISTENT)
                expr.random = bool(flags & NF_NAT_RANGE_PROTO_RANDOM)
                expr.fully_random = bool(flags & NF_NAT_RANGE_PROTO_RANDOM_FULLY)
                expr.prefix = bool(flags & NF_NAT_RANGE_PREFIX)
                expr.specified = bool(flags & NF_NAT_RANGE_PROTO_SPECIFIED)
        return expr


@dataclass
class Redir(Expression):
    """Redirects packets to the local machine, optionally to other ports."""

    expr_name: ClassVar[str] = "redir"

    register_proto_min: int = 0
    register_proto_max: int = 0
    flags: int = 0

    def marshal_data(self, family: int) -> bytes:
        attrs: list[Attribute] = []
        if self.register_proto_min > 0:
            attrs.append(
                Attribute(NFTA_REDIR_REG_PROTO_MIN, BIG_ENDIAN.put_uint32(self.register_proto_min))
            )
        if self.register_proto_max > 0:
            attrs.append(
                Attribute(NFTA_REDIR_REG_PROTO_MAX, BIG_ENDIAN.put_uint32(self.register_proto_max))
            )
        if self.flags > 0:
            attrs.append(Attribute(NFTA_REDIR_FLAGS, BIG_ENDIAN.put_uint32(self.flags)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Redir:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_REDIR_REG_PROTO_MIN:
                expr.register_proto_min = attr.uint32()
            elif attr.kind == NFTA_REDIR_REG_PROTO_MAX:
                expr.register_proto_max = attr.uint32()
            elif attr.kind == NFTA_REDIR_FLAGS:
                expr.flags = attr.uint32()
        return expr


@dataclass
class TProxy(Expression):
    """Transparent proxying to an address and port held in registers."""

    expr_name: ClassVar[str] = "tproxy"

    family: int = 0
    table_family: int = 0
    reg_addr: int = 0
    reg_port: int = 0

    def marshal_data(self, family: int) -> bytes:
        attrs = [
            Attribute(NFTA_TPROXY_FAMILY, BIG_ENDIAN.put_uint32(self.family)),
            Attribute(NFTA_TPROXY_REG_PORT, BIG_ENDIAN.put_uint32(self.reg_port)),
        ]
        if self.reg_addr:
            attrs.append(Attribute(NFTA_TPROXY_REG_ADDR, BIG_ENDIAN.put_uint32(self.reg_addr)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> TProxy:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_TPROXY_FAMILY:
                expr.family = attr.uint32() & 0xFF
            elif attr.kind == NFTA_TPROXY_REG_PORT:
                expr.reg_port = attr.uint32()
            elif attr.kind == NFTA_TPROXY_REG_ADDR:
                expr.reg_addr = attr.uint32()
        return expr