"""Connection tracking expressions: ct, ct helper, ct expectation and ct timeout."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import ClassVar, Mapping

from ..binaryutil import BIG_ENDIAN
from ..nlattr import NLA_F_NESTED, Attribute, decode, encode
from .base import Expression

IPPROTO_UDP = 17

NFTA_CT_DREG = 1
NFTA_CT_KEY = 2
NFTA_CT_DIRECTION = 3
NFTA_CT_SREG = 4

NFTA_CT_HELPER_NAME = 1
NFTA_CT_HELPER_L3PROTO = 2
NFTA_CT_HELPER_L4PROTO = 3

NFTA_CT_EXPECT_L3PROTO = 0x01
NFTA_CT_EXPECT_L4PROTO = 0x02
NFTA_CT_EXPECT_DPORT = 0x03
NFTA_CT_EXPECT_TIMEOUT = 0x04
NFTA_CT_EXPECT_SIZE = 0x05

NFTA_CT_TIMEOUT_L3PROTO = 0x01
NFTA_CT_TIMEOUT_L4PROTO = 0x02
NFTA_CT_TIMEOUT_DATA = 0x03

CT_STATE_BIT_INVALID = 1
CT_STATE_BIT_ESTABLISHED = 2
CT_STATE_BIT_RELATED = 4
CT_STATE_BIT_NEW = 8
CT_STATE_BIT_UNTRACKED = 64

CT_STATE_TCP_SYN_SENT = 0
CT_STATE_TCP_SYN_RECV = 1
CT_STATE_TCP_ESTABLISHED = 2
CT_STATE_TCP_FIN_WAIT = 3
CT_STATE_TCP_CLOSE_WAIT = 4
CT_STATE_TCP_LAST_ACK = 5
CT_STATE_TCP_TIME_WAIT = 6
CT_STATE_TCP_CLOSE = 7
CT_STATE_TCP_SYN_SENT2 = 8
CT_STATE_TCP_RETRANS = 9
CT_STATE_TCP_UNACK = 10

CT_STATE_TCP_TIMEOUT_DEFAULTS: Mapping[int, int] = MappingProxyType(
    {
        CT_STATE_TCP_SYN_SENT: 120,
        CT_STATE_TCP_SYN_RECV: 60,
        CT_STATE_TCP_ESTABLISHED: 43200,
        CT_STATE_TCP_FIN_WAIT: 120,
        CT_STATE_TCP_CLOSE_WAIT: 60,
        CT_STATE_TCP_LAST_ACK: 30,
        CT_STATE_TCP_TIME_WAIT: 120,
        CT_STATE_TCP_CLOSE: 10,
        CT_STATE_TCP_SYN_SENT2: 120,
        CT_STATE_TCP_RETRANS: 300,
        CT_STATE_TCP_UNACK: 300,
    }
)

CT_STATE_UDP_UNREPLIED = 0
CT_STATE_UDP_REPLIED = 1

CT_STATE_UDP_TIMEOUT_DEFAULTS: Mapping[int, int] = MappingProxyType(
    {
        CT_STATE_UDP_UNREPLIED: 30,
        CT_STATE_UDP_REPLIED: 180,
    }
)


class CtKey(IntEnum):
    """Which piece of conntrack information to load."""

    STATE = 0
    DIRECTION = 1
    STATUS = 2
    MARK = 3
    SECMARK = 4
    EXPIRATION = 5
    HELPER = 6
    L3PROTOCOL = 7
    SRC = 8
    DST = 9
    PROTOCOL = 10
    PROTOSRC = 11
    PROTODST = 12
    LABELS = 13
    PKTS = 14
    BYTES = 15
    AVGPKT = 16
    ZONE = 17
    EVENTMASK = 18


_DIRECTIONAL_KEYS = frozenset({CtKey.SRC, CtKey.DST, CtKey.PROTOSRC, CtKey.PROTODST})


def _ct_key(value: int) -> CtKey | int:
    try:
        return CtKey(value)
    except ValueError:
        return value


def _timeout_defaults(l4proto: int) -> Mapping[int, int]:
    if l4proto == IPPROTO_UDP:
        return CT_STATE_UDP_TIMEOUT_DEFAULTS
    return CT_STATE_TCP_TIMEOUT_DEFAULTS


@dataclass
class Ct(Expression):
    """Loads conntrack information into a register, or sets it from one."""

    expr_name: ClassVar[str] = "ct"

    register: int = 0
    source_register: bool = False
    key: CtKey | int = CtKey.STATE
    direction: int = 0

    def marshal_data(self, family: int) -> bytes:
        reg_type = NFTA_CT_SREG if self.source_register else NFTA_CT_DREG
        attrs = [
            Attribute(NFTA_CT_KEY, BIG_ENDIAN.put_uint32(int(self.key))),
            Attribute(reg_type, BIG_ENDIAN.put_uint32(self.register)),
        ]
        if self.key in _DIRECTIONAL_KEYS:
            attrs.append(Attribute(NFTA_CT_DIRECTION, BIG_ENDIAN.put_uint32(self.direction)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Ct:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CT_KEY:
                expr.key = _ct_key(attr.uint32())
            elif attr.kind == NFTA_CT_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_CT_DIRECTION:
                expr.direction = attr.uint32()
        return expr


@dataclass
class CtHelper(Expression):
    """Assigns a conntrack helper object."""

    expr_name: ClassVar[str] = "cthelper"

    name: str = ""
    l3proto: int = 0
    l4proto: int = 0

    def marshal_data(self, family: int) -> bytes:
        attrs = [Attribute(NFTA_CT_HELPER_NAME, self.name.encode())]
        if self.l3proto:
            attrs.append(Attribute(NFTA_CT_HELPER_L3PROTO, BIG_ENDIAN.put_uint16(self.l3proto)))
        if self.l4proto:
            attrs.append(Attribute(NFTA_CT_HELPER_L4PROTO, bytes([self.l4proto])))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> CtHelper:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CT_HELPER_NAME:
                expr.name = attr.string()
            elif attr.kind == NFTA_CT_HELPER_L3PROTO:
                expr.l3proto = attr.uint16()
            elif attr.kind == NFTA_CT_HELPER_L4PROTO:
                expr.l4proto = attr.uint8()
        return expr


@dataclass
class CtExpect(Expression):
    """Creates a conntrack expectation."""

    expr_name: ClassVar[str] = "ctexpect"

    l3proto: int = 0
    l4proto: int = 0
    dport: int = 0
    timeout: int = 0
    size: int = 0

    def marshal_data(self, family: int) -> bytes:
        # Everything but l3proto is required; l3proto defaults to the table family.
        attrs = [
            Attribute(NFTA_CT_EXPECT_L4PROTO, bytes([self.l4proto])),
            Attribute(NFTA_CT_EXPECT_DPORT, BIG_ENDIAN.put_uint16(self.dport)),
            Attribute(NFTA_CT_EXPECT_TIMEOUT, BIG_ENDIAN.put_uint32(self.timeout)),
            Attribute(NFTA_CT_EXPECT_SIZE, bytes([self.size])),
        ]
        if self.l3proto:
            attrs.append(Attribute(NFTA_CT_EXPECT_L3PROTO, BIG_ENDIAN.put_uint16(self.l3proto)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> CtExpect:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CT_EXPECT_L3PROTO:
                expr.l3proto = attr.uint16()
            elif attr.kind == NFTA_CT_EXPECT_L4PROTO:
                expr.l4proto = attr.uint8()
            elif attr.kind == NFTA_CT_EXPECT_DPORT:
                expr.dport = attr.uint16()
            elif attr.kind == NFTA_CT_EXPECT_TIMEOUT:
                expr.timeout = attr.uint32()
            elif attr.kind == NFTA_CT_EXPECT_SIZE:
                expr.size = attr.uint8()
        return expr


@dataclass
class CtTimeout(Expression):
    """A conntrack timeout policy, overlaid on the protocol's defaults."""

    expr_name: ClassVar[str] = "cttimeout"

    l3proto: int = 0
    l4proto: int = 0
    policy: dict[int, int] = field(default_factory=dict)

    def marshal_data(self, family: int) -> bytes:
        policy = {**_timeout_defaults(self.l4proto), **self.policy}
        policy_data = encode(
            Attribute(state + 1, BIG_ENDIAN.put_uint32(timeout))
            for state, timeout in sorted(policy.items())
        )
        return encode(
            [
                Attribute(NFTA_CT_TIMEOUT_L3PROTO, BIG_ENDIAN.put_uint16(self.l3proto)),
                Attribute(NFTA_CT_TIMEOUT_L4PROTO, bytes([self.l4proto])),
                Attribute(NLA_F_NESTED | NFTA_CT_TIMEOUT_DATA, policy_data),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> CtTimeout:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_CT_TIMEOUT_L3PROTO:
                expr.l3proto = attr.uint16()
            elif attr.kind == NFTA_CT_TIMEOUT_L4PROTO:
                expr.l4proto = attr.uint8()
            elif attr.kind == NFTA_CT_TIMEOUT_DATA:
                entries = attr.nested()
                if entries:
                    policy = dict(_timeout_defaults(expr.l4proto))
                    for entry in entries:
                        policy[entry.kind - 1] = entry.uint32()
                    expr.policy = policy
        return expr