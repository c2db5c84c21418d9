"""Socket and SYN proxy expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_SOCKET_KEY = 1
NFTA_SOCKET_DREG = 2
NFTA_SOCKET_LEVEL = 3

NFT_SOCKET_TRANSPARENT = 0
NFT_SOCKET_MARK = 1
NFT_SOCKET_WILDCARD = 2
NFT_SOCKET_CGROUPV2 = 3

NFTA_SYNPROXY_MSS = 0x01
NFTA_SYNPROXY_WSCALE = 0x02
NFTA_SYNPROXY_FLAGS = 0x03

NF_SYNPROXY_OPT_MSS = 0x01
NF_SYNPROXY_OPT_WSCALE = 0x02
NF_SYNPROXY_OPT_SACK_PERM = 0x04
NF_SYNPROXY_OPT_TIMESTAMP = 0x08
NF_SYNPROXY_OPT_ECN = 0x10


class SocketKey(IntEnum):
    """Which socket property to load."""

    TRANSPARENT = NFT_SOCKET_TRANSPARENT
    MARK = NFT_SOCKET_MARK
    WILDCARD = NFT_SOCKET_WILDCARD
    CGROUPV2 = NFT_SOCKET_CGROUPV2


@dataclass
class Socket(Expression):
    """Loads information about the socket a packet belongs to."""

    expr_name: ClassVar[str] = "socket"

    key: SocketKey | int = SocketKey.TRANSPARENT
    level: int = 0
    register: int = 0

    def marshal_data(self, family: int) -> bytes:
        # The level only matters for cgroupv2, but nft always sends it.
        return encode(
            [
                Attribute(NFTA_SOCKET_DREG, BIG_ENDIAN.put_uint32(self.register)),
                Attribute(NFTA_SOCKET_KEY, BIG_ENDIAN.put_uint32(int(self.key))),
                Attribute(NFTA_SOCKET_LEVEL, BIG_ENDIAN.put_uint32(self.level)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Socket:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_SOCKET_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_SOCKET_KEY:
                value = attr.uint32()
                try:
                    expr.key = SocketKey(value)
                except ValueError:
                    expr.key = value
            elif attr.kind == NFTA_SOCKET_LEVEL:
                expr.level = attr.uint32()
        return expr


@dataclass
class SynProxy(Expression):
    """Answers TCP handshakes on behalf of a backend.

    ``mss_value_set`` and ``wscale_value_set`` mark zero as an intended value.
    """

    expr_name: ClassVar[str] = "synproxy"

    mss: int = 0
    wscale: int = 0
    timestamp: bool = False
    sack_perm: bool = False
    ecn: bool = False
    mss_value_set: bool = False
    wscale_value_set: bool = False

    def marshal_data(self, family: int) -> bytes:
        flags = 0
        if self.mss or self.mss_value_set:
            flags |= NF_SYNPROXY_OPT_MSS
        if self.wscale or self.wscale_value_set:
            flags |= NF_SYNPROXY_OPT_WSCALE
        if self.sack_perm:
            flags |= NF_SYNPROXY_OPT_SACK_PERM
        if self.timestamp:
            flags |= NF_SYNPROXY_OPT_TIMESTAMP
        if self.ecn:
            flags |= NF_SYNPROXY_OPT_ECN
        return encode(
            [
                Attribute(NFTA_SYNPROXY_MSS, BIG_ENDIAN.put_uint16(self.mss)),
                Attribute(NFTA_SYNPROXY_WSCALE, bytes([self.wscale])),
                Attribute(NFTA_SYNPROXY_FLAGS, BIG_ENDIAN.put_uint32(flags)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> SynProxy:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_SYNPROXY_MSS:
                expr.mss = attr.uint16()
            elif attr.kind == NFTA_SYNPROXY_WSCALE:
                expr.wscale = attr.uint8()
            elif attr.kind == NFTA_SYNPROXY_FLAGS:
                flags = attr.uint32()
                expr.mss_value_set = (flags & NF_SYNPROXY_OPT_MSS) == NF_SYNPROXY_OPT_MSS
                expr.wscale_value_set = (
                    flags & NF_SYNPROXY_OPT_WSCALE
                ) == NF_SYNPROXY_OPT_WSCALE
                expr.sack_perm = (
                    flags & NF_SYNPROXY_OPT_SACK_PERM
                ) == NF_SYNPROXY_OPT_SACK_PERM
                expr.timestamp = (
                    flags & NF_SYNPROXY_OPT_TIMESTAMP
                ) == NF_SYNPROXY_OPT_TIMESTAMP
                expr.ecn = (flags & NF_SYNPROXY_OPT_ECN) == NF_SYNPROXY_OPT_ECN
        return expr