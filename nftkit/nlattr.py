"""Netlink attribute (TLV) encoding and decoding."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

from .binaryutil import BIG_ENDIAN

NLA_F_NESTED = 0x8000
NLA_F_NET_BYTEORDER = 0x4000
NLA_TYPE_MASK = ~(NLA_F_NESTED | NLA_F_NET_BYTEORDER) & 0xFFFF

_HEADER = struct.Struct("=HH")
_ALIGNTO = 4


class AttributeDecodeError(ValueError):
    """Raised for malformed attribute streams or payloads."""


def _align(n: int) -> int:
    return (n + _ALIGNTO - 1) & ~(_ALIGNTO - 1)


@dataclass(frozen=True)
class Attribute:
    """One netlink attribute; ``type`` keeps any flag bits."""

    type: int
    data: bytes = b""

    @property
    def kind(self) -> int:
        """The attribute type without the nested and byte-order flags."""
        return self.type & NLA_TYPE_MASK

    @property
    def is_nested(self) -> bool:
        return bool(self.type & NLA_F_NESTED)

    def _fixed(self, size: int) -> bytes:
        if len(self.data) != size:
            raise AttributeDecodeError(
                f"attribute {self.kind}: expected {size} bytes, got {len(self.data)}"
            )
        return self.data

    def uint8(self) -> int:
        return self._fixed(1)[0]

    def uint16(self) -> int:
        return BIG_ENDIAN.uint16(self._fixed(2))

    def uint32(self) -> int:
        return BIG_ENDIAN.uint32(self._fixed(4))

    def uint64(self) -> int:
        return BIG_ENDIAN.uint64(self._fixed(8))

    def string(self) -> str:
        """Decode the payload as a string, dropping one trailing NUL."""
        return self.data.removesuffix(b"\x00").decode("utf-8", "surrogateescape")

    def nested(self) -> list[Attribute]:
        """Decode the payload as a list of attributes."""
        return decode(self.data)


def encode(attrs: Iterable[Attribute]) -> bytes:
    """Serialise attributes, padding each to a 4-byte boundary."""
    out = bytearray()
    for attr in attrs:
        length = _HEADER.size + len(attr.data)
        if length > 0xFFFF:
            raise ValueError(f"attribute {attr.kind} too large: {length} bytes")
        if not 0 <= attr.type <= 0xFFFF:
            raise ValueError(f"attribute type {attr.type} out of range")
        out += _HEADER.pack(length, attr.type)
        out += attr.data
        out += bytes(_align(length) - length)
    return bytes(out)


def decode(data: bytes) -> list[Attribute]:
    """Parse a stream of attributes."""
    buf = bytes(data)
    attrs: list[Attribute] = []
    offset = 0
    while offset < len(buf):
        remaining = len(buf) - offset
        if remaining < _HEADER.size:
            raise AttributeDecodeError("invalid attribute; length too short or too large")
        length, attr_type = _HEADER.unpack_from(buf, offset)
        if length > remaining:
            raise AttributeDecodeError("invalid attribute; length too short or too large")
        if length == 0:
            attrs.append(Attribute(attr_type, b""))
            offset += _HEADER.size
            continue
        if length < _HEADER.size:
            raise AttributeDecodeError("invalid attribute; length too short or too large")
        attrs.append(Attribute(attr_type, buf[offset + _HEADER.size:offset + length]))
        offset += _align(length)
    return attrs