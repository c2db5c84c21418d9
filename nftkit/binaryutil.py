"""Byte-order helpers that return freshly allocated byte strings."""

from __future__ import annotations

import struct
import sys
from typing import Literal

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class ByteOrder:
    """Encodes and decodes fixed-width unsigned integers in one byte order."""

    __slots__ = ("byteorder",)

    def __init__(self, byteorder: Literal["big", "little"]) -> None:
        if byteorder not in ("big", "little"):
            raise ValueError(f"unknown byte order {byteorder!r}")
        self.byteorder = byteorder

    def __repr__(self) -> str:
        return f"ByteOrder({self.byteorder!r})"

    def _put(self, v: int, size: int) -> bytes:
        return v.to_bytes(size, self.byteorder)

    def _get(self, b: bytes, size: int) -> int:
        if len(b) < size:
            raise ValueError(f"need {size} bytes, got {len(b)}")
        return int.from_bytes(b[:size], self.byteorder)

    def put_uint16(self, v: int) -> bytes:
        return self._put(v, 2)

    def put_uint32(self, v: int) -> bytes:
        return self._put(v, 4)

    def put_uint64(self, v: int) -> bytes:
        return self._put(v, 8)

    def uint16(self, b: bytes) -> int:
        return self._get(b, 2)

    def uint32(self, b: bytes) -> int:
        return self._get(b, 4)

    def uint64(self, b: bytes) -> int:
        return self._get(b, 8)


NATIVE_ENDIAN = ByteOrder(sys.byteorder)
BIG_ENDIAN = ByteOrder("big")


def put_int32(v: int) -> bytes:
    """Encode a signed 32-bit integer in native byte order."""
    return struct.pack("=i", v)


def int32(b: bytes) -> int:
    """Decode a signed 32-bit integer in native byte order."""
    if len(b) < 4:
        raise ValueError(f"need 4 bytes, got {len(b)}")
    return struct.unpack_from("=i", b)[0]


def put_string(s: str) -> bytes:
    """Encode a string without a terminator."""
    return s.encode(_ENCODING, _ERRORS)


def string(b: bytes) -> str:
    """Decode bytes into a string, dropping trailing NUL bytes."""
    return bytes(b).rstrip(b"\x00").decode(_ENCODING, _ERRORS)