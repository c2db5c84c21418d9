"""Native-endian, natively aligned encoding of xtables info payloads.

The alignment follows the platform's C ABI, as the kernel expects for
match and target info structures.
"""

from __future__ import annotations

import struct

from . import binaryutil
from .binaryutil import BIG_ENDIAN, NATIVE_ENDIAN


def _alignment(code: str) -> int:
    return struct.calcsize("@B" + code) - struct.calcsize("@" + code)


UINT16_ALIGN_MASK = _alignment("H") - 1
UINT32_ALIGN_MASK = _alignment("I") - 1
UINT64_ALIGN_MASK = _alignment("Q") - 1
INT32_ALIGN_MASK = _alignment("i") - 1
UINT_SIZE = struct.calcsize("@I")

_PADDING = bytes(UINT64_ALIGN_MASK)


class AlignedBuffEOF(EOFError):
    """Raised when reading beyond the available payload."""

    def __init__(self, message: str = "not enough data left") -> None:
        super().__init__(message)


class AlignedBuff:
    """A buffer for writing and reading aligned values in native byte order."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)
        self._pos = 0

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def payload(self) -> bytes:
        """Return the written data padded to the next uint64 alignment."""
        self._align_write(UINT64_ALIGN_MASK)
        return bytes(self._data)

    # reading

    def _align_checked_read(self, mask: int) -> None:
        self._pos = (self._pos + mask) & ~mask
        if self._pos > len(self._data) - (mask + 1):
            raise AlignedBuffEOF()

    def _take(self, size: int) -> bytes:
        chunk = bytes(self._data[self._pos:self._pos + size])
        if len(chunk) < size:
            raise AlignedBuffEOF()
        self._pos += size
        return chunk

    def _read_aligned(self, mask: int, size: int) -> bytes:
        self._align_checked_read(mask)
        return self._take(size)

    def bytes_aligned32(self, size: int) -> bytes:
        """Read ``size`` bytes starting at uint32 alignment."""
        self._align_checked_read(UINT32_ALIGN_MASK)
        if self._pos > len(self._data) - size:
            raise AlignedBuffEOF()
        return self._take(size)

    def uint8(self) -> int:
        if self._pos >= len(self._data):
            raise AlignedBuffEOF()
        v = self._data[self._pos]
        self._pos += 1
        return v

    def uint16(self) -> int:
        return NATIVE_ENDIAN.uint16(self._read_aligned(UINT16_ALIGN_MASK, 2))

    def uint16_be(self) -> int:
        return BIG_ENDIAN.uint16(self._read_aligned(UINT16_ALIGN_MASK, 2))

    def uint32(self) -> int:
        return NATIVE_ENDIAN.uint32(self._read_aligned(UINT32_ALIGN_MASK, 4))

    def uint64(self) -> int:
        return NATIVE_ENDIAN.uint64(self._read_aligned(UINT64_ALIGN_MASK, 8))

    def int32(self) -> int:
        return binaryutil.int32(self._read_aligned(INT32_ALIGN_MASK, 4))

    def string(self) -> str:
        """Read a NUL-terminated string; the terminator is left unread."""
        end = self._data.find(0, self._pos)
        if end < 0:
            raise AlignedBuffEOF()
        v = binaryutil.string(bytes(self._data[self._pos:end]))
        self._pos = end
        return v

    def string_with_length(self, length: int) -> str:
        """Read a string of a fixed length."""
        if self._pos + length > len(self._data):
            raise AlignedBuffEOF()
        return binaryutil.string(self._take(length))

    def uint(self) -> int:
        """Read a C ``unsigned int``."""
        if UINT_SIZE == 2:
            return self.uint16()
        if UINT_SIZE == 4:
            return self.uint32()
        if UINT_SIZE == 8:
            return self.uint64()
        raise RuntimeError(f"unsupported uint size {UINT_SIZE}")

    # writing

    def _align_write(self, mask: int) -> None:
        pos = (self._pos + mask) & ~mask
        if pos != self._pos:
            self._data += _PADDING[:pos - self._pos]
            self._pos = pos

    def _append(self, chunk: bytes) -> None:
        self._data += chunk
        self._pos += len(chunk)

    def put_bytes_aligned32(self, data: bytes, size: int) -> None:
        """Write bytes at uint32 alignment, zero-padded up to ``size``."""
        self._align_write(UINT32_ALIGN_MASK)
        self._append(bytes(data))
        if len(data) < size:
            self._append(bytes(size - len(data)))

    def put_uint8(self, v: int) -> None:
        self._append(bytes([v]))

    def put_uint16(self, v: int) -> None:
        self._align_write(UINT16_ALIGN_MASK)
        self._append(NATIVE_ENDIAN.put_uint16(v))

    def put_uint16_be(self, v: int) -> None:
        self._align_write(UINT16_ALIGN_MASK)
        self._append(BIG_ENDIAN.put_uint16(v))

    def put_uint32(self, v: int) -> None:
        self._align_write(UINT32_ALIGN_MASK)
        self._append(NATIVE_ENDIAN.put_uint32(v))

    def put_uint64(self, v: int) -> None:
        self._align_write(UINT64_ALIGN_MASK)
        self._append(NATIVE_ENDIAN.put_uint64(v))

    def put_int32(self, v: int) -> None:
        self._align_write(INT32_ALIGN_MASK)
        self._append(binaryutil.put_int32(v))

    def put_string(self, v: str) -> None:
        self._append(binaryutil.put_string(v))

    def put_uint(self, v: int) -> None:
        """Write a C ``unsigned int``."""
        if UINT_SIZE == 2:
            self.put_uint16(v)
        elif UINT_SIZE == 4:
            self.put_uint32(v)
        elif UINT_SIZE == 8:
            self.put_uint64(v)
        else:
            raise RuntimeError(f"unsupported uint size {UINT_SIZE}")