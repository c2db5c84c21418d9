"""Match and target expressions wrapping xtables extensions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

XTABLES_EXTENSION_NAME_MAX_LEN = 29

NFTA_XT_NAME = 1
NFTA_XT_REV = 2
NFTA_XT_INFO = 3


def _encode_extension(name: str, rev: int, info: bytes) -> bytes:
    raw_name = name.encode()
    # Leave room for the trailing NUL, as user-space tools do.
    if len(raw_name) >= XTABLES_EXTENSION_NAME_MAX_LEN:
        raw_name = raw_name[: XTABLES_EXTENSION_NAME_MAX_LEN - 1]
    return encode(
        [
            Attribute(NFTA_XT_NAME, raw_name + b"\x00"),
            Attribute(NFTA_XT_REV, BIG_ENDIAN.put_uint32(rev)),
            Attribute(NFTA_XT_INFO, bytes(info)),
        ]
    )


def _decode_extension(data: bytes) -> tuple[str, int, bytes]:
    name, rev, info = "", 0, b""
    for attr in decode(data):
        if attr.kind == NFTA_XT_NAME:
            name = attr.data.rstrip(b"\x00").decode("utf-8", "surrogateescape")
        elif attr.kind == NFTA_XT_REV:
            rev = attr.uint32()
        elif attr.kind == NFTA_XT_INFO:
            info = attr.data
    return name, rev, info


@dataclass
class Match(Expression):
    """An xtables match extension with its name, revision and info payload."""

    expr_name: ClassVar[str] = "match"

    name: str = ""
    rev: int = 0
    info: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        return _encode_extension(self.name, self.rev, self.info)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> "Match":
        name, rev, info = _decode_extension(data)
        return cls(name=name, rev=rev, info=info)


@dataclass
class Target(Expression):
    """An xtables target extension with its name, revision and info payload."""

    expr_name: ClassVar[str] = "target"

    name: str = ""
    rev: int = 0
    info: bytes = b""

    def marshal_data(self, family: int) -> bytes:
        return _encode_extension(self.name, self.rev, self.info)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> "Target":
        name, rev, info = _decode_extension(data)
        return cls(name=name, rev=rev, info=info)