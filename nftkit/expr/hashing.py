"""Hash and number generator expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_HASH_SREG = 1
NFTA_HASH_DREG = 2
NFTA_HASH_LEN = 3
NFTA_HASH_MODULUS = 4
NFTA_HASH_SEED = 5
NFTA_HASH_OFFSET = 6
NFTA_HASH_TYPE = 7

NFTA_NG_DREG = 1
NFTA_NG_MODULUS = 2
NFTA_NG_TYPE = 3
NFTA_NG_OFFSET = 4

NFT_NG_INCREMENTAL = 0
NFT_NG_RANDOM = 1


class HashType(IntEnum):
    """Hashing function."""

    JENKINS = 0
    SYM = 1


@dataclass
class Hash(Expression):
    """Hashes register contents into a destination register."""

    expr_name: ClassVar[str] = "hash"

    source_register: int = 0
    dest_register: int = 0
    length: int = 0
    modulus: int = 0
    seed: int = 0
    offset: int = 0
    type: HashType | int = HashType.JENKINS

    def marshal_data(self, family: int) -> bytes:
        attrs = [
            Attribute(NFTA_HASH_SREG, BIG_ENDIAN.put_uint32(self.source_register)),
            Attribute(NFTA_HASH_DREG, BIG_ENDIAN.put_uint32(self.dest_register)),
            Attribute(NFTA_HASH_LEN, BIG_ENDIAN.put_uint32(self.length)),
            Attribute(NFTA_HASH_MODULUS, BIG_ENDIAN.put_uint32(self.modulus)),
        ]
        if self.seed:
            attrs.append(Attribute(NFTA_HASH_SEED, BIG_ENDIAN.put_uint32(self.seed)))
        attrs += [
            Attribute(NFTA_HASH_OFFSET, BIG_ENDIAN.put_uint32(self.offset)),
            Attribute(NFTA_HASH_TYPE, BIG_ENDIAN.put_uint32(int(self.type))),
        ]
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Hash:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_HASH_SREG:
                expr.source_register = attr.uint32()
            elif attr.kind == NFTA_HASH_DREG:
                expr.dest_register = attr.uint32()
            elif attr.kind == NFTA_HASH_LEN:
                expr.length = attr.uint32()
            elif attr.kind == NFTA_HASH_MODULUS:
                expr.modulus = attr.uint32()
            elif attr.kind == NFTA_HASH_SEED:
                expr.seed = attr.uint32()
            elif attr.kind == NFTA_HASH_OFFSET:
                expr.offset = attr.uint32()
            elif attr.kind == NFTA_HASH_TYPE:
                value = attr.uint32()
                try:
                    expr.type = HashType(value)
                except ValueError:
                    expr.type = value
        return expr


@dataclass
class Numgen(Expression):
    """Generates incremental or random numbers into a register."""

    expr_name: ClassVar[str] = "numgen"

    register: int = 0
    modulus: int = 0
    type: int = NFT_NG_INCREMENTAL
    offset: int = 0

    def marshal_data(self, family: int) -> bytes:
        if self.type not in (NFT_NG_INCREMENTAL, NFT_NG_RANDOM):
            raise ValueError(f"unsupported numgen type {self.type}")
        return encode(
            [
                Attribute(NFTA_NG_DREG, BIG_ENDIAN.put_uint32(self.register)),
                Attribute(NFTA_NG_MODULUS, BIG_ENDIAN.put_uint32(self.modulus)),
                Attribute(NFTA_NG_TYPE, BIG_ENDIAN.put_uint32(self.type)),
                Attribute(NFTA_NG_OFFSET, BIG_ENDIAN.put_uint32(self.offset)),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Numgen:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_NG_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_NG_MODULUS:
                expr.modulus = attr.uint32()
            elif attr.kind == NFTA_NG_TYPE:
                expr.type = attr.uint32()
            elif attr.kind == NFTA_NG_OFFSET:
                expr.offset = attr.uint32()
        return expr