"""Reject, duplicate and FIB lookup expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..binaryutil import BIG_ENDIAN
from ..nlattr import Attribute, decode, encode
from .base import Expression

NFTA_REJECT_TYPE = 1
NFTA_REJECT_ICMP_CODE = 2

NFTA_DUP_SREG_ADDR = 1
NFTA_DUP_SREG_DEV = 2

NFTA_FIB_DREG = 1
NFTA_FIB_RESULT = 2
NFTA_FIB_FLAGS = 3

NFTA_FIB_F_SADDR = 0x01
NFTA_FIB_F_DADDR = 0x02
NFTA_FIB_F_MARK = 0x04
NFTA_FIB_F_IIF = 0x08
NFTA_FIB_F_OIF = 0x10
NFTA_FIB_F_PRESENT = 0x20

NFT_FIB_RESULT_OIF = 1
NFT_FIB_RESULT_OIFNAME = 2
NFT_FIB_RESULT_ADDRTYPE = 3


@dataclass
class Reject(Expression):
    """Rejects packets with the given type and ICMP code."""

    expr_name: ClassVar[str] = "reject"

    type: int = 0
    code: int = 0

    def marshal_data(self, family: int) -> bytes:
        return encode(
            [
                Attribute(NFTA_REJECT_TYPE, BIG_ENDIAN.put_uint32(self.type)),
                Attribute(NFTA_REJECT_ICMP_CODE, bytes([self.code])),
            ]
        )

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Reject:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_REJECT_TYPE:
                expr.type = attr.uint32()
            elif attr.kind == NFTA_REJECT_ICMP_CODE:
                expr.code = attr.uint8()
        return expr


@dataclass
class Dup(Expression):
    """Duplicates packets to an address, optionally via a device."""

    expr_name: ClassVar[str] = "dup"

    reg_addr: int = 0
    reg_dev: int = 0
    is_reg_dev_set: bool = False

    def marshal_data(self, family: int) -> bytes:
        attrs = [Attribute(NFTA_DUP_SREG_ADDR, BIG_ENDIAN.put_uint32(self.reg_addr))]
        if self.is_reg_dev_set:
            attrs.append(Attribute(NFTA_DUP_SREG_DEV, BIG_ENDIAN.put_uint32(self.reg_dev)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Dup:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_DUP_SREG_ADDR:
                expr.reg_addr = attr.uint32()
            elif attr.kind == NFTA_DUP_SREG_DEV:
                expr.reg_dev = attr.uint32()
        return expr


def _bit_is_one(value: int, mask: int) -> bool:
    return (value & mask) == 1


@dataclass
class Fib(Expression):
    """Looks up routing information (forwarding information base)."""

    expr_name: ClassVar[str] = "fib"

    register: int = 0
    result_oif: bool = False
    result_oifname: bool = False
    result_addrtype: bool = False
    flag_saddr: bool = False
    flag_daddr: bool = False
    flag_mark: bool = False
    flag_iif: bool = False
    flag_oif: bool = False
    flag_present: bool = False

    def marshal_data(self, family: int) -> bytes:
        attrs = [Attribute(NFTA_FIB_DREG, BIG_ENDIAN.put_uint32(self.register))]
        flags = 0
        for enabled, bit in (
            (self.flag_saddr, NFTA_FIB_F_SADDR),
            (self.flag_daddr, NFTA_FIB_F_DADDR),
            (self.flag_mark, NFTA_FIB_F_MARK),
            (self.flag_iif, NFTA_FIB_F_IIF),
            (self.flag_oif, NFTA_FIB_F_OIF),
            (self.flag_present, NFTA_FIB_F_PRESENT),
        ):
            if enabled:
                flags |= bit
        if flags:
            attrs.append(Attribute(NFTA_FIB_FLAGS, BIG_ENDIAN.put_uint32(flags)))
        results = 0
        for enabled, bit in (
            (self.result_oif, NFT_FIB_RESULT_OIF),
            (self.result_oifname, NFT_FIB_RESULT_OIFNAME),
            (self.result_addrtype, NFT_FIB_RESULT_ADDRTYPE),
        ):
            if enabled:
                results |= bit
        if results:
            attrs.append(Attribute(NFTA_FIB_RESULT, BIG_ENDIAN.put_uint32(results)))
        return encode(attrs)

    @classmethod
    def unmarshal(cls, family: int, data: bytes) -> Fib:
        expr = cls()
        for attr in decode(data):
            if attr.kind == NFTA_FIB_DREG:
                expr.register = attr.uint32()
            elif attr.kind == NFTA_FIB_RESULT:
                result = attr.uint32()
                expr.result_oif = _bit_is_one(result, NFT_FIB_RESULT_OIF)
                expr.result_oifname = _bit_is_one(result, NFT_FIB_RESULT_OIFNAME)
                expr.result_addrtype = _bit_is_one(result, NFT_FIB_RESULT_ADDRTYPE)
            elif attr.kind == NFTA_FIB_FLAGS:
                flags = attr.uint32()
                expr.flag_saddr = _bit_is_one(flags, NFTA_FIB_F_SADDR)
                expr.flag_daddr = _bit_is_one(flags, NFTA_FIB_F_DADDR)
                expr.flag_mark = _bit_is_one(flags, NFTA_FIB_F_MARK)
                expr.flag_iif = _bit_is_one(flags, NFTA_FIB_F_IIF)
                expr.flag_oif = _bit_is_one(flags, NFTA_FIB_F_OIF)
                expr.flag_present = _bit_is_one(flags, NFTA_FIB_F_PRESENT)
        return expr