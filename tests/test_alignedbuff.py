import pytest

from nftkit.alignedbuff import (
    UINT32_ALIGN_MASK,
    UINT64_ALIGN_MASK,
    AlignedBuff,
    AlignedBuffEOF,
)


def test_uint8_then_eof():
    buf = AlignedBuff(b"\x42")
    assert buf.uint8() == 0x42
    with pytest.raises(AlignedBuffEOF):
        buf.uint8()


def test_uint16():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_uint16(0x1234)
    w.put_uint16(0x5678)
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x42
    assert r.uint16() == 0x1234
    assert r.uint16() == 0x5678
    with pytest.raises(AlignedBuffEOF):
        r.uint16()


def test_uint32_and_payload_padding():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_uint32(0x12345678)
    w.put_uint32(0x01CECAFE)
    raw = bytes(w)
    expected_len = 2 * (UINT32_ALIGN_MASK + 1) + (UINT64_ALIGN_MASK + 1)
    assert len(w.payload()) == expected_len

    r = AlignedBuff(raw)
    assert r.uint8() == 0x42
    assert r.uint32() == 0x12345678
    assert r.uint32() == 0x01CECAFE
    with pytest.raises(AlignedBuffEOF):
        r.uint32()


def test_uint64():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_uint64(0x1234567801020304)
    w.put_uint64(0x01CECAFEC001BEEF)
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x42
    assert r.uint64() == 0x1234567801020304
    assert r.uint64() == 0x01CECAFEC001BEEF
    with pytest.raises(AlignedBuffEOF):
        r.uint64()


def test_uint_between_sentinels():
    expected = 0xFFFFFFFE
    w = AlignedBuff()
    w.put_uint8(0x55)
    w.put_uint(expected)
    w.put_uint8(0xAA)
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x55
    assert r.uint() == expected
    assert r.uint8() == 0xAA


def test_int32_and_payload_padding():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_int32(0x12345678)
    w.put_int32(0x01CECAFE)
    raw = bytes(w)
    expected_len = 2 * (UINT32_ALIGN_MASK + 1) + (UINT64_ALIGN_MASK + 1)
    assert len(w.payload()) == expected_len

    r = AlignedBuff(raw)
    assert r.uint8() == 0x42
    assert r.int32() == 0x12345678
    assert r.int32() == 0x01CECAFE
    with pytest.raises(AlignedBuffEOF):
        r.int32()


def test_null_terminated_string():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_string("test" + "\x00")
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x42
    assert r.string() == "test"


def test_string_with_length():
    w = AlignedBuff()
    w.put_uint8(0x42)
    w.put_string("test")
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x42
    assert r.string_with_length(len("test")) == "test"


def test_string_without_terminator_raises():
    with pytest.raises(AlignedBuffEOF):
        AlignedBuff(b"abc").string()


def test_string_with_length_beyond_end_raises():
    with pytest.raises(AlignedBuffEOF):
        AlignedBuff(b"abc").string_with_length(4)


def test_uint16_be_is_network_order():
    w = AlignedBuff()
    w.put_uint16_be(0x1234)
    assert bytes(w) == b"\x12\x34"
    assert AlignedBuff(bytes(w)).uint16_be() == 0x1234


def test_bytes_aligned32_round_trip():
    w = AlignedBuff()
    w.put_uint8(0x01)
    w.put_bytes_aligned32(b"\x0a\x0b", 4)
    r = AlignedBuff(bytes(w))
    assert r.uint8() == 0x01
    assert r.bytes_aligned32(4) == b"\x0a\x0b\x00\x00"
    with pytest.raises(AlignedBuffEOF):
        r.bytes_aligned32(4)


def test_payload_is_multiple_of_uint64_alignment():
    w = AlignedBuff()
    w.put_uint8(0x01)
    assert len(w.payload()) % (UINT64_ALIGN_MASK + 1) == 0