import pytest

from twolqr.errors import CapacityError, DecodeError, ValidationError
from twolqr.qr.bitstream import detect_encoding, pack_data, parse_data
from twolqr.qr.tables import Encoding, capacity


def test_numeric_reference_codewords():
    data = pack_data(1, "medium", "01234567")
    assert list(data) == [16, 32, 12, 86, 97, 128] + [236, 17] * 5


def test_alphanumeric_reference_codewords():
    data = pack_data(1, "quartile", "HELLO WORLD")
    assert list(data) == [32, 91, 11, 120, 209, 114, 220, 77, 67, 64, 236, 17, 236]


def test_single_alphanumeric_character():
    data = pack_data(1, "low", "A")
    assert list(data) == [32, 9, 64] + [236, 17] * 8


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0123", Encoding.NUMERIC),
        ("", Encoding.NUMERIC),
        ("HELLO WORLD", Encoding.ALPHANUMERIC),
        ("$%*+-./:", Encoding.ALPHANUMERIC),
        ("hello", Encoding.BYTE),
        ("Grüße", Encoding.BYTE),
    ],
)
def test_detect_encoding(text, expected):
    assert detect_encoding(text) is expected


@pytest.mark.parametrize(
    "text, version, ecc",
    [
        ("31415926535", 1, "low"),
        ("12", 1, "high"),
        ("AC-42 $", 2, "medium"),
        ("https://example.org/?q=1", 3, "quartile"),
        ("ünïcødé ✓", 2, "low"),
        ("x" * 300, 20, "high"),
    ],
)
def test_pack_then_parse(text, version, ecc):
    data = pack_data(version, ecc, text)
    assert len(data) == capacity(version, ecc)["capacity"] // 8
    assert parse_data(data, version) == text


def test_explicit_byte_mode_for_digits():
    data = pack_data(1, "low", "123", encoding="byte")
    assert data[0] >> 4 == 0b0100
    assert parse_data(data, 1) == "123"


def test_capacity_overflow():
    with pytest.raises(CapacityError):
        pack_data(1, "high", "x" * 10)
    with pytest.raises(CapacityError):
        pack_data(1, "low", "1" * 42)
    # 41 digits is the exact numeric limit of 1-L
    assert parse_data(pack_data(1, "low", "1" * 41), 1) == "1" * 41


def test_invalid_parameters():
    with pytest.raises(ValidationError):
        pack_data(0, "low", "1")
    with pytest.raises(ValidationError):
        pack_data(1, "ultra", "1")
    with pytest.raises(ValidationError):
        pack_data(1, "low", "1", encoding="kanji")
    with pytest.raises(ValidationError):
        pack_data(1, "low", "abc", encoding=Encoding.NUMERIC)
    with pytest.raises(ValidationError):
        pack_data(1, "low", "abc", encoding=Encoding.ALPHANUMERIC)


def test_parse_rejects_unknown_mode():
    # Mode 0b1000 (kanji) is not supported.
    with pytest.raises(DecodeError):
        parse_data(bytes([0x80, 0x00, 0x00]), 1)


def test_parse_rejects_invalid_numeric_group():
    # count=3 followed by the 10-bit group 1023
    data = bytes([0b00010000, 0b00001111, 0b11111111, 0b00000000])
    with pytest.raises(DecodeError):
        parse_data(data, 1)
