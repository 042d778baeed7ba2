import pytest

from twolqr.errors import DecodeError, ValidationError
from twolqr.qr import tables


@pytest.mark.parametrize(
    "version, expected",
    [
        (1, ()),
        (2, (6, 18)),
        (7, (6, 22, 38)),
        (32, (6, 34, 60, 86, 112, 138)),
        (36, (6, 24, 50, 76, 102, 128, 154)),
        (40, (6, 30, 58, 86, 114, 142, 170)),
    ],
)
def test_alignment_patterns(version, expected):
    assert tables.alignment_patterns(version) == expected


def test_format_and_version_words():
    assert tables.format_bits("low", 0) == 0b111011111000100
    assert tables.format_bits("high", 7) == 0b001001110111110
    assert tables.version_bits(7) == 0x07C94
    assert tables.version_bits(40) == 0x28C69


def test_capacity_layout():
    v1 = tables.capacity(1, "low")
    assert v1 == {
        "words": 7,
        "num_blocks": 1,
        "short_blocks": 1,
        "block_len": 19,
        "capacity": 152,
        "total": 26,
    }
    v5 = tables.capacity(5, "quartile")
    assert (v5["num_blocks"], v5["short_blocks"], v5["block_len"]) == (4, 2, 15)
    for version in range(1, 41):
        for ecc in tables.ECC_LEVELS:
            layout = tables.capacity(version, ecc)
            assert layout["total"] == tables.BYTES[version - 1]


def test_sizes_and_length_fields():
    assert tables.size(1) == 21
    assert tables.size(40) == 177
    assert tables.version_from_size(57) == 10
    with pytest.raises(DecodeError):
        tables.version_from_size(22)
    assert tables.length_bits(9, tables.Encoding.BYTE) == 8
    assert tables.length_bits(10, tables.Encoding.BYTE) == 16
    assert tables.length_bits(27, tables.Encoding.NUMERIC) == 14


def test_validators():
    assert tables.validate_version(5) == 5
    for bad in (0, 41, 2.5, True, "3"):
        with pytest.raises(ValidationError):
            tables.validate_version(bad)
    with pytest.raises(ValidationError):
        tables.validate_mask(-1)
    with pytest.raises(ValidationError):
        tables.validate_ecc("H")
    assert tables.validate_encoding("numeric") is tables.Encoding.NUMERIC
    for name in ("kanji", "eci", "binary"):
        with pytest.raises(ValidationError):
            tables.validate_encoding(name)
