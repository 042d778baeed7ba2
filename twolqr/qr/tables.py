"""Version, capacity and format tables for QR Code symbols 1-40."""

from __future__ import annotations

import functools
import math
import numbers
from enum import Enum
from typing import Dict, Tuple

from ..errors import DecodeError, ValidationError

ECC_LEVELS: Tuple[str, ...] = ("low", "medium", "quartile", "high")
ECC_CODES: Dict[str, int] = {"low": 0b01, "medium": 0b00, "quartile": 0b11, "high": 0b10}
FORMAT_MASK = 0b101010000010010
FORMAT_GENERATOR = 0b10100110111
VERSION_GENERATOR = 0b1111100100101
PAD_BITS = "1110110000010001"
MIN_VERSION = 1
MAX_VERSION = 40


class Encoding(str, Enum):
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"
    BYTE = "byte"


MODE_BITS: Dict[Encoding, int] = {
    Encoding.NUMERIC: 0b0001,
    Encoding.ALPHANUMERIC: 0b0010,
    Encoding.BYTE: 0b0100,
}
LENGTH_BITS: Dict[Encoding, Tuple[int, int, int]] = {
    Encoding.NUMERIC: (10, 12, 14),
    Encoding.ALPHANUMERIC: (9, 11, 13),
    Encoding.BYTE: (8, 16, 16),
}
UNSUPPORTED_ENCODINGS = ("kanji", "eci")

# Total codewords per version.
BYTES = [
    26, 44, 70, 100, 134, 172, 196, 242, 292, 346, 404, 466, 532, 581, 655, 733, 815, 901, 991,
    1085, 1156, 1258, 1364, 1474, 1588, 1706, 1828, 1921, 2051, 2185, 2323, 2465, 2611, 2761,
    2876, 3034, 3196, 3362, 3532, 3706,
]
# Parity codewords per block.
WORDS_PER_BLOCK: Dict[str, list] = {
    "low": [
        7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28, 28, 28, 30,
        30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30,
    ],
    "medium": [
        10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26, 26, 28, 28,
        28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28,
    ],
    "quartile": [
        13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30, 28, 30, 30,
        30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30,
    ],
    "high": [
        17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28, 30, 24, 30,
        30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30,
    ],
}
# Number of RS blocks.
ECC_BLOCKS: Dict[str, list] = {
    "low": [
        1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8, 8, 9, 9, 10, 12, 12, 12, 13, 14,
        15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25,
    ],
    "medium": [
        1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16, 17, 17, 18, 20, 21, 23, 25,
        26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49,
    ],
    "quartile": [
        1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20, 23, 23, 25, 27, 29, 34,
        34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68,
    ],
    "high": [
        1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25, 25, 34, 30, 32, 35, 37,
        40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81,
    ],
}


def validate_version(version: int) -> int:
    if isinstance(version, bool) or not isinstance(version, numbers.Integral):
        raise ValidationError(f"Invalid version={version!r}. Expected integer [1..40]")
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise ValidationError(f"Invalid version={version}. Expected integer [1..40]")
    return int(version)


def validate_ecc(ecc: str) -> str:
    if ecc not in ECC_LEVELS:
        raise ValidationError(f"Invalid error correction mode={ecc!r}. Expected one of {ECC_LEVELS}")
    return ecc


def validate_mask(mask: int) -> int:
    if isinstance(mask, bool) or not isinstance(mask, numbers.Integral) or not 0 <= mask <= 7:
        raise ValidationError(f"Invalid mask={mask!r}. Expected integer [0..7]")
    return int(mask)


def validate_encoding(encoding) -> Encoding:
    if isinstance(encoding, str) and encoding.lower() in UNSUPPORTED_ENCODINGS:
        raise ValidationError(f"Encoding {encoding!r} is not supported")
    try:
        return Encoding(encoding)
    except ValueError:
        raise ValidationError(
            f"Invalid encoding={encoding!r}. Expected one of {[e.value for e in Encoding]}"
        ) from None


def size(version: int) -> int:
    return 21 + 4 * (version - 1)


def version_from_size(size_: int) -> int:
    version, rem = divmod(size_ - 17, 4)
    if rem or not MIN_VERSION <= version <= MAX_VERSION:
        raise DecodeError(f"Matrix size {size_} does not correspond to any QR version")
    return int(version)


def size_type(version: int) -> int:
    return (version + 7) // 17


@functools.lru_cache(maxsize=None)
def alignment_patterns(version: int) -> Tuple[int, ...]:
    """Return the row/column centres of alignment patterns for ``version``."""

    if version == 1:
        return ()
    first = 6
    last = size(version) - first - 1
    distance = last - first
    count = math.ceil(distance / 28)
    interval = distance // count
    if interval % 2:
        interval += 1
    elif (distance % count) * 2 >= count:
        interval += 2
    positions = [first]
    for m in range(1, count):
        positions.append(last - (count - m) * interval)
    positions.append(last)
    return tuple(positions)


def format_bits(ecc: str, mask: int) -> int:
    """15-bit format word: ECC code and mask with BCH(15,5) parity, XOR-masked."""

    data = (ECC_CODES[ecc] << 3) | mask
    d = data
    for _ in range(10):
        d = (d << 1) ^ ((d >> 9) * FORMAT_GENERATOR)
    return ((data << 10) | d) ^ FORMAT_MASK


def version_bits(version: int) -> int:
    """18-bit version word with BCH(18,6) parity."""

    d = version
    for _ in range(12):
        d = (d << 1) ^ ((d >> 11) * VERSION_GENERATOR)
    return (version << 12) | d


def length_bits(version: int, encoding: Encoding) -> int:
    return LENGTH_BITS[Encoding(encoding)][size_type(version)]


def capacity(version: int, ecc: str) -> Dict[str, int]:
    """Block layout for ``(version, ecc)``.

    ``capacity`` is the number of data bits; ``total`` the number of codewords
    (data plus parity) placed in the matrix.
    """

    total_bytes = BYTES[version - 1]
    words = WORDS_PER_BLOCK[ecc][version - 1]
    num_blocks = ECC_BLOCKS[ecc][version - 1]
    block_len = total_bytes // num_blocks - words
    short_blocks = num_blocks - total_bytes % num_blocks
    return {
        "words": words,
        "num_blocks": num_blocks,
        "short_blocks": short_blocks,
        "block_len": block_len,
        "capacity": (total_bytes - words * num_blocks) * 8,
        "total": (words + block_len) * num_blocks + num_blocks - short_blocks,
    }


__all__ = [
    "ECC_LEVELS",
    "ECC_CODES",
    "FORMAT_MASK",
    "PAD_BITS",
    "MIN_VERSION",
    "MAX_VERSION",
    "Encoding",
    "MODE_BITS",
    "LENGTH_BITS",
    "BYTES",
    "WORDS_PER_BLOCK",
    "ECC_BLOCKS",
    "validate_version",
    "validate_ecc",
    "validate_mask",
    "validate_encoding",
    "size",
    "version_from_size",
    "size_type",
    "alignment_patterns",
    "format_bits",
    "version_bits",
    "length_bits",
    "capacity",
]
