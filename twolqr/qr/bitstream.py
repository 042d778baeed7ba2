"""Bitstream packing and parsing for numeric, alphanumeric and byte segments."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from ..errors import CapacityError, DecodeError, ValidationError
from .tables import (
    MODE_BITS,
    PAD_BITS,
    Encoding,
    capacity,
    length_bits,
    validate_ecc,
    validate_encoding,
    validate_version,
)

NUMERIC = "0123456789"
ALPHANUMERIC = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
_ALNUM_INDEX = {ch: i for i, ch in enumerate(ALPHANUMERIC)}
_MODES = {bits: enc for enc, bits in MODE_BITS.items()}


def _push(bits: List[int], value: int, length: int) -> None:
    bits.extend((value >> i) & 1 for i in reversed(range(length)))


def detect_encoding(text: str) -> Encoding:
    """Pick the most compact mode able to represent every character."""

    encoding = Encoding.NUMERIC
    for ch in text:
        if ch in NUMERIC:
            continue
        if ch in _ALNUM_INDEX:
            encoding = Encoding.ALPHANUMERIC
            continue
        return Encoding.BYTE
    return encoding


def _payload_bits(text: str, encoding: Encoding) -> Tuple[List[int], int]:
    bits: List[int] = []
    if encoding is Encoding.NUMERIC:
        if any(ch not in NUMERIC for ch in text):
            raise ValidationError("Numeric mode accepts digits only")
        digits = [int(ch) for ch in text]
        n = len(digits)
        for i in range(0, n - 2, 3):
            _push(bits, digits[i] * 100 + digits[i + 1] * 10 + digits[i + 2], 10)
        if n % 3 == 1:
            _push(bits, digits[-1], 4)
        elif n % 3 == 2:
            _push(bits, digits[-2] * 10 + digits[-1], 7)
        return bits, n
    if encoding is Encoding.ALPHANUMERIC:
        try:
            values = [_ALNUM_INDEX[ch] for ch in text]
        except KeyError as exc:
            raise ValidationError(f"Character {exc.args[0]!r} is not alphanumeric") from None
        n = len(values)
        for i in range(0, n - 1, 2):
            _push(bits, values[i] * 45 + values[i + 1], 11)
        if n % 2:
            _push(bits, values[-1], 6)
        return bits, n
    raw = text.encode("utf-8")
    for b in raw:
        _push(bits, b, 8)
    return bits, len(raw)


def pack_data(
    version: int,
    ecc: str,
    text: str,
    encoding: Optional[Encoding] = None,
) -> bytes:
    """Pack ``text`` into the data codewords of a ``(version, ecc)`` symbol.

    Mode indicator and character count precede the payload. The remainder of
    the data capacity is filled with up to four terminator zeros, zero bits up
    to a byte boundary and the alternating pad pattern.
    """

    version = validate_version(version)
    ecc = validate_ecc(ecc)
    encoding = detect_encoding(text) if encoding is None else validate_encoding(encoding)

    limit = capacity(version, ecc)["capacity"]
    payload, count = _payload_bits(text, encoding)
    count_bits = length_bits(version, encoding)
    if count >= 1 << count_bits:
        raise CapacityError(f"{count} characters overflow the {count_bits}-bit length field")

    bits: List[int] = []
    _push(bits, MODE_BITS[encoding], 4)
    _push(bits, count, count_bits)
    bits.extend(payload)
    if len(bits) > limit:
        raise CapacityError(
            f"{len(bits)} bits exceed the {limit}-bit capacity of version {version}/{ecc}"
        )

    bits.extend([0] * min(4, limit - len(bits)))
    if len(bits) % 8:
        bits.extend([0] * (8 - len(bits) % 8))
    idx = 0
    while len(bits) < limit:
        bits.append(int(PAD_BITS[idx % len(PAD_BITS)]))
        idx += 1
    return np.packbits(np.array(bits, dtype=np.uint8)).tobytes()


class _BitReader:
    def __init__(self, data: bytes) -> None:
        self.bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
        self.pos = 0

    def remaining(self) -> int:
        return self.bits.size - self.pos

    def read(self, length: int) -> int:
        if length > self.remaining():
            raise DecodeError("Bitstream ended inside a segment")
        value = 0
        for bit in self.bits[self.pos : self.pos + length]:
            value = (value << 1) | int(bit)
        self.pos += length
        return value


def parse_data(data: bytes, version: int) -> str:
    """Inverse of :func:`pack_data`: decode segments until the terminator."""

    reader = _BitReader(data)
    out = bytearray()
    while reader.remaining() >= 4:
        mode = reader.read(4)
        if mode == 0:
            break
        encoding = _MODES.get(mode)
        if encoding is None:
            raise DecodeError(f"Unsupported mode indicator {mode:04b}")
        count = reader.read(length_bits(version, encoding))
        if encoding is Encoding.NUMERIC:
            digits = []
            for _ in range(count // 3):
                value = reader.read(10)
                if value > 999:
                    raise DecodeError(f"Invalid numeric group {value}")
                digits.append(f"{value:03d}")
            rem = count % 3
            if rem:
                value = reader.read(4 if rem == 1 else 7)
                if value >= 10**rem:
                    raise DecodeError(f"Invalid numeric group {value}")
                digits.append(f"{value:0{rem}d}")
            out += "".join(digits).encode("ascii")
        elif encoding is Encoding.ALPHANUMERIC:
            chars = []
            for _ in range(count // 2):
                value = reader.read(11)
                if value >= 45 * 45:
                    raise DecodeError(f"Invalid alphanumeric pair {value}")
                chars.append(ALPHANUMERIC[value // 45] + ALPHANUMERIC[value % 45])
            if count % 2:
                value = reader.read(6)
                if value >= 45:
                    raise DecodeError(f"Invalid alphanumeric value {value}")
                chars.append(ALPHANUMERIC[value])
            out += "".join(chars).encode("ascii")
        else:
            out += bytes(reader.read(8) for _ in range(count))
    try:
        return out.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("Byte segment is not valid UTF-8") from exc


__all__ = ["NUMERIC", "ALPHANUMERIC", "detect_encoding", "pack_data", "parse_data"]
