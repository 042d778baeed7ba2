"""Conversion between byte payloads and 3-bit private-channel symbols."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ..errors import DecodeError, ValidationError

SYMBOL_BITS = 3
# GF(8) codewords hold at most seven symbols.
BLOCK_LIMIT = 7


def bytes_to_qary(data: bytes) -> List[int]:
    """Big-endian bits of ``data``, a single ``1`` terminator, zero padding to 3 bits."""

    bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
    bits = np.append(bits, np.uint8(1))
    pad = (-bits.size) % SYMBOL_BITS
    bits = np.concatenate([bits, np.zeros(pad, dtype=np.uint8)])
    groups = bits.reshape(-1, SYMBOL_BITS)
    return (groups @ np.array([4, 2, 1])).astype(int).tolist()


def qary_to_bytes(symbols: Sequence[int]) -> bytes:
    """Inverse of :func:`bytes_to_qary`.

    The last set bit is the terminator. It must close a whole number of bytes
    and sit in the final symbol, so a stream unpacked with the wrong parity
    length is rejected rather than returned as garbage.
    """

    values = np.asarray(list(symbols), dtype=np.int64)
    if values.size and (values.min() < 0 or values.max() > 7):
        raise ValidationError("Private symbols must lie in [0, 7]")
    bits = ((values[:, None] >> np.array([2, 1, 0])) & 1).astype(np.uint8).ravel()
    ones = np.flatnonzero(bits)
    if ones.size == 0:
        raise DecodeError("Private stream has no terminator bit")
    end = int(ones[-1])
    if end % 8:
        raise DecodeError(f"Private stream holds {end} bits before its terminator, not whole bytes")
    if end // SYMBOL_BITS != values.size - 1:
        extra = values.size - 1 - end // SYMBOL_BITS
        raise DecodeError(f"Private stream has {extra} symbols past its terminator")
    return np.packbits(bits[:end]).tobytes()


def split_message(symbols: Sequence[int], ecc_words: int) -> List[List[int]]:
    """Chunk message symbols so each block plus parity fits one GF(8) codeword."""

    if not 1 <= ecc_words < BLOCK_LIMIT:
        raise ValidationError(f"ecc_words={ecc_words} must lie in [1, {BLOCK_LIMIT - 1}]")
    step = BLOCK_LIMIT - ecc_words
    values = [int(s) for s in symbols]
    return [values[i : i + step] for i in range(0, len(values), step)]


def codeword_lengths(total: int, ecc_words: int) -> List[int]:
    """Block lengths of a chunked private codeword of ``total`` symbols."""

    if not 1 <= ecc_words < BLOCK_LIMIT:
        raise ValidationError(f"ecc_words={ecc_words} must lie in [1, {BLOCK_LIMIT - 1}]")
    full, rest = divmod(total, BLOCK_LIMIT)
    if rest and rest <= ecc_words:
        raise DecodeError(
            f"{total} private symbols cannot carry {ecc_words} parity symbols per block"
        )
    return [BLOCK_LIMIT] * full + ([rest] if rest else [])


__all__ = [
    "SYMBOL_BITS",
    "BLOCK_LIMIT",
    "bytes_to_qary",
    "qary_to_bytes",
    "split_message",
    "codeword_lengths",
]
