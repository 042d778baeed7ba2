"""Block splitting, RS parity and codeword interleaving for QR data."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import DecodeError, ValidationError
from ..gf.field import GF256
from ..gf.rs import ReedSolomon
from .tables import capacity, validate_ecc, validate_version


def _interleave(blocks: Sequence[Sequence[int]]) -> List[int]:
    out: List[int] = []
    longest = max((len(b) for b in blocks), default=0)
    for i in range(longest):
        for block in blocks:
            if i < len(block):
                out.append(block[i])
    return out


class Interleaver:
    """Encode/decode the full codeword sequence of one ``(version, ecc)`` symbol.

    The first ``short_blocks`` blocks carry ``block_len`` data codewords and
    the rest one more. Data codewords are interleaved column-wise across
    blocks, followed by the interleaved parity codewords.
    """

    def __init__(self, version: int, ecc: str) -> None:
        self.version = validate_version(version)
        self.ecc = validate_ecc(ecc)
        layout = capacity(self.version, self.ecc)
        self.words = layout["words"]
        self.num_blocks = layout["num_blocks"]
        self.short_blocks = layout["short_blocks"]
        self.block_len = layout["block_len"]
        self.data_len = layout["capacity"] // 8
        self.total = layout["total"]
        self._rs = ReedSolomon(GF256, self.words)

    def _data_len(self, index: int) -> int:
        return self.block_len + (0 if index < self.short_blocks else 1)

    def encode(self, data: bytes) -> bytes:
        if len(data) != self.data_len:
            raise ValidationError(f"Expected {self.data_len} data codewords, got {len(data)}")
        blocks = []
        parity = []
        pos = 0
        for i in range(self.num_blocks):
            block = list(data[pos : pos + self._data_len(i)])
            pos += len(block)
            blocks.append(block)
            parity.append(self._rs.encode(block))
        return bytes(_interleave(blocks) + _interleave(parity))

    def decode(self, data: bytes) -> bytes:
        if len(data) != self.total:
            raise DecodeError(f"Expected {self.total} codewords, got {len(data)}")
        blocks: List[List[int]] = [[0] * (self._data_len(i) + self.words) for i in range(self.num_blocks)]
        pos = 0
        for i in range(self.block_len):
            for block in blocks:
                block[i] = data[pos]
                pos += 1
        for j in range(self.short_blocks, self.num_blocks):
            blocks[j][self.block_len] = data[pos]
            pos += 1
        for i in range(self.words):
            for j, block in enumerate(blocks):
                block[self._data_len(j) + i] = data[pos]
                pos += 1

        out = bytearray()
        for j, block in enumerate(blocks):
            out += bytes(self._rs.decode(block)[: self._data_len(j)])
        return bytes(out)


__all__ = ["Interleaver"]
