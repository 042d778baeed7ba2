"""Tri-state module grid used to build and render QR matrices."""

from __future__ import annotations

from typing import List, Optional, Union

import numpy as np

from .. import config

UNSET = -1
WHITE = 0
BLACK = 1

CellValue = Union[bool, int, None]


def _cell(value: CellValue) -> int:
    if value is None:
        return UNSET
    return BLACK if value else WHITE


class Bitmap:
    """Grid of cells that are black, white or not yet drawn.

    Cells live in an ``int8`` array indexed ``data[y, x]``. Rectangle origins
    wrap modulo the grid dimensions, so ``x=-7`` addresses the last seven
    columns; rectangle extents are clipped to the grid.
    """

    def __init__(self, height: int, width: Optional[int] = None, fill: CellValue = None) -> None:
        width = height if width is None else width
        if height < 0 or width < 0:
            raise ValueError("Bitmap dimensions must be non-negative")
        self.data = np.full((height, width), _cell(fill), dtype=np.int8)

    @classmethod
    def from_array(cls, data: np.ndarray) -> "Bitmap":
        arr = np.asarray(data)
        if arr.ndim != 2:
            raise ValueError("Bitmap data must be a 2D array")
        bm = cls(0)
        bm.data = arr.astype(np.int8, copy=True)
        return bm

    @classmethod
    def from_string(cls, text: str) -> "Bitmap":
        """Parse rows of ``X`` (black), space (white) and ``?`` (unset)."""

        lines = [line for line in text.split("\n") if line]
        width = max((len(line) for line in lines), default=0)
        bm = cls(len(lines), width)
        lookup = {"X": BLACK, " ": WHITE, "?": UNSET}
        for y, line in enumerate(lines):
            for x, ch in enumerate(line):
                if ch not in lookup:
                    raise ValueError(f"Unknown bitmap character {ch!r}")
                bm.data[y, x] = lookup[ch]
        return bm

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        return f"Bitmap(height={self.height}, width={self.width})"

    def copy(self) -> "Bitmap":
        return Bitmap.from_array(self.data)

    def _region(self, x: int, y: int, height: int, width: int):
        x %= max(self.width, 1)
        y %= max(self.height, 1)
        h = max(0, min(height, self.height - y))
        w = max(0, min(width, self.width - x))
        return slice(y, y + h), slice(x, x + w)

    def rect(self, x: int, y: int, height: int, width: int, value) -> "Bitmap":
        """Fill a rectangle in place with a cell value or an array of cells."""

        rows, cols = self._region(x, y, height, width)
        if isinstance(value, np.ndarray):
            h = rows.stop - rows.start
            w = cols.stop - cols.start
            self.data[rows, cols] = value[:h, :w]
        else:
            self.data[rows, cols] = _cell(value)
        return self

    def embed(self, x: int, y: int, other: "Bitmap") -> "Bitmap":
        return self.rect(x, y, other.height, other.width, other.data)

    def rect_slice(self, x: int, y: int, height: int, width: int) -> "Bitmap":
        rows, cols = self._region(x, y, height, width)
        return Bitmap.from_array(self.data[rows, cols])

    def border(self, size: Optional[int] = None, value: CellValue = None) -> "Bitmap":
        size = config.get_config().border if size is None else size
        if size < 0:
            raise ValueError(f"Invalid border size={size}")
        return Bitmap.from_array(np.pad(self.data, size, constant_values=_cell(value)))

    def scale(self, factor: int) -> "Bitmap":
        if factor <= 0:
            raise ValueError(f"Invalid scale factor={factor}")
        return Bitmap.from_array(np.kron(self.data, np.ones((factor, factor), dtype=np.int8)))

    def transpose(self) -> "Bitmap":
        return Bitmap.from_array(self.data.T)

    def is_drawn(self) -> bool:
        return not bool((self.data == UNSET).any())

    def assert_drawn(self) -> None:
        if not self.is_drawn():
            raise RuntimeError("Bitmap has unset cells")

    def black(self) -> np.ndarray:
        return self.data == BLACK

    def to_list(self) -> List[List[bool]]:
        self.assert_drawn()
        return self.black().tolist()

    def to_string(self) -> str:
        glyphs = {BLACK: "X", WHITE: " ", UNSET: "?"}
        return "\n".join("".join(glyphs[int(v)] for v in row) for row in self.data)

    def to_ascii(self) -> str:
        """Two matrix rows per text line using half-block characters.

        Unset cells render as white; a missing final row renders as black.
        """

        out = []
        for y in range(0, self.height, 2):
            line = []
            for x in range(self.width):
                first = self.data[y, x] == BLACK
                second = True if y + 1 >= self.height else self.data[y + 1, x] == BLACK
                if not first and not second:
                    line.append("█")
                elif not first and second:
                    line.append("▀")
                elif first and not second:
                    line.append("▄")
                else:
                    line.append(" ")
            out.append("".join(line) + "\n")
        return "".join(out)

    def to_term(self) -> str:
        """ANSI background colours, two characters per module."""

        reset = "\x1b[0m"
        white = "\x1b[1;47m  " + reset
        dark = "\x1b[40m  " + reset
        return "\n".join("".join(dark if v == BLACK else white for v in row) for row in self.data)


__all__ = ["UNSET", "WHITE", "BLACK", "Bitmap"]
