"""Private-symbol glyphs: templates, raster rendering and classification."""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from .. import config
from ..errors import ValidationError
from ..qr.bitmap import Bitmap
from ..qr.reader import module_block

NO_SYMBOL = -1


def _glyph(rows: str) -> np.ndarray:
    return np.array([[ch == "#" for ch in row] for row in rows.split()], dtype=bool)


# 5x5 sub-module grids, True is black. Every glyph keeps a black majority so
# a plain QR reader still sees a dark module.
GLYPHS: Dict[int, np.ndarray] = {
    0: _glyph("##### #...# #...# #...# #####"),  # square centre
    1: _glyph("##### ##.## #...# ##.## #####"),  # round centre
    2: _glyph(".###. #.#.# ##.## #.#.# .###."),  # diagonal cross
    3: _glyph("##### ##### ..... ##### #####"),  # horizontal bar
    4: _glyph("##.## ##.## ##.## ##.## ##.##"),  # vertical bar
    5: _glyph(".###. ##### ##### ##### .###."),  # clipped corners
    6: _glyph("..### ..### ##### ###.. ###.."),  # offset steps
    7: _glyph("#...# .###. .###. .###. #...#"),  # hollow corners
}
GLYPH_SIZE = 5
SOLID = np.ones((GLYPH_SIZE, GLYPH_SIZE), dtype=bool)


def empty_pattern_map(bitmap: Bitmap) -> np.ndarray:
    return np.full((bitmap.height, bitmap.width), NO_SYMBOL, dtype=np.int8)


def render_image(
    bitmap: Bitmap,
    pattern_map: Optional[np.ndarray] = None,
    module_pixels: Optional[int] = None,
    quiet_zone: Optional[int] = None,
) -> np.ndarray:
    """Rasterise a finished matrix to a ``uint8`` image (0 black, 255 white).

    Modules with a symbol in ``pattern_map`` are drawn with that symbol's
    glyph instead of solid black.
    """

    cfg = config.get_config()
    px = cfg.module_pixels if module_pixels is None else module_pixels
    quiet = cfg.quiet_zone if quiet_zone is None else quiet_zone
    if px <= 0 or quiet < 0:
        raise ValidationError("module_pixels must be positive and quiet_zone non-negative")
    bitmap.assert_drawn()

    dark = np.kron(bitmap.black(), np.ones((px, px), dtype=bool))
    if pattern_map is not None:
        pattern_map = np.asarray(pattern_map)
        if pattern_map.shape != bitmap.data.shape:
            raise ValidationError("Pattern map shape does not match the bitmap")
        if px % GLYPH_SIZE:
            raise ValidationError(f"module_pixels={px} must be a multiple of {GLYPH_SIZE} for glyphs")
        cell = px // GLYPH_SIZE
        for y, x in np.argwhere(pattern_map != NO_SYMBOL):
            symbol = int(pattern_map[y, x])
            if symbol not in GLYPHS:
                raise ValidationError(f"Unknown private symbol {symbol}")
            glyph = np.kron(GLYPHS[symbol], np.ones((cell, cell), dtype=bool))
            dark[y * px : (y + 1) * px, x * px : (x + 1) * px] = glyph

    dark = np.pad(dark, quiet * px, constant_values=False)
    return np.where(dark, 0, 255).astype(np.uint8)


def sample_glyph(dark: np.ndarray, origin, pitch: float, x: int, y: int) -> np.ndarray:
    """Sample module ``(x, y)`` on a ``GLYPH_SIZE`` grid of sub-cell centres."""

    block = module_block(dark, origin, pitch, x, y)
    h, w = block.shape
    centres_y = ((np.arange(GLYPH_SIZE) + 0.5) * h / GLYPH_SIZE).astype(int)
    centres_x = ((np.arange(GLYPH_SIZE) + 0.5) * w / GLYPH_SIZE).astype(int)
    return block[np.ix_(centres_y, centres_x)]


def classify_glyph(sample: np.ndarray) -> Optional[int]:
    """Nearest glyph by Hamming distance; ``None`` when solid black is nearest."""

    best: Optional[int] = None
    best_distance = int(np.count_nonzero(sample != SOLID))
    for symbol, glyph in GLYPHS.items():
        distance = int(np.count_nonzero(sample != glyph))
        if distance < best_distance:
            best, best_distance = symbol, distance
    return best


__all__ = [
    "NO_SYMBOL",
    "GLYPHS",
    "SOLID",
    "GLYPH_SIZE",
    "empty_pattern_map",
    "render_image",
    "sample_glyph",
    "classify_glyph",
]
