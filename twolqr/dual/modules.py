"""Function-pattern exclusion and replaceable-module ordering."""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from ..errors import DecodeError
from ..qr.bitmap import Bitmap
from ..qr.tables import alignment_patterns, size, validate_version


def protected_mask(version: int) -> np.ndarray:
    """Boolean ``[y, x]`` mask of every cell reserved by a function pattern."""

    version = validate_version(version)
    n = size(version)
    mask = np.zeros((n, n), dtype=bool)

    # Finder, separator and format corner boxes.
    mask[:8, :8] = True
    mask[:8, n - 8 :] = True
    mask[n - 8 :, :8] = True

    for cy in alignment_patterns(version):
        for cx in alignment_patterns(version):
            if (cx < 8 and cy < 8) or (cx >= n - 8 and cy < 8) or (cx < 8 and cy >= n - 8):
                continue
            mask[cy - 2 : cy + 3, cx - 2 : cx + 3] = True

    mask[6, 8 : n - 8] = True
    mask[8 : n - 8, 6] = True

    # Format bands next to the finders, plus the dark module.
    mask[:9, 8] = True
    mask[8, :9] = True
    mask[n - 8 :, 8] = True
    mask[8, n - 8 :] = True
    mask[n - 8, 8] = True

    if version >= 7:
        mask[n - 11 : n - 8, :6] = True
        mask[:6, n - 11 : n - 8] = True
    return mask


def replaceable_modules(bitmap: Bitmap, version: int) -> List[Tuple[int, int]]:
    """Black cells outside every function pattern as ``(x, y)``, row-major."""

    if bitmap.height != bitmap.width:
        raise DecodeError(f"Bitmap is not square ({bitmap.height}x{bitmap.width})")
    expected = size(validate_version(version))
    if bitmap.height != expected:
        raise DecodeError(f"Bitmap size {bitmap.height} does not match version {version} ({expected})")
    free = bitmap.black() & ~protected_mask(version)
    return [(int(x), int(y)) for y, x in np.argwhere(free)]


__all__ = ["protected_mask", "replaceable_modules"]
