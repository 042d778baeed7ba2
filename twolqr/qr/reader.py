"""Read QR matrices back from raster images or bitmaps."""

from __future__ import annotations

import itertools
import logging
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from ..errors import DecodeError
from .bitmap import Bitmap
from .bitstream import parse_data
from .interleave import Interleaver
from .matrix import PATTERNS, draw_template, format_positions, version_positions, zigzag
from .tables import (
    ECC_LEVELS,
    MAX_VERSION,
    MIN_VERSION,
    capacity,
    format_bits,
    size,
    version_bits,
    version_from_size,
)

logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]

MAX_BIT_ERRORS = 3
# Detection passes: raw pixels first, then median-blurred.
MEDIAN_KERNELS = (None, 3, 5)
MAX_CANDIDATES = 12
# Stone width over finder width is 3/7.
STONE_RATIO = (0.25, 0.6)
# Rendered rasters use whole-pixel modules.
PITCH_SNAP = 0.05


def dark_pixels(image: np.ndarray) -> np.ndarray:
    """Binarise an image: ``bool`` arrays are taken as-is, otherwise < 128 is dark."""

    arr = np.asarray(image)
    if arr.dtype == np.bool_:
        if arr.ndim != 2:
            raise DecodeError("Boolean images must be 2D")
        return arr
    if arr.ndim == 3:
        arr = arr[..., :3].mean(axis=2)
    if arr.ndim != 2:
        raise DecodeError(f"Unsupported image shape {arr.shape}")
    return arr < 128


def module_block(dark: np.ndarray, origin: Tuple[int, int], pitch: float, x: int, y: int) -> np.ndarray:
    """Pixels covered by module ``(x, y)``."""

    top, left = origin
    r0 = top + int(round(y * pitch))
    r1 = top + int(round((y + 1) * pitch))
    c0 = left + int(round(x * pitch))
    c1 = left + int(round((x + 1) * pitch))
    return dark[r0 : max(r1, r0 + 1), c0 : max(c1, c0 + 1)]


def _is_stone(outer: Box, inner: Box) -> bool:
    x, y, w, h = outer
    sx, sy, sw, sh = inner
    if not (STONE_RATIO[0] < sw / w < STONE_RATIO[1] and STONE_RATIO[0] < sh / h < STONE_RATIO[1]):
        return False
    return abs(sx + sw / 2 - (x + w / 2)) < w / 7 and abs(sy + sh / 2 - (y + h / 2)) < h / 7


def find_finders(dark: np.ndarray, kernel: Optional[int] = None) -> List[Dict[str, float]]:
    """Finder candidates: a dark square holding a light ring holding a dark 3x3 stone.

    Contours come from ``cv2.findContours`` with the full hierarchy; each row
    of ``hierarchy`` is ``[next, prev, first_child, parent]``. ``kernel`` runs
    a median blur first to wipe out isolated noise pixels.
    """

    binary = dark.astype(np.uint8) * 255
    if kernel is not None:
        binary = cv2.medianBlur(binary, kernel)
    # Contours touching the image edge stay closed inside a one-pixel frame.
    binary = cv2.copyMakeBorder(binary, 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0)
    contours, hierarchy = cv2.findContours(binary, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    if hierarchy is None:
        return []
    links = hierarchy[0]
    boxes = [tuple(int(v) for v in cv2.boundingRect(c)) for c in contours]

    found = []
    for i, outer in enumerate(boxes):
        x, y, w, h = outer
        if min(w, h) < 7 or not 0.75 < w / h < 1.33:
            continue
        stone = None
        hole = links[i][2]
        while hole != -1:
            inner = links[hole][2]
            while inner != -1:
                box = boxes[inner]
                if _is_stone(outer, box) and (stone is None or box[2] * box[3] > stone[2] * stone[3]):
                    stone = box
                inner = links[inner][0]
            hole = links[hole][0]
        if stone is None:
            continue
        sx, sy, sw, sh = stone
        found.append(
            {
                "left": x - 1,
                "top": y - 1,
                "right": x - 1 + w,
                "bottom": y - 1 + h,
                "cx": sx - 1 + sw / 2,
                "cy": sy - 1 + sh / 2,
                "size": (w + h) / 2,
            }
        )
    return found


def _as_corners(trio) -> Optional[Tuple[Dict[str, float], ...]]:
    sizes = [f["size"] for f in trio]
    if max(sizes) > 1.5 * min(sizes):
        return None
    tl = min(trio, key=lambda f: f["cx"] + f["cy"])
    tr = max(trio, key=lambda f: f["cx"] - f["cy"])
    bl = max(trio, key=lambda f: f["cy"] - f["cx"])
    if len({id(tl), id(tr), id(bl)}) != 3:
        return None
    unit = float(np.median(sizes))
    dx = tr["cx"] - tl["cx"]
    dy = bl["cy"] - tl["cy"]
    if dx < unit or dy < unit:
        return None
    if abs(tr["cy"] - tl["cy"]) > unit / 2 or abs(bl["cx"] - tl["cx"]) > unit / 2:
        return None
    if abs(dx - dy) > 0.1 * max(dx, dy) + 2:
        return None
    return tl, tr, bl


def locate_symbol(dark: np.ndarray) -> Tuple[int, float, Tuple[int, int]]:
    """Return ``(version, pitch, (top, left))`` of an axis-aligned symbol.

    The three finder stones fix the module count; pitch and origin are the
    medians of several independent edge and centre estimates.
    """

    corners = None
    for kernel in MEDIAN_KERNELS:
        candidates = sorted(find_finders(dark, kernel), key=lambda f: -f["size"])[:MAX_CANDIDATES]
        for trio in itertools.combinations(candidates, 3):
            corners = _as_corners(trio)
            if corners is not None:
                break
        if corners is not None:
            break
    if corners is None:
        raise DecodeError("Could not locate the three finder patterns")
    tl, tr, bl = corners

    # Finder centres sit 3.5 modules in from each edge.
    rough = float(np.median([f["size"] for f in corners])) / 7.0
    n = int(round((tr["cx"] - tl["cx"] + bl["cy"] - tl["cy"]) / (2 * rough))) + 7
    version = int(round((n - 17) / 4))
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise DecodeError(f"Finder spacing implies {n} modules, which matches no QR version")
    n = size(version)

    pitch = float(
        np.median(
            [
                (tr["cx"] - tl["cx"]) / (n - 7),
                (bl["cy"] - tl["cy"]) / (n - 7),
                (tr["right"] - tl["left"]) / n,
                (bl["bottom"] - tl["top"]) / n,
            ]
        )
    )
    if abs(pitch - round(pitch)) <= PITCH_SNAP * pitch:
        pitch = float(round(pitch))
    left = np.median(
        [
            tl["left"],
            bl["left"],
            tr["right"] - n * pitch,
            tl["cx"] - 3.5 * pitch,
            bl["cx"] - 3.5 * pitch,
            tr["cx"] - (n - 3.5) * pitch,
        ]
    )
    top = np.median(
        [
            tl["top"],
            tr["top"],
            bl["bottom"] - n * pitch,
            tl["cy"] - 3.5 * pitch,
            tr["cy"] - 3.5 * pitch,
            bl["cy"] - (n - 3.5) * pitch,
        ]
    )
    return version, pitch, (int(round(top)), int(round(left)))


def sample_modules(image: np.ndarray) -> Dict[str, object]:
    """Locate an axis-aligned symbol and sample each module by pixel majority."""

    dark = dark_pixels(image)
    if not dark.any():
        raise DecodeError("Image contains no dark pixels")
    version, pitch, origin = locate_symbol(dark)
    n = size(version)
    top, left = origin
    extent = int(round(n * pitch))
    if top < 0 or left < 0 or top + extent > dark.shape[0] or left + extent > dark.shape[1]:
        raise DecodeError("Symbol extends past the image edge")

    bits = Bitmap(n)
    for y in range(n):
        for x in range(n):
            block = module_block(dark, origin, pitch, x, y)
            bits.data[y, x] = 1 if block.mean() >= 0.5 else 0
    logger.debug("Sampled %dx%d modules at pitch %.2f px from origin %s", n, n, pitch, origin)
    return {"bitmap": bits, "version": version, "module_size": pitch, "origin": origin, "dark": dark}


def _read_word(bm: Bitmap, cells: List[Tuple[int, int]]) -> int:
    word = 0
    for i, (r, c) in enumerate(cells):
        if bm.data[r, c] == 1:
            word |= 1 << i
    return word


def read_format(bm: Bitmap) -> Tuple[str, int]:
    """Return ``(ecc, mask)`` from the nearest valid format word."""

    copies = [_read_word(bm, cells) for cells in format_positions(bm.height)]
    best = None
    best_distance = MAX_BIT_ERRORS + 1
    for ecc in ECC_LEVELS:
        for mask in range(len(PATTERNS)):
            expected = format_bits(ecc, mask)
            distance = min(bin(word ^ expected).count("1") for word in copies)
            if distance < best_distance:
                best, best_distance = (ecc, mask), distance
    if best is None:
        raise DecodeError("Format information is unreadable")
    return best


def read_version(bm: Bitmap) -> int:
    """Return the version implied by the size, cross-checked with version info."""

    version = version_from_size(bm.height)
    if version < 7:
        return version
    copies = [_read_word(bm, cells) for cells in version_positions(bm.height)]
    best = None
    best_distance = MAX_BIT_ERRORS + 1
    for candidate in range(7, MAX_VERSION + 1):
        expected = version_bits(candidate)
        distance = min(bin(word ^ expected).count("1") for word in copies)
        if distance < best_distance:
            best, best_distance = candidate, distance
    if best is None:
        raise DecodeError("Version information is unreadable")
    if best != version:
        raise DecodeError(f"Version information says {best} but the size implies {version}")
    return version


def read_codewords(bm: Bitmap, version: int, ecc: str, mask: int) -> bytes:
    """Unmask data cells in placement order and pack them into codewords."""

    total = capacity(version, ecc)["total"]
    template = draw_template(version, ecc, mask)
    bits = [int(bm.data[y, x] == 1) != m for x, y, m in zigzag(template, mask)]
    need = total * 8
    if len(bits) < need:
        raise DecodeError(f"Matrix holds {len(bits)} data bits, expected {need}")
    return np.packbits(np.array(bits[:need], dtype=np.uint8)).tobytes()


def decode_bitmap(bm: Bitmap) -> Dict[str, object]:
    if bm.height != bm.width:
        raise DecodeError("Bitmap is not square")
    version = read_version(bm)
    ecc, mask = read_format(bm)
    codewords = read_codewords(bm, version, ecc, mask)
    data = Interleaver(version, ecc).decode(codewords)
    text = parse_data(data, version)
    return {"text": text, "data": data, "version": version, "ecc": ecc, "mask": mask}


def decode_qr(image: np.ndarray) -> Dict[str, object]:
    """Decode the public payload of a rendered symbol."""

    return decode_bitmap(sample_modules(image)["bitmap"])


__all__ = [
    "dark_pixels",
    "module_block",
    "find_finders",
    "locate_symbol",
    "sample_modules",
    "read_format",
    "read_version",
    "read_codewords",
    "decode_bitmap",
    "decode_qr",
]
