"""QR matrix construction: function patterns, zig-zag placement, masking."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .. import config
from ..errors import CapacityError
from .bitmap import UNSET, Bitmap
from .bitstream import detect_encoding, pack_data
from .interleave import Interleaver
from .tables import (
    Encoding,
    alignment_patterns,
    format_bits,
    size,
    validate_ecc,
    validate_encoding,
    validate_mask,
    validate_version,
    version_bits,
)

logger = logging.getLogger(__name__)

PATTERNS: Tuple[Callable[[int, int], bool], ...] = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (y // 2 + x // 3) % 2 == 0,
    lambda x, y: (x * y) % 2 + (x * y) % 3 == 0,
    lambda x, y: ((x * y) % 2 + (x * y) % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + (x * y) % 3) % 2 == 0,
)

_FINDER_LIKE = np.array([1, 0, 1, 1, 1, 0, 1, 0, 0, 0, 0], dtype=np.int8)
_FINDER_LIKE_REV = _FINDER_LIKE[::-1].copy()


def format_positions(n: int) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """(row, col) cells holding format bits 0..14, for both copies."""

    first = [(i, 8) for i in range(6)] + [(7, 8), (8, 8), (8, 7)]
    first += [(8, 15 - i - 1) for i in range(9, 15)]
    second = [(8, n - i - 1) for i in range(8)] + [(n - 15 + i, 8) for i in range(8, 15)]
    return first, second


def version_positions(n: int) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """(row, col) cells holding version bits 0..17, for both copies."""

    first = [(i // 3, i % 3 + n - 11) for i in range(18)]
    second = [(c, r) for r, c in first]
    return first, second


def draw_template(version: int, ecc: str, mask: int, test: bool = False) -> Bitmap:
    """Draw every function pattern; data cells are left unset.

    With ``test`` set, format/version bits and the dark module are drawn
    white so that mask scoring does not depend on them.
    """

    n = size(version)
    b = Bitmap(n + 2)
    finder = Bitmap(3, fill=True).border(1, False).border(1, True).border(1, False)
    b.embed(0, 0, finder).embed(-finder.width, 0, finder).embed(0, -finder.height, finder)
    b = b.rect_slice(1, 1, n, n)

    align = Bitmap(1, fill=True).border(1, False).border(1, True)
    positions = alignment_patterns(version)
    for y in positions:
        for x in positions:
            if b.data[y, x] != UNSET:
                continue
            b.embed(x - 2, y - 2, align)

    timing = (np.arange(n) % 2 == 0).astype(np.int8)
    for line in (b.data[6, :], b.data[:, 6]):
        free = line == UNSET
        line[free] = timing[free]

    bits = format_bits(ecc, mask)
    for copy in format_positions(n):
        for i, (r, c) in enumerate(copy):
            b.data[r, c] = (not test) and (bits >> i) & 1 == 1
    b.data[n - 8, 8] = not test

    if version >= 7:
        vbits = version_bits(version)
        for copy in version_positions(n):
            for i, (r, c) in enumerate(copy):
                b.data[r, c] = (not test) and (vbits >> i) & 1 == 1
    return b


def zigzag(template: Bitmap, mask: int) -> Iterator[Tuple[int, int, bool]]:
    """Yield ``(x, y, mask_bit)`` for every unset cell in placement order."""

    n = template.height
    pattern = PATTERNS[mask]
    free = template.data == UNSET
    direction = -1
    y = n - 1
    x_offset = n - 1
    while x_offset > 0:
        if x_offset == 6:
            x_offset = 5
        while True:
            for j in range(2):
                x = x_offset - j
                if free[y, x]:
                    yield x, y, pattern(x, y)
            if not 0 <= y + direction < n:
                break
            y += direction
        direction = -direction
        x_offset -= 2


def draw_qr(version: int, ecc: str, data: bytes, mask: int, test: bool = False) -> Bitmap:
    """Place interleaved codewords (MSB first) into the template under ``mask``."""

    b = draw_template(version, ecc, mask, test)
    bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
    need = bits.size
    i = 0
    for x, y, m in zigzag(b, mask):
        value = False
        if i < need:
            value = bool(bits[i])
            i += 1
        b.data[y, x] = value != m
    if i != need:
        raise RuntimeError(f"{need - i} data bits left after drawing version {version}")
    return b


def _adjacent_penalty(lines: np.ndarray) -> int:
    total = 0
    for line in lines:
        bounds = np.concatenate(([0], np.flatnonzero(np.diff(line)) + 1, [line.size]))
        runs = np.diff(bounds)
        total += int((runs[runs >= 5] - 2).sum())
    return total


def _finder_penalty(lines: np.ndarray) -> int:
    windows = sliding_window_view(lines, _FINDER_LIKE.size, axis=1)
    hits = (windows == _FINDER_LIKE).all(axis=2).sum() + (windows == _FINDER_LIKE_REV).all(axis=2).sum()
    return 40 * int(hits)


def penalty_terms(bm: Bitmap) -> Dict[str, int]:
    """Score the four masking rules: runs, 2x2 boxes, finder-like lines, balance."""

    d = bm.data
    adjacent = _adjacent_penalty(d) + _adjacent_penalty(d.T)

    top_left = d[:-1, :-1]
    uniform = (top_left == d[:-1, 1:]) & (top_left == d[1:, :-1]) & (top_left == d[1:, 1:])
    box = 3 * int(uniform.sum())

    finder = _finder_penalty(d) + _finder_penalty(d.T)

    dark_percent = int((d == 1).sum()) / (bm.height * bm.width) * 100
    dark = 10 * int(abs(dark_percent - 50) // 5)
    return {"adjacent": adjacent, "box": box, "finder": finder, "dark": dark}


def penalty(bm: Bitmap) -> int:
    return sum(penalty_terms(bm).values())


def select_mask(version: int, ecc: str, data: bytes) -> Tuple[int, List[int]]:
    """Return the lowest-penalty mask (first wins ties) and all eight scores."""

    scores = [penalty(draw_qr(version, ecc, data, mask, test=True)) for mask in range(len(PATTERNS))]
    best = 0
    for mask, score in enumerate(scores):
        if score < scores[best]:
            best = mask
    return best, scores


def draw_qr_best(version: int, ecc: str, data: bytes, mask: Optional[int] = None) -> Tuple[Bitmap, int]:
    if mask is None:
        mask, scores = select_mask(version, ecc, data)
        logger.debug("Mask penalties for version %d/%s: %s -> mask %d", version, ecc, scores, mask)
    b = draw_qr(version, ecc, data, mask)
    b.assert_drawn()
    return b, mask


def encode_qr(
    text: str,
    ecc: Optional[str] = None,
    version: Optional[int] = None,
    mask: Optional[int] = None,
    encoding: Optional[Encoding] = None,
) -> Dict[str, object]:
    """Encode ``text`` into a finished QR matrix without quiet zone.

    The smallest fitting version is chosen unless ``version`` is given, and
    the lowest-penalty mask unless ``mask`` is given.
    """

    cfg = config.get_config()
    ecc = validate_ecc(cfg.ecc if ecc is None else ecc)
    encoding = detect_encoding(text) if encoding is None else validate_encoding(encoding)
    if mask is not None:
        mask = validate_mask(mask)

    if version is not None:
        version = validate_version(version)
        data = pack_data(version, ecc, text, encoding)
    else:
        data = None
        for candidate in range(cfg.min_version, cfg.max_version + 1):
            try:
                data = pack_data(candidate, ecc, text, encoding)
            except CapacityError:
                continue
            version = candidate
            break
        if data is None:
            raise CapacityError(f"Text does not fit any QR version at ecc={ecc}")

    codewords = Interleaver(version, ecc).encode(data)
    bitmap, mask = draw_qr_best(version, ecc, codewords, mask)
    logger.debug("Encoded %d chars as version %d/%s mask %d (%s)", len(text), version, ecc, mask, encoding.value)
    return {"bitmap": bitmap, "version": version, "ecc": ecc, "mask": mask, "encoding": encoding}


__all__ = [
    "PATTERNS",
    "format_positions",
    "version_positions",
    "draw_template",
    "zigzag",
    "draw_qr",
    "penalty_terms",
    "penalty",
    "select_mask",
    "draw_qr_best",
    "encode_qr",
]
