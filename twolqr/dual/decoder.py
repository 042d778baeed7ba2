"""Dual-channel (2LQR) decoder."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..errors import DecodeError, ValidationError
from ..gf.field import GF8
from ..gf.rs import ReedSolomon
from ..qr.interleave import Interleaver
from ..qr.matrix import draw_qr
from ..qr.reader import decode_bitmap, sample_modules
from .encoder import resolve_private_ecc
from .modules import replaceable_modules
from .patterns import classify_glyph, sample_glyph
from .scramble import Key, descramble
from .symbols import codeword_lengths, qary_to_bytes

logger = logging.getLogger(__name__)


def decode_private(codeword: Sequence[int], ecc_words: int) -> bytes:
    """RS-decode each GF(8) block of a descrambled codeword and unpack the bytes."""

    rs = ReedSolomon(GF8, ecc_words)
    message: List[int] = []
    pos = 0
    for length in codeword_lengths(len(codeword), ecc_words):
        message += rs.decode_message(codeword[pos : pos + length])
        pos += length
    return qary_to_bytes(message)


def decode_2lqr(
    image: np.ndarray,
    private_key: Key,
    private_ecc_words: Optional[int] = None,
) -> Dict[str, object]:
    """Recover the public text and the private bytes from a rendered symbol.

    ``private_ecc_words`` must match the value used when encoding.
    """

    if private_ecc_words is None:
        raise ValidationError("private_ecc_words must be supplied to decode the private channel")
    ecc_words = resolve_private_ecc(private_ecc_words)

    sampled = sample_modules(image)
    public = decode_bitmap(sampled["bitmap"])
    version, ecc, mask = public["version"], public["ecc"], public["mask"]

    # Module order comes from the corrected matrix, not the raw samples.
    clean = draw_qr(version, ecc, Interleaver(version, ecc).encode(public["data"]), mask)
    modules = replaceable_modules(clean, version)
    if not modules:
        raise DecodeError("Matrix has no replaceable modules")

    symbols: List[int] = []
    for x, y in modules:
        sample = sample_glyph(sampled["dark"], sampled["origin"], sampled["module_size"], x, y)
        symbol = classify_glyph(sample)
        if symbol is None:
            break
        symbols.append(symbol)
    if not symbols:
        raise DecodeError("No private symbols found")
    logger.debug("Read %d private symbols from %d replaceable modules", len(symbols), len(modules))

    private = decode_private(descramble(symbols, private_key), ecc_words)
    return {
        "public_data": public["text"],
        "private_data": private,
        "version": version,
        "ecc": ecc,
        "mask": mask,
    }


__all__ = ["decode_private", "decode_2lqr"]
