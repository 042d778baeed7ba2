"""Dual-channel (2LQR) encoder."""

from __future__ import annotations

import logging
import numbers
from typing import Dict, List, Optional, Union

from .. import config
from ..errors import CapacityError, ValidationError
from ..gf.field import GF8
from ..gf.rs import ReedSolomon
from ..qr.bitmap import BLACK
from ..qr.matrix import encode_qr
from ..qr.tables import Encoding
from .modules import replaceable_modules
from .patterns import empty_pattern_map
from .scramble import Key, scramble
from .symbols import BLOCK_LIMIT, bytes_to_qary, split_message

logger = logging.getLogger(__name__)


def resolve_private_ecc(private_ecc_words: Optional[int]) -> int:
    t = config.get_config().private_ecc_words if private_ecc_words is None else private_ecc_words
    if isinstance(t, bool) or not isinstance(t, numbers.Integral) or not 1 <= t < BLOCK_LIMIT:
        raise ValidationError(f"private_ecc_words={t!r} must lie in [1, {BLOCK_LIMIT - 1}]")
    return int(t)


def encode_private(payload: bytes, ecc_words: int) -> List[int]:
    """3-bit symbols of ``payload`` split into GF(8) RS blocks, parity appended per block."""

    rs = ReedSolomon(GF8, ecc_words)
    codeword: List[int] = []
    for block in split_message(bytes_to_qary(payload), ecc_words):
        codeword += block + rs.encode(block)
    return codeword


def encode_2lqr(
    public_text: str,
    private_data: Union[str, bytes],
    private_key: Key,
    ecc: Optional[str] = None,
    version: Optional[int] = None,
    mask: Optional[int] = None,
    encoding: Optional[Encoding] = None,
    private_ecc_words: Optional[int] = None,
) -> Dict[str, object]:
    """Build a public QR matrix and hide ``private_data`` in its black modules.

    The scrambled private codeword is written, one 3-bit symbol per module,
    onto replaceable modules in row-major order. Returns the bitmap, the
    pattern map (``-1`` where no symbol is drawn) and the public parameters.
    """

    ecc_words = resolve_private_ecc(private_ecc_words)
    public = encode_qr(public_text, ecc=ecc, version=version, mask=mask, encoding=encoding)
    bitmap = public["bitmap"]
    modules = replaceable_modules(bitmap, public["version"])
    if not modules:
        raise CapacityError("Public matrix has no replaceable modules")

    payload = private_data.encode("utf-8") if isinstance(private_data, str) else bytes(private_data)
    codeword = encode_private(payload, ecc_words)
    if len(codeword) > len(modules):
        raise CapacityError(
            f"Private codeword of {len(codeword)} symbols exceeds {len(modules)} replaceable modules"
        )

    pattern_map = empty_pattern_map(bitmap)
    for (x, y), symbol in zip(modules, scramble(codeword, private_key)):
        pattern_map[y, x] = symbol
        bitmap.data[y, x] = BLACK
    logger.debug(
        "Placed %d private symbols (%d parity per block) on %d replaceable modules",
        len(codeword),
        ecc_words,
        len(modules),
    )
    return {
        "bitmap": bitmap,
        "pattern_map": pattern_map,
        "version": public["version"],
        "ecc": public["ecc"],
        "mask": public["mask"],
    }


__all__ = ["resolve_private_ecc", "encode_private", "encode_2lqr"]
