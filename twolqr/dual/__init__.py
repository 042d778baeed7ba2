"""Dual-channel (2LQR) extension: private symbols hidden in black modules."""

from .decoder import decode_2lqr, decode_private
from .encoder import encode_2lqr, encode_private
from .modules import protected_mask, replaceable_modules
from .patterns import GLYPHS, NO_SYMBOL, classify_glyph, render_image, sample_glyph
from .scramble import derive_key_material, descramble, generate_permutation, scramble
from .symbols import bytes_to_qary, codeword_lengths, qary_to_bytes, split_message

__all__ = [
    "decode_2lqr",
    "decode_private",
    "encode_2lqr",
    "encode_private",
    "protected_mask",
    "replaceable_modules",
    "GLYPHS",
    "NO_SYMBOL",
    "classify_glyph",
    "render_image",
    "sample_glyph",
    "derive_key_material",
    "descramble",
    "generate_permutation",
    "scramble",
    "bytes_to_qary",
    "codeword_lengths",
    "qary_to_bytes",
    "split_message",
]
