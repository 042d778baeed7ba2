"""Public QR Code channel: tables, bitstream, matrix builder and reader."""

from .bitmap import Bitmap
from .bitstream import detect_encoding, pack_data, parse_data
from .interleave import Interleaver
from .matrix import draw_qr, draw_qr_best, draw_template, encode_qr, penalty, select_mask, zigzag
from .reader import decode_bitmap, decode_qr, sample_modules
from .tables import ECC_LEVELS, Encoding, capacity

__all__ = [
    "Bitmap",
    "detect_encoding",
    "pack_data",
    "parse_data",
    "Interleaver",
    "draw_qr",
    "draw_qr_best",
    "draw_template",
    "encode_qr",
    "penalty",
    "select_mask",
    "zigzag",
    "decode_bitmap",
    "decode_qr",
    "sample_modules",
    "ECC_LEVELS",
    "Encoding",
    "capacity",
]
