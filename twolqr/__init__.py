"""QR Code engine with a key-scrambled private channel (2LQR)."""

from .config import CodecConfig, get_config
from .dual import decode_2lqr, encode_2lqr, render_image
from .errors import CapacityError, CryptoUnavailable, DecodeError, QRError, ValidationError
from .qr import Bitmap, decode_qr, encode_qr

__version__ = "0.1.0"

__all__ = [
    "CodecConfig",
    "get_config",
    "decode_2lqr",
    "encode_2lqr",
    "render_image",
    "CapacityError",
    "CryptoUnavailable",
    "DecodeError",
    "QRError",
    "ValidationError",
    "Bitmap",
    "decode_qr",
    "encode_qr",
]
