"""Exception types raised by the QR and dual-channel codecs."""

from __future__ import annotations


class QRError(Exception):
    """Base class for every error raised by twolqr."""


class ValidationError(QRError, ValueError):
    """Invalid version, ECC level, mask, encoding or symbol input."""


class CapacityError(QRError, ValueError):
    """Payload does not fit the selected symbol or private channel."""


class DecodeError(QRError, ValueError):
    """A codeword, matrix or private stream could not be recovered."""


class CryptoUnavailable(QRError, RuntimeError):
    """The key-derivation primitive is not importable."""


__all__ = [
    "QRError",
    "ValidationError",
    "CapacityError",
    "DecodeError",
    "CryptoUnavailable",
]
