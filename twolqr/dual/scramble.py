"""Key-derived permutation and XOR scrambling of private codewords."""

from __future__ import annotations

import hashlib
import struct
from typing import List, Sequence, Union

import numpy as np

from .. import config
from ..errors import CryptoUnavailable, ValidationError

try:
    from cryptography.hazmat.primitives import hashes
    from cryptography.hazmat.primitives.kdf.hkdf import HKDF
except ImportError:  # pragma: no cover - exercised only without cryptography
    hashes = None
    HKDF = None

Key = Union[str, bytes]


def derive_key_material(key: Key, length: int | None = None) -> bytes:
    """HKDF-SHA-256 of ``key`` with empty salt and empty info."""

    if HKDF is None:
        raise CryptoUnavailable("HKDF requires the 'cryptography' package")
    length = config.get_config().key_length if length is None else length
    ikm = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    # A None salt is HashLen zero bytes, which HMAC treats the same as an empty salt.
    hkdf = HKDF(algorithm=hashes.SHA256(), length=length, salt=None, info=b"")
    return hkdf.derive(ikm)


def generate_permutation(key_material: bytes, n: int) -> np.ndarray:
    """Deterministic permutation of ``range(n)`` keyed by ``key_material``.

    Indices are ordered by ``SHA256(key_material || be32(n) || be32(i))``.
    """

    if n < 0:
        raise ValueError("Permutation length must be non-negative")
    prefix = bytes(key_material) + struct.pack(">I", n)
    digests = [hashlib.sha256(prefix + struct.pack(">I", i)).digest() for i in range(n)]
    return np.array(sorted(range(n), key=lambda i: (digests[i], i)), dtype=np.int64)


def transform_value(key_material: bytes, index: int) -> int:
    """Three keystream bits for position ``index``."""

    digest = hashlib.sha256(bytes(key_material) + struct.pack(">I", index)).digest()
    return digest[0] & 0x07


def _check_symbols(codeword: Sequence[int]) -> List[int]:
    values = [int(v) for v in codeword]
    for v in values:
        if not 0 <= v <= 7:
            raise ValidationError(f"Scrambling is defined for 3-bit symbols only, got {v}")
    return values


def scramble(codeword: Sequence[int], key: Key) -> List[int]:
    """Permute ``codeword`` then XOR each position with its keystream bits."""

    values = _check_symbols(codeword)
    if not values:
        return []
    key_material = derive_key_material(key)
    perm = generate_permutation(key_material, len(values))
    permuted = [values[j] for j in perm]
    return [v ^ transform_value(key_material, i) for i, v in enumerate(permuted)]


def descramble(codeword: Sequence[int], key: Key) -> List[int]:
    """Inverse of :func:`scramble` for the same key and length."""

    values = _check_symbols(codeword)
    if not values:
        return []
    key_material = derive_key_material(key)
    perm = generate_permutation(key_material, len(values))
    permuted = [v ^ transform_value(key_material, i) for i, v in enumerate(values)]
    out = [0] * len(values)
    for i, j in enumerate(perm):
        out[j] = permuted[i]
    return out


__all__ = [
    "derive_key_material",
    "generate_permutation",
    "transform_value",
    "scramble",
    "descramble",
]
