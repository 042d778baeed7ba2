"""Finite-field arithmetic and Reed–Solomon coding."""

from .field import GF8, GF256, GF1024, GaloisField, PRIMITIVES, get_field
from .rs import ReedSolomon

__all__ = ["GaloisField", "PRIMITIVES", "get_field", "GF8", "GF256", "GF1024", "ReedSolomon"]
