"""Central configuration defaults for twolqr."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CodecConfig:
    ecc: str = "medium"
    border: int = 2  # quiet zone for text renderers
    private_ecc_words: int = 2  # GF(8) parity symbols per private block
    module_pixels: int = 5
    quiet_zone: int = 4
    key_length: int = 32  # HKDF-SHA-256 output bytes
    min_version: int = 1
    max_version: int = 40


DEFAULTS = CodecConfig()


def get_config() -> CodecConfig:
    """Return a copy of the default configuration."""

    return CodecConfig(**DEFAULTS.__dict__)
