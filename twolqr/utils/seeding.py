"""Deterministic seeding helpers."""

from __future__ import annotations

import os
import random

import numpy as np


def seed_all(seed: int) -> np.random.Generator:
    """Seed Python and NumPy RNGs and return a generator for local draws."""

    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)
    return np.random.default_rng(seed)


__all__ = ["seed_all"]
