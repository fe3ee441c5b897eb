"""Seeded randomness for reproducible segmentation."""

import hashlib

import numpy as np


def derive_seed(user_seed: int, effect_id: str) -> int:
    """Derive a deterministic seed from context. Same inputs = same output, always."""
    key = f"{user_seed}:{effect_id}"
    return int(hashlib.sha256(key.encode()).hexdigest()[:16], 16)


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create an RNG. ``None`` gives a fresh, unseeded generator."""
    return np.random.default_rng(seed)
