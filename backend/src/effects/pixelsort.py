"""Pixel Sort effect — sorts mask-selected row runs by brightness.

The mask's alpha channel picks which pixels take part. Opaque runs are
split at random points, then each run is ordered darkest to brightest
(R + G + B). Everything outside the mask keeps its original pixels.
"""

import math

import numpy as np

from engine.determinism import derive_seed, make_rng
from engine.matrix import extract_pixel_matrix
from engine.segmenter import DEFAULT_SPLIT_PROBABILITY, segment_mask
from engine.sorter import sort_pixels

EFFECT_ID = "fx.pixelsort"
EFFECT_NAME = "Pixel Sort"
EFFECT_CATEGORY = "glitch"

PARAMS: dict = {
    "split_probability": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": DEFAULT_SPLIT_PROBABILITY,
        "label": "Split Probability",
    },
    "close_trailing_runs": {
        "type": "bool",
        "default": False,
        "label": "Close Runs At Row End",
    },
    "max_workers": {
        "type": "int",
        "min": 0,
        "max": 64,
        "default": 0,
        "label": "Worker Threads (0 = CPU count)",
    },
}


_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def _parse_bool(value, default: bool) -> bool:
    """Real bools, 0/1 and true/false-style strings; anything else -> default."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def sanitize_params(params: dict | None) -> dict:
    """Fill defaults, clamp numbers into range, drop NaN/Inf and parse bools.

    Unknown keys are ignored.
    """
    params = params or {}
    clean = {}
    for name, spec in PARAMS.items():
        value = params.get(name, spec["default"])
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            value = spec["default"]

        if spec["type"] == "bool":
            clean[name] = _parse_bool(value, spec["default"])
        elif spec["type"] == "int":
            clean[name] = int(max(spec["min"], min(spec["max"], int(value))))
        else:
            clean[name] = float(max(spec["min"], min(spec["max"], float(value))))
    return clean


def apply(
    frame: np.ndarray,
    mask: np.ndarray,
    params: dict | None = None,
    *,
    seed: int | None = None,
) -> np.ndarray:
    """Pixel-sort ``frame`` inside the opaque regions of ``mask``.

    Args:
        frame:  (H, W, 4) uint8 RGBA base image. Not modified.
        mask:   (H, W, 4) mask, same size as frame.
        params: See PARAMS. Out-of-range values are clamped.
        seed:   Makes run splitting reproducible. None = fresh randomness.

    Returns:
        Sorted copy of frame.

    Raises:
        ValueError: If frame and mask sizes differ.
    """
    p = sanitize_params(params)

    if frame.shape[:2] != mask.shape[:2]:
        raise ValueError(
            f"Mask size {mask.shape[1]}x{mask.shape[0]} does not match "
            f"image size {frame.shape[1]}x{frame.shape[0]}"
        )

    output = extract_pixel_matrix(frame)
    matrix = extract_pixel_matrix(frame)

    rng = make_rng(None if seed is None else derive_seed(seed, EFFECT_ID))
    segments = segment_mask(
        mask,
        rng,
        split_probability=p["split_probability"],
        close_trailing_runs=p["close_trailing_runs"],
    )

    return sort_pixels(output, matrix, segments, max_workers=p["max_workers"] or None)
