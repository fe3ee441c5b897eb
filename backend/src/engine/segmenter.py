"""Mask segmenter — turns mask opacity into per-row sortable column ranges.

A run opens on the first opaque pixel and closes on the next transparent
one. While a run is open, every further opaque pixel draws from U[0, 1);
a draw above ``1 - split_probability`` closes the run at that column and
the pixel itself belongs to neither side. The next opaque pixel reopens.

A run still open at row end is dropped unless ``close_trailing_runs`` is
set, in which case it closes at the row width.
"""

import logging
from typing import NamedTuple

import numpy as np

from engine.determinism import make_rng

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_PROBABILITY = 0.05


class SortRange(NamedTuple):
    """Half-open column interval [start, end) within one row."""

    start: int
    end: int


MaskRowSegments = list[list[SortRange]]


def _segment_row(
    opaque: np.ndarray,
    draws: np.ndarray,
    threshold: float,
    close_trailing_runs: bool,
) -> list[SortRange]:
    width = opaque.shape[0]
    ranges: list[SortRange] = []

    # Contiguous opaque spans [run_start, run_end)
    padded = np.concatenate(([False], opaque, [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    hits = draws > threshold

    for run_start, run_end in zip(edges[0::2].tolist(), edges[1::2].tolist()):
        start = run_start
        for x in (np.flatnonzero(hits[run_start + 1 : run_end]) + run_start + 1).tolist():
            # x == start opens the run; its draw is never consulted
            if x <= start:
                continue
            ranges.append(SortRange(start, x))
            start = x + 1

        if start >= run_end:
            continue
        if run_end < width or close_trailing_runs:
            ranges.append(SortRange(start, run_end))

    return ranges


def segment_mask(
    mask: np.ndarray,
    rng: np.random.Generator | None = None,
    *,
    split_probability: float = DEFAULT_SPLIT_PROBABILITY,
    close_trailing_runs: bool = False,
) -> MaskRowSegments:
    """Segment every mask row into sortable ranges.

    Args:
        mask:                (H, W, 4) array; alpha != 0 selects a pixel.
        rng:                 Source of split draws. Unseeded when omitted.
        split_probability:   Chance an opaque pixel inside a run splits it.
        close_trailing_runs: Emit runs still open at row end instead of
                             dropping them.

    Returns:
        One left-to-right, non-overlapping list of SortRange per row.

    Raises:
        ValueError: On a non-RGBA mask or a probability outside [0, 1].
    """
    mask = np.asarray(mask)
    if mask.ndim != 3 or mask.shape[2] != 4:
        raise ValueError(f"Expected (H, W, 4) RGBA mask, got shape {mask.shape}")
    if not 0.0 <= split_probability <= 1.0:
        raise ValueError(f"split_probability must be in [0, 1], got {split_probability}")

    if rng is None:
        rng = make_rng()

    height, width = mask.shape[:2]
    threshold = 1.0 - split_probability
    opaque = mask[:, :, 3] != 0

    segments: MaskRowSegments = []
    for y in range(height):
        row = opaque[y]
        if not row.any():
            segments.append([])
            continue
        draws = rng.random(width)
        segments.append(_segment_row(row, draws, threshold, close_trailing_runs))

    logger.debug(
        "Segmented %dx%d mask into %d ranges (p=%.3f, close_trailing=%s)",
        width,
        height,
        sum(len(r) for r in segments),
        split_probability,
        close_trailing_runs,
    )
    return segments
