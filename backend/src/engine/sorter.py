"""Row sort engine — orders each mask range by brightness and writes it back.

Rows are independent work items on a bounded thread pool (fork-join).
Each task touches only its own row of ``base`` and ``matrix``, so the
shared buffers need no locking. All ranges are validated before any task
is scheduled; a row task that still fails is collected and reported once
every row has been joined.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from engine.matrix import brightness
from engine.segmenter import MaskRowSegments, SortRange

logger = logging.getLogger(__name__)


class RowSortError(RuntimeError):
    """One or more row tasks failed. ``failures`` is [(row, exception)] by row."""

    def __init__(self, failures: list[tuple[int, Exception]]):
        self.failures = sorted(failures, key=lambda f: f[0])
        rows = ", ".join(str(row) for row, _ in self.failures[:10])
        more = "" if len(self.failures) <= 10 else f" (+{len(self.failures) - 10} more)"
        super().__init__(f"{len(self.failures)} row(s) failed to sort: {rows}{more}")


def _validate(base: np.ndarray, matrix: np.ndarray, segments: MaskRowSegments):
    if base.ndim != 3 or base.shape[2] != 4:
        raise ValueError(f"Expected (H, W, 4) base image, got shape {base.shape}")
    if matrix.shape != base.shape:
        raise ValueError(
            f"Pixel matrix shape {matrix.shape} does not match base {base.shape}"
        )
    height, width = base.shape[:2]
    if len(segments) != height:
        raise ValueError(f"Got {len(segments)} segment rows for image height {height}")

    for y, ranges in enumerate(segments):
        prev_end = 0
        for start, end in ranges:
            if not 0 <= start < end <= width:
                raise ValueError(
                    f"Invalid range [{start}, {end}) in row {y} (width {width})"
                )
            if start < prev_end:
                raise ValueError(f"Overlapping range [{start}, {end}) in row {y}")
            prev_end = end


def sort_row(base: np.ndarray, matrix: np.ndarray, y: int, ranges: list[SortRange]):
    """Sort each range of row y in the matrix, then copy it into base."""
    row = matrix[y]
    for start, end in ranges:
        span = row[start:end]
        order = np.argsort(brightness(span), kind="stable")
        row[start:end] = span[order]
        base[y, start:end] = row[start:end]


def sort_pixels(
    base: np.ndarray,
    matrix: np.ndarray,
    segments: MaskRowSegments,
    *,
    max_workers: int | None = None,
) -> np.ndarray:
    """Sort every segmented range ascending by brightness, in place.

    Args:
        base:        (H, W, 4) uint8 image, receives the sorted spans.
        matrix:      Working copy of base (see engine.matrix).
        segments:    Per-row ranges from engine.segmenter.segment_mask.
        max_workers: Thread pool size. Defaults to the CPU count.

    Returns:
        ``base``, mutated in place.

    Raises:
        ValueError:   On mismatched shapes or invalid ranges (base untouched).
        RowSortError: If any row task raised; the rest still complete.
    """
    _validate(base, matrix, segments)

    work = [(y, ranges) for y, ranges in enumerate(segments) if ranges]
    if not work:
        return base

    workers = max_workers or os.cpu_count() or 1
    workers = max(1, min(workers, len(work)))

    failures: list[tuple[int, Exception]] = []
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pixsort-row") as pool:
        futures = {pool.submit(sort_row, base, matrix, y, ranges): y for y, ranges in work}
        for future, y in futures.items():
            exc = future.exception()
            if exc is not None:
                failures.append((y, exc))

    if failures:
        logger.error("Row sort failed on %d of %d rows", len(failures), len(work))
        raise RowSortError(failures)

    logger.debug("Sorted %d rows on %d workers", len(work), workers)
    return base
