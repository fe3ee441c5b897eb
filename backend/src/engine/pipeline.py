"""Pixel-sort pipeline — read base + mask, fit, sort, write.

The output file is only written after the sort has fully succeeded, so a
failed run never leaves a half-sorted image behind.
"""

import logging
import time

import sentry_sdk

from effects import pixelsort
from imaging.fit import fit_mask
from imaging.reader import load_rgba
from imaging.writer import save_image

logger = logging.getLogger(__name__)

# Sort timing threshold (milliseconds)
SORT_WARN_MS = 2000


def _capture_with_context(e: Exception, stage: str, extra: dict):
    """Capture exception to Sentry with stage-level context and fingerprint dedup."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("effect_id", pixelsort.EFFECT_ID)
        scope.set_tag("stage", stage)
        scope.fingerprint = ["pixsort-failure", stage, type(e).__name__]
        scope.set_context("pipeline", extra)
        sentry_sdk.capture_exception(e, scope=scope)


def _breadcrumb(stage: str, **data):
    sentry_sdk.add_breadcrumb(category="pipeline", message=stage, data=data, level="info")


def run(
    base_path: str,
    mask_path: str,
    output_path: str,
    params: dict | None = None,
    seed: int | None = None,
    quality: int = 95,
) -> dict:
    """Pixel-sort ``base_path`` through ``mask_path`` into ``output_path``.

    Args:
        base_path:   Image to sort.
        mask_path:   Mask image; alpha != 0 selects pixels. Fitted to the base.
        output_path: Destination file; format follows the extension.
        params:      Effect params (see effects.pixelsort.PARAMS).
        seed:        Reproducible run splitting when given.
        quality:     JPEG quality.

    Returns:
        Summary dict: width, height, params, per-stage timings (ms).

    Raises:
        Whatever the failing stage raised, after logging and Sentry capture.
    """
    clean = pixelsort.sanitize_params(params)
    timings: dict[str, float] = {}
    stage = "decode"
    ctx = {"params": clean, "seeded": seed is not None}

    try:
        t0 = time.monotonic()
        base = load_rgba(base_path)
        mask = load_rgba(mask_path)
        timings["decode_ms"] = (time.monotonic() - t0) * 1000
        height, width = base.shape[:2]
        ctx["resolution"] = (width, height)
        _breadcrumb(stage, width=width, height=height)

        stage = "fit"
        t0 = time.monotonic()
        if mask.shape[:2] != base.shape[:2]:
            logger.info(
                "Fitting mask %dx%d to image %dx%d",
                mask.shape[1],
                mask.shape[0],
                width,
                height,
            )
            mask = fit_mask(mask, (width, height))
        timings["fit_ms"] = (time.monotonic() - t0) * 1000
        _breadcrumb(stage)

        stage = "sort"
        t0 = time.monotonic()
        output = pixelsort.apply(base, mask, clean, seed=seed)
        timings["sort_ms"] = (time.monotonic() - t0) * 1000
        _breadcrumb(stage)

        if timings["sort_ms"] > SORT_WARN_MS:
            logger.warning(
                "Sort took %.0fms (>%dms warn threshold) at %dx%d",
                timings["sort_ms"],
                SORT_WARN_MS,
                width,
                height,
            )

        stage = "encode"
        t0 = time.monotonic()
        save_image(output, output_path, quality=quality)
        timings["encode_ms"] = (time.monotonic() - t0) * 1000
    except Exception as e:
        _capture_with_context(e, stage, ctx)
        logger.exception("Pixel sort failed during %s", stage)
        raise

    logger.info(
        "Sorted %dx%d image in %.0fms (decode %.0f, fit %.0f, sort %.0f, encode %.0f)",
        width,
        height,
        sum(timings.values()),
        timings["decode_ms"],
        timings["fit_ms"],
        timings["sort_ms"],
        timings["encode_ms"],
    )

    return {
        "width": width,
        "height": height,
        "params": clean,
        "timings": timings,
        "output_path": output_path,
    }
