"""Mask fitting — scale a mask to the base image while keeping its aspect."""

import numpy as np
from PIL import Image


def fitted_size(src_size: tuple[int, int], dest_size: tuple[int, int]) -> tuple[int, int]:
    """Scaled (width, height) of src for dest.

    Landscape sources (width / height > 1.0) scale to the destination
    width; everything else scales to the destination height.
    """
    src_w, src_h = src_size
    dest_w, dest_h = dest_size
    if src_w == 0 or src_h == 0:
        return 0, 0

    ratio = src_w / src_h
    if ratio > 1.0:
        return dest_w, max(1, round(dest_w * src_h / src_w))
    return max(1, round(dest_h * src_w / src_h)), dest_h


def fit_mask(mask: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize an RGBA mask to exactly ``size`` = (width, height).

    The mask is Lanczos-scaled with its aspect ratio kept, then pasted at
    the top-left of a transparent canvas of the target size. Overflow is
    cropped; uncovered area stays transparent (never sorted).
    """
    dest_w, dest_h = size
    canvas = np.zeros((dest_h, dest_w, 4), dtype=np.uint8)

    src_h, src_w = mask.shape[:2]
    if (src_w, src_h) == (dest_w, dest_h):
        canvas[:] = mask
        return canvas

    fit_w, fit_h = fitted_size((src_w, src_h), (dest_w, dest_h))
    if fit_w == 0 or fit_h == 0 or dest_w == 0 or dest_h == 0:
        return canvas

    scaled = Image.fromarray(np.ascontiguousarray(mask, dtype=np.uint8)).resize(
        (fit_w, fit_h), Image.Resampling.LANCZOS
    )
    scaled_arr = np.asarray(scaled)

    h = min(fit_h, dest_h)
    w = min(fit_w, dest_w)
    canvas[:h, :w] = scaled_arr[:h, :w]
    return canvas
