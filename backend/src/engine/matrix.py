"""Pixel matrix — the mutable (H, W, 4) RGBA working buffer."""

import numpy as np
from PIL import Image


def extract_pixel_matrix(image) -> np.ndarray:
    """Copy a decoded RGBA image into a fresh (H, W, 4) uint8 matrix.

    Args:
        image: (H, W, 4) uint8 array or a PIL image (converted to RGBA).

    Returns:
        New array where ``matrix[y, x]`` is the color at pixel (x, y).

    Raises:
        ValueError: If the input is not an (H, W, 4) image.
    """
    if isinstance(image, Image.Image):
        image = np.asarray(image.convert("RGBA"))

    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError(f"Expected (H, W, 4) RGBA image, got shape {arr.shape}")
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {arr.dtype}")

    return np.array(arr, dtype=np.uint8, copy=True, order="C")


def pixel_at(matrix: np.ndarray, x: int, y: int) -> tuple[int, int, int, int]:
    """Color at column x, row y as an (r, g, b, a) tuple."""
    r, g, b, a = matrix[y, x]
    return int(r), int(g), int(b), int(a)


def brightness(pixels: np.ndarray) -> np.ndarray:
    """Sort key: R + G + B, alpha excluded. Widened so 3 * 255 fits."""
    return pixels[..., :3].astype(np.int32).sum(axis=-1)
