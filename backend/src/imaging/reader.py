"""Image decoding via Pillow."""

import logging

import numpy as np
from PIL import Image

from security import validate_dimensions

logger = logging.getLogger(__name__)


def load_rgba(path: str) -> np.ndarray:
    """Decode an image file to an (H, W, 4) uint8 RGBA array.

    The size is checked from the header before any pixel data is decoded.

    Raises:
        FileNotFoundError / PIL.UnidentifiedImageError: From Pillow.
        ValueError: If the image fails validate_dimensions.
    """
    with Image.open(path) as img:
        width, height = img.size
        errors = validate_dimensions(width, height)
        if errors:
            raise ValueError("; ".join(errors))
        logger.debug("Decoding %s (%s, %dx%d)", path, img.format, width, height)
        return np.asarray(img.convert("RGBA"), dtype=np.uint8).copy()
