"""Image encoding via Pillow."""

import logging
import os
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

_ALPHA_LESS_FORMATS = {".jpg", ".jpeg", ".bmp"}


def save_image(frame: np.ndarray, path: str, quality: int = 95) -> None:
    """Encode an RGBA frame to ``path``; format follows the extension.

    JPEG and BMP drop alpha (RGB only). The image is encoded to a sibling
    temp file and moved over ``path`` only once encoding has finished, so
    a failed save never leaves a truncated file at ``path``.
    """
    target = Path(path)
    ext = target.suffix.lower()
    if ext in _ALPHA_LESS_FORMATS:
        img = Image.fromarray(np.ascontiguousarray(frame[:, :, :3]))
    else:
        img = Image.fromarray(np.ascontiguousarray(frame))

    fd, tmp_path = tempfile.mkstemp(
        dir=target.resolve().parent, prefix=f".{target.stem}-", suffix=target.suffix
    )
    os.close(fd)
    # mkstemp creates 0600; give the output the usual umask-based mode
    umask = os.umask(0)
    os.umask(umask)
    try:
        os.chmod(tmp_path, 0o666 & ~umask)
        if ext in (".jpg", ".jpeg"):
            img.save(tmp_path, format="JPEG", quality=quality)
        else:
            img.save(tmp_path)
        os.replace(tmp_path, target)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s (%dx%d)", path, img.width, img.height)
