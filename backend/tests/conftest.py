import numpy as np
import pytest
from PIL import Image


def make_frame(h: int = 64, w: int = 64, seed: int = 42) -> np.ndarray:
    """Random opaque RGBA frame."""
    rng = np.random.default_rng(seed)
    frame = rng.integers(0, 256, (h, w, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame


def make_mask(alpha: np.ndarray) -> np.ndarray:
    """RGBA mask from an (H, W) alpha plane (colour channels white)."""
    alpha = np.asarray(alpha, dtype=np.uint8)
    mask = np.full(alpha.shape + (4,), 255, dtype=np.uint8)
    mask[:, :, 3] = alpha
    return mask


def brightness_color(total: int) -> list[int]:
    """RGBA color whose R + G + B equals ``total`` (0..765)."""
    r = min(total, 255)
    g = min(total - r, 255)
    b = total - r - g
    return [r, g, b, 255]


@pytest.fixture
def frame():
    return make_frame()


@pytest.fixture
def band_mask():
    """64x64 mask with an opaque band over columns 8..47 and transparent edges."""
    alpha = np.zeros((64, 64), dtype=np.uint8)
    alpha[:, 8:48] = 255
    return make_mask(alpha)


@pytest.fixture
def image_files(tmp_path):
    """Base PNG (64x64), matching mask PNG and a smaller landscape mask PNG."""
    base = make_frame(64, 64, seed=7)
    base_path = tmp_path / "base.png"
    Image.fromarray(base).save(base_path)

    alpha = np.zeros((64, 64), dtype=np.uint8)
    alpha[:, 8:48] = 255
    mask_path = tmp_path / "mask.png"
    Image.fromarray(make_mask(alpha)).save(mask_path)

    small_alpha = np.zeros((16, 32), dtype=np.uint8)
    small_alpha[:, 4:24] = 255
    small_mask_path = tmp_path / "mask_small.png"
    Image.fromarray(make_mask(small_alpha)).save(small_mask_path)

    return {
        "base": base_path,
        "base_pixels": base,
        "mask": mask_path,
        "mask_small": small_mask_path,
        "dir": tmp_path,
    }
