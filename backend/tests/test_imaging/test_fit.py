"""Tests for imaging.fit — aspect-preserving mask fitting."""

import numpy as np
import pytest

from conftest import make_mask
from imaging.fit import fit_mask, fitted_size


@pytest.mark.parametrize(
    "src, dest, expected",
    [
        ((200, 100), (100, 100), (100, 50)),  # landscape → match width
        ((100, 200), (100, 100), (50, 100)),  # portrait → match height
        ((100, 100), (80, 60), (60, 60)),  # square (ratio 1.0) → match height
        ((0, 10), (80, 60), (0, 0)),
    ],
)
def test_fitted_size(src, dest, expected):
    assert fitted_size(src, dest) == expected


def test_same_size_is_copied():
    mask = make_mask(np.full((5, 7), 255))
    fitted = fit_mask(mask, (7, 5))
    np.testing.assert_array_equal(fitted, mask)
    assert fitted is not mask


def test_output_always_matches_target_size():
    mask = make_mask(np.full((30, 90), 255))
    for size in [(64, 64), (10, 200), (300, 20)]:
        assert fit_mask(mask, size).shape == (size[1], size[0], 4)


def test_uncovered_area_is_transparent():
    # Landscape 2:1 mask onto a square canvas fills only the top half.
    mask = make_mask(np.full((50, 100), 255))
    fitted = fit_mask(mask, (40, 40))
    assert (fitted[:20, :, 3] > 0).all()
    assert (fitted[20:, :, 3] == 0).all()


def test_overflow_is_cropped():
    # Portrait 1:2 mask onto a 10x40 canvas: scaled to 20x40, right half cropped.
    mask = make_mask(np.full((100, 50), 255))
    fitted = fit_mask(mask, (10, 40))
    assert fitted.shape == (40, 10, 4)
    assert (fitted[:, :, 3] > 0).all()


def test_empty_target():
    mask = make_mask(np.full((4, 4), 255))
    assert fit_mask(mask, (0, 0)).shape == (0, 0, 4)
