from __future__ import annotations

import numpy as np
import pytest

from rasterforge import Image


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def make_solid():
    """Factory for a ``width x height`` image filled with one RGBA value."""

    def _make(width: int, height: int, rgba=(0, 0, 0, 255)) -> Image:
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[...] = rgba
        return Image(width, height, arr)

    return _make


@pytest.fixture
def gradient_image() -> Image:
    """A 16x12 opaque image with distinct colors in every pixel."""
    h, w = 12, 16
    ys, xs = np.mgrid[0:h, 0:w]
    arr = np.empty((h, w, 4), dtype=np.uint8)
    arr[..., 0] = (xs * 16) % 256
    arr[..., 1] = (ys * 21) % 256
    arr[..., 2] = ((xs + ys) * 9) % 256
    arr[..., 3] = 255
    return Image(w, h, arr)


@pytest.fixture
def noise_image(rng) -> Image:
    """A 64x48 opaque image of uniform random colors."""
    arr = rng.integers(0, 256, size=(48, 64, 4), dtype=np.uint8)
    arr[..., 3] = 255
    return Image(64, 48, arr)
