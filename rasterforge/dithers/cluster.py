"""Ordered dithering with a fixed 4x4 clustered-dot threshold matrix."""
from __future__ import annotations

import numpy as np

from ..image import Image

CLUSTER_MATRIX = np.array(
    [
        [180, 90, 150, 60],
        [15, 240, 210, 105],
        [120, 195, 225, 30],
        [45, 135, 75, 165],
    ],
    dtype=np.uint8,
)


def threshold_map(height: int, width: int, matrix: np.ndarray = CLUSTER_MATRIX) -> np.ndarray:
    """Tile ``matrix`` to cover a ``height x width`` image.

    Cell ``(y, x)`` of the result is ``matrix[y % n, x % n]``.
    """
    n = matrix.shape[0]
    ty = (height + n - 1) // n
    tx = (width + n - 1) // n
    return np.tile(matrix, (ty, tx))[:height, :width]


def dither_cluster(image: Image) -> Image:
    """Grayscale, then set each channel to 255 where it exceeds its matrix cell."""
    image.to_grayscale()
    thresh = threshold_map(image.height, image.width)
    rgb = image.pixels[..., :3]
    image.pixels[..., :3] = np.where(rgb > thresh[..., None], 255, 0).astype(np.uint8)
    return image


__all__ = ["dither_cluster", "threshold_map", "CLUSTER_MATRIX"]
