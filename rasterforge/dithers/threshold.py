"""Point-wise threshold dithers on the grayscale image.

Each variant first converts the image to grayscale, then maps every channel
to 0 or 255 by comparing it with a threshold. Alpha is left alone.
"""
from __future__ import annotations

import logging

import numpy as np

from ..errors import InvalidParameterError
from ..image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray

THRESHOLD = 128
# +/- 20% of the 256-level range
RANDOM_AMPLITUDE = int(256 * 0.2)


def _binarize(values: Array, threshold) -> Array:
    return np.where(values > threshold, 255, 0).astype(np.uint8)


def dither_threshold(image: Image) -> Image:
    """Set each channel to 255 where the gray value exceeds 128, else 0."""
    image.to_grayscale()
    image.pixels[..., :3] = _binarize(image.pixels[..., :3], THRESHOLD)
    return image


def dither_random(
    image: Image,
    rng: np.random.Generator,
    amplitude: int = RANDOM_AMPLITUDE,
) -> Image:
    """Threshold at 128 after adding uniform noise in ``[-amplitude, amplitude]``.

    One integer is drawn per pixel and shared by R, G and B, so the output
    stays gray. Pass a seeded ``rng`` for reproducible output.
    """
    if amplitude < 0:
        raise InvalidParameterError("amplitude must be >= 0")
    noise = rng.integers(-amplitude, amplitude + 1, size=(image.height, image.width))
    image.to_grayscale()
    values = image.pixels[..., :3].astype(np.int64) + noise[..., None]
    image.pixels[..., :3] = _binarize(values, THRESHOLD)
    return image


def dither_bright(image: Image) -> Image:
    """Threshold each channel at its own (truncated) mean value.

    Using the mean instead of a fixed 128 keeps the proportion of white
    pixels close to the average brightness of the channel.
    """
    image.to_grayscale()
    rgb = image.pixels[..., :3]
    thresholds = rgb.reshape(-1, 3).mean(axis=0).astype(np.int64)
    logger.debug("brightness-preserving thresholds: %s", thresholds.tolist())
    image.pixels[..., :3] = _binarize(rgb, thresholds[None, None, :])
    return image


__all__ = ["dither_threshold", "dither_random", "dither_bright", "RANDOM_AMPLITUDE"]
