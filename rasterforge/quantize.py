"""Color reduction to small palettes.

- quantize_uniform(image): fixed 3-3-2 bit RGB grid, no palette table
- quantize_populosity(image): the 256 most frequent 15-bit colors, then
  nearest-color remapping

Both work in place on an :class:`~rasterforge.image.Image` and return it.
"""
from __future__ import annotations

import logging

import numpy as np

from .image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray

PALETTE_SIZE = 256
HISTOGRAM_BUCKETS = 1 << 15

# Remapping is done per unique input color, in chunks, so the distance
# matrix never holds more than this many rows at once.
_REMAP_CHUNK = 1 << 12

# Representable 3-bit levels, round(k * 255 / 7).
_LEVELS_3BIT = np.rint(np.arange(8) * (255.0 / 7.0)).astype(np.uint8)
_LEVELS_2BIT = (np.arange(4) * 85).astype(np.uint8)


def quantize_uniform(image: Image) -> Image:
    """Reduce R and G to 3 bits and B to 2 bits.

    R, G become ``round((c >> 5) * 255 / 7)``; B becomes ``(c >> 6) * 85``.
    Alpha is untouched.
    """
    px = image.pixels
    px[..., 0] = _LEVELS_3BIT[px[..., 0] >> 5]
    px[..., 1] = _LEVELS_3BIT[px[..., 1] >> 5]
    px[..., 2] = _LEVELS_2BIT[px[..., 2] >> 6]
    return image


def _bucket_keys(rgb: Array) -> Array:
    """Pack 8-bit RGB into 15-bit keys ``r5 << 10 | g5 << 5 | b5``."""
    c = rgb.astype(np.uint16) >> 3
    return (c[..., 0] << 10) | (c[..., 1] << 5) | c[..., 2]


def populosity_palette(image: Image, size: int = PALETTE_SIZE) -> Array:
    """Return the ``size`` most populous 15-bit buckets as packed keys.

    Buckets are ordered by descending count. Equal counts keep ascending key
    order (stable sort), so the selection is deterministic. When ``size``
    exceeds the number of buckets seen, empty buckets fill the tail in key
    order, as a full histogram sort would produce.
    """
    keys = _bucket_keys(image.pixels[..., :3])
    hist = np.bincount(keys.ravel(), minlength=HISTOGRAM_BUCKETS)
    order = np.argsort(-hist, kind="stable")
    logger.debug(
        "populosity histogram: %d occupied buckets of %d",
        int(np.count_nonzero(hist)),
        HISTOGRAM_BUCKETS,
    )
    return order[:size]


def _unpack_keys(keys: Array) -> Array:
    """Split packed keys into an ``(N, 3)`` array of 5-bit components."""
    keys = keys.astype(np.int64)
    return np.stack([(keys >> 10) & 0x1F, (keys >> 5) & 0x1F, keys & 0x1F], axis=-1)


def quantize_populosity(image: Image) -> Image:
    """Remap every pixel to the nearest of the 256 most frequent colors.

    Distance is squared Euclidean in normalized RGB, with input channels
    scaled by 1/255 and palette entries by 1/31. Ties resolve to the lowest
    palette index. Chosen entries are written back as ``component << 3``.
    """
    palette_keys = populosity_palette(image)
    comps = _unpack_keys(palette_keys)
    targets = comps.astype(np.float32) / np.float32(31.0)
    palette_rgb = (comps << 3).astype(np.uint8)

    rgb = image.pixels[..., :3].reshape(-1, 3)
    packed = (
        (rgb[:, 0].astype(np.uint32) << 16)
        | (rgb[:, 1].astype(np.uint32) << 8)
        | rgb[:, 2].astype(np.uint32)
    )
    uniq, inverse = np.unique(packed, return_inverse=True)
    uniq_rgb = np.stack([(uniq >> 16) & 0xFF, (uniq >> 8) & 0xFF, uniq & 0xFF], axis=-1)
    colors = uniq_rgb.astype(np.float32) / np.float32(255.0)

    nearest = np.empty(len(uniq), dtype=np.int64)
    for start in range(0, len(uniq), _REMAP_CHUNK):
        block = colors[start:start + _REMAP_CHUNK]
        diff = targets[None, :, :] - block[:, None, :]
        sq = diff * diff
        dist = (sq[..., 0] + sq[..., 1]) + sq[..., 2]
        # argmin returns the first minimum, i.e. the lowest palette index
        nearest[start:start + _REMAP_CHUNK] = np.argmin(dist, axis=1)

    mapped = palette_rgb[nearest][inverse.reshape(-1)]
    image.pixels[..., :3] = mapped.reshape(image.height, image.width, 3)
    logger.debug("populosity remap: %d unique input colors", len(uniq))
    return image


__all__ = ["quantize_uniform", "quantize_populosity", "populosity_palette"]
