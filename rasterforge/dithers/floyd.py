"""Floyd–Steinberg error diffusion, grayscale and per-channel color.

The diffusion loop is compiled with Numba. Each channel is processed on its
own in serpentine order: even rows left to right, odd rows right to left.
"""
from __future__ import annotations

import logging
import math

import numpy as np
from numba import njit

from ..image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray

# Quantization levels per channel are 2**bits - 1.
GRAY_BITS = (1, 1, 1)
COLOR_BITS = (3, 3, 2)


@njit(cache=True)
def _nearest_level(value: float, n: int) -> float:
    """Nearest of the ``n + 1`` levels ``k / n`` in [0, 1]; ties round down."""
    scaled = value * n
    q = math.floor(scaled)
    if scaled - q > 0.5:
        q += 1
    if q < 0:
        q = 0
    elif q > n:
        q = n
    return q / n


@njit(cache=True)
def _diffuse(work: np.ndarray, levels: np.ndarray) -> None:
    H, W, C = work.shape
    for c in range(C):
        n = levels[c]
        for y in range(H):
            if y % 2 == 1:
                start, stop, step_dir = W - 1, -1, -1
            else:
                start, stop, step_dir = 0, W, 1
            x = start
            while x != stop:
                old = work[y, x, c]
                new = _nearest_level(old, n)
                work[y, x, c] = new
                err = old - new

                # Floyd–Steinberg kernel (normalized by 16), mirrored on
                # right-to-left rows:
                #   *   7
                #  3  5  1
                nx = x + step_dir
                if 0 <= nx < W:
                    work[y, nx, c] += err * (7.0 / 16.0)
                if y + 1 < H:
                    px = x - step_dir
                    if 0 <= px < W:
                        work[y + 1, px, c] += err * (3.0 / 16.0)
                    work[y + 1, x, c] += err * (5.0 / 16.0)
                    if 0 <= nx < W:
                        work[y + 1, nx, c] += err * (1.0 / 16.0)
                x += step_dir


def diffuse_channels(values: Array, bits) -> Array:
    """Error-diffuse a float ``(H, W, 3)`` array in [0, 1].

    Parameters
    ----------
    values : np.ndarray
        Normalized channel data. It is not modified.
    bits : sequence of int
        Bit depth per channel; channel ``c`` is quantized to
        ``2**bits[c] - 1`` steps.

    Returns
    -------
    np.ndarray
        Quantized float64 array of the same shape.
    """
    work = np.array(values, dtype=np.float64, copy=True)
    levels = np.array([(1 << b) - 1 for b in bits], dtype=np.int64)
    logger.debug("error diffusion on %s with levels %s", work.shape, levels.tolist())
    _diffuse(work, levels)
    return work


def dither_fs(image: Image) -> Image:
    """Grayscale Floyd–Steinberg dithering to pure black and white."""
    image.to_grayscale()
    image.write_rgb_float(diffuse_channels(image.rgb_float(), GRAY_BITS))
    return image


def dither_color(image: Image) -> Image:
    """Floyd–Steinberg over the 3-3-2 bit uniform palette.

    Output levels match :func:`rasterforge.quantize.quantize_uniform`.
    """
    image.write_rgb_float(diffuse_channels(image.rgb_float(), COLOR_BITS))
    return image


__all__ = ["dither_fs", "dither_color", "diffuse_channels", "GRAY_BITS", "COLOR_BITS"]
