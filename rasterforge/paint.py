"""Painterly rendering with circular brush strokes.

A simplified version of Hertzmann's multi-scale painterly filter. The
canvas starts white and is painted in several passes, coarsest brush first.
Each pass lays one stroke per grid cell whose color is the average of the
original picture under a jittered window, then paints the strokes in a
random order. Later strokes cover earlier ones.

Stroke painting is sequential (every stroke sees the canvas left by the
previous one), so it runs as a Numba-compiled loop.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numba import njit

from .config import PainterlyConfig
from .image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray


@dataclass(frozen=True)
class Stroke:
    """One circular paint daub centered at ``(x, y)``."""

    radius: int
    x: int
    y: int
    color: tuple[int, int, int, int]


@njit(cache=True)
def _paint_strokes(canvas: np.ndarray, radii: np.ndarray, xs: np.ndarray, ys: np.ndarray, colors: np.ndarray) -> None:
    H, W, C = canvas.shape
    for k in range(radii.shape[0]):
        r = radii[k]
        cx = xs[k]
        cy = ys[k]
        r2 = r * r
        for dy in range(-r, r + 1):
            y = cy + dy
            if y < 0 or y >= H:
                continue
            for dx in range(-r, r + 1):
                x = cx + dx
                if x < 0 or x >= W:
                    continue
                d2 = dx * dx + dy * dy
                if d2 <= r2:
                    for c in range(C):
                        canvas[y, x, c] = colors[k, c]
                elif d2 == r2 + 1:
                    # one-pixel halo, averaged with what is underneath
                    for c in range(C):
                        canvas[y, x, c] = (np.int64(canvas[y, x, c]) + colors[k, c]) // 2


def paint_stroke(image: Image, stroke: Stroke) -> Image:
    """Paint a single stroke onto ``image`` in place.

    Pixels with ``dx^2 + dy^2 <= r^2`` take the stroke color; pixels with
    ``dx^2 + dy^2 == r^2 + 1`` are averaged with it. Off-image pixels are
    ignored.
    """
    _paint_strokes(
        image.pixels,
        np.array([stroke.radius], dtype=np.int64),
        np.array([stroke.x], dtype=np.int64),
        np.array([stroke.y], dtype=np.int64),
        np.array([stroke.color], dtype=np.int64),
    )
    return image


def _summed_area(rgb: Array) -> Array:
    """Integer summed-area table with a zero first row and column."""
    h, w = rgb.shape[:2]
    sat = np.zeros((h + 1, w + 1, rgb.shape[2]), dtype=np.int64)
    sat[1:, 1:] = rgb.astype(np.int64).cumsum(axis=0).cumsum(axis=1)
    return sat


def _pass_strokes(
    sat: Array,
    height: int,
    width: int,
    brush: int,
    rng: np.random.Generator,
    config: PainterlyConfig,
) -> tuple[Array, Array, Array, Array]:
    """Generate the strokes of one brush pass, already shuffled.

    Returns ``(radii, xs, ys, colors)`` arrays ready for painting.
    """
    gy, gx = np.meshgrid(
        np.arange(brush // 2, height, brush),
        np.arange(brush // 2, width, brush),
        indexing="ij",
    )
    gy = gy.ravel()
    gx = gx.ravel()
    n = gy.size

    lo, hi = config.radius_jitter
    jitter = config.position_jitter
    radii = np.floor(brush * rng.uniform(lo, hi, size=n)).astype(np.int64)
    offsets = rng.integers(-jitter, jitter + 1, size=(n, 2))
    cx = gx + offsets[:, 0]
    cy = gy + offsets[:, 1]

    # averaging window [c - r, c + r) clamped to the image
    x0 = np.clip(cx - radii, 0, width)
    x1 = np.clip(cx + radii, 0, width)
    y0 = np.clip(cy - radii, 0, height)
    y1 = np.clip(cy + radii, 0, height)
    count = (x1 - x0) * (y1 - y0)
    keep = count > 0
    if not keep.all():
        logger.debug("brush %d: skipping %d strokes outside the image", brush, int((~keep).sum()))
    x0, x1, y0, y1, count = x0[keep], x1[keep], y0[keep], y1[keep], count[keep]
    radii, cx, cy = radii[keep], cx[keep], cy[keep]

    sums = sat[y1, x1] - sat[y0, x1] - sat[y1, x0] + sat[y0, x0]
    colors = np.empty((radii.size, 4), dtype=np.int64)
    colors[:, :3] = sums // count[:, None]
    colors[:, 3] = 255

    order = rng.permutation(radii.size)
    return radii[order], cx[order], cy[order], colors[order]


def npr_paint(
    image: Image,
    rng: np.random.Generator,
    config: Optional[PainterlyConfig] = None,
) -> Image:
    """Repaint ``image`` in place as brush strokes.

    Parameters
    ----------
    image : Image
        Image to repaint. Its original colors are sampled before painting.
    rng : np.random.Generator
        Random source for radius/position jitter and stroke order.
    config : PainterlyConfig | None
        Brush schedule and jitter; defaults to radii 100, 40, 10, 4, 2 with
        radius jitter [0.7, 1.2] and position jitter +/-10.

    Returns
    -------
    Image
        The same image, painted.
    """
    if config is None:
        config = PainterlyConfig()
    config.validate()

    sat = _summed_area(image.pixels[..., :3])
    image.pixels[..., :3] = 255

    for brush in config.brush_radii:
        radii, xs, ys, colors = _pass_strokes(sat, image.height, image.width, brush, rng, config)
        logger.debug("brush %d: painting %d strokes", brush, radii.size)
        _paint_strokes(image.pixels, radii, xs, ys, colors)
    return image


__all__ = ["Stroke", "paint_stroke", "npr_paint"]
