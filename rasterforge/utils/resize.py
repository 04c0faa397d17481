"""Geometric resampling: half size, double size, arbitrary scale and rotation.

Every function returns a new :class:`~rasterforge.image.Image` and leaves
its input untouched. Output alpha is always 255.

Half size, double size and resize use separable interpolation kernels, so
each is computed as two 1D sampling matrices applied along rows and columns.
Kernel taps outside the source are skipped without renormalization, the
same border policy as :mod:`rasterforge.filters`.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from ..errors import InvalidParameterError
from ..image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray

_BINOMIAL_3 = np.array([1.0, 2.0, 1.0]) / 4.0
_BINOMIAL_4 = np.array([1.0, 3.0, 3.0, 1.0]) / 8.0
# 2D 4x4 kernel used by resize and rotate
_RESAMPLE_4X4 = np.outer(_BINOMIAL_4, _BINOMIAL_4)


def _sampling_matrix(src: Array, weights: Array, in_len: int, first_offset: int = -1) -> Array:
    """Build an ``(out_len, in_len)`` matrix of 1D interpolation weights.

    Parameters
    ----------
    src : np.ndarray
        Source index for each output position, shape ``(out_len,)``.
    weights : np.ndarray
        Tap weights per output position, shape ``(out_len, taps)``. Tap ``k``
        reads source index ``src + first_offset + k``.
    in_len : int
        Source length along this axis; taps outside ``[0, in_len)`` are dropped.
    """
    out_len, taps = weights.shape
    m = np.zeros((out_len, in_len), dtype=np.float64)
    rows = np.arange(out_len)
    for k in range(taps):
        idx = src + first_offset + k
        valid = (idx >= 0) & (idx < in_len)
        m[rows[valid], idx[valid]] += weights[valid, k]
    return m


def _apply_separable(values: Array, rows: Array, cols: Array) -> Array:
    """Resample ``values`` (H, W, C) with row matrix (H', H) and column matrix (W', W)."""
    tmp = np.tensordot(rows, values, axes=(1, 0))  # (H', W, C)
    out = np.tensordot(tmp, cols, axes=(1, 1))  # (H', C, W')
    return out.transpose(0, 2, 1)


def _to_image(values: Array) -> Image:
    h, w = values.shape[:2]
    out = Image(w, h)
    out.write_rgb_float(np.clip(values, 0.0, 1.0))
    out.pixels[..., 3] = 255
    return out


def _fixed_taps(out_len: int, kernel: Array) -> Array:
    return np.broadcast_to(kernel, (out_len, kernel.size))


def half_size(image: Image) -> Image:
    """Halve both dimensions (floor) with a 3x3 binomial pre-filter.

    Output pixel ``(x, y)`` is the ``[[1,2,1],[2,4,2],[1,2,1]] / 16``
    weighted neighborhood of source pixel ``(2x, 2y)``.
    """
    if image.width < 2 or image.height < 2:
        raise InvalidParameterError(
            f"half_size needs an image of at least 2x2, got {image.width}x{image.height}"
        )
    new_w, new_h = image.width // 2, image.height // 2
    rows = _sampling_matrix(np.arange(new_h) * 2, _fixed_taps(new_h, _BINOMIAL_3), image.height)
    cols = _sampling_matrix(np.arange(new_w) * 2, _fixed_taps(new_w, _BINOMIAL_3), image.width)
    logger.debug("half_size %dx%d -> %dx%d", image.width, image.height, new_w, new_h)
    return _to_image(_apply_separable(image.rgb_float(), rows, cols))


def _double_taps(out_len: int) -> Array:
    """Even outputs use [1,2,1]/4, odd outputs [1,3,3,1]/8."""
    taps = np.zeros((out_len, 4), dtype=np.float64)
    taps[0::2, :3] = _BINOMIAL_3
    taps[1::2, :] = _BINOMIAL_4
    return taps


def double_size(image: Image) -> Image:
    """Double both dimensions with parity-dependent interpolation kernels.

    Output ``(x, y)`` reads around source ``(x // 2, y // 2)``. Along each
    axis even positions use ``[1, 2, 1]`` and odd positions ``[1, 3, 3, 1]``;
    the 2D weight is their product, normalized by 1/16, 1/32 or 1/64
    depending on how many coordinates are odd.
    """
    new_w, new_h = image.width * 2, image.height * 2
    rows = _sampling_matrix(np.arange(new_h) // 2, _double_taps(new_h), image.height)
    cols = _sampling_matrix(np.arange(new_w) // 2, _double_taps(new_w), image.width)
    logger.debug("double_size %dx%d -> %dx%d", image.width, image.height, new_w, new_h)
    return _to_image(_apply_separable(image.rgb_float(), rows, cols))


def resize(image: Image, scale: float) -> Image:
    """Scale both dimensions by ``scale`` using a 4x4 ``[1,3,3,1]`` kernel.

    New dimensions are ``int(width * scale)`` and ``int(height * scale)``.
    Output ``(x, y)`` reads around source ``(floor(x / scale), floor(y / scale))``.

    Parameters
    ----------
    image : Image
        Source image.
    scale : float
        Scale factor (> 0). Values > 1 upscale.

    Returns
    -------
    Image
        Resized image.
    """
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidParameterError(f"scale must be a finite number > 0, got {scale}")
    new_w = int(image.width * scale)
    new_h = int(image.height * scale)
    if new_w < 1 or new_h < 1:
        raise InvalidParameterError(
            f"scale {scale} shrinks {image.width}x{image.height} to an empty image"
        )

    src_y = np.floor(np.arange(new_h) / scale).astype(np.int64)
    src_x = np.floor(np.arange(new_w) / scale).astype(np.int64)
    rows = _sampling_matrix(src_y, _fixed_taps(new_h, _BINOMIAL_4), image.height)
    cols = _sampling_matrix(src_x, _fixed_taps(new_w, _BINOMIAL_4), image.width)
    logger.debug("resize x%.3f %dx%d -> %dx%d", scale, image.width, image.height, new_w, new_h)
    return _to_image(_apply_separable(image.rgb_float(), rows, cols))


def rotate(image: Image, angle_degrees: float) -> Image:
    """Rotate by ``angle_degrees`` about the origin, keeping the dimensions.

    Each output pixel is inverse-mapped with
    ``src_x = x cos(-t) - y sin(-t)``, ``src_y = x sin(-t) + y cos(-t)``,
    truncated toward zero, then sampled with the 4x4 resize kernel. The
    rotation is about pixel (0, 0), not the image center, so content
    shifts as well as turns; pixels mapped outside the source come out
    black.
    """
    if not math.isfinite(angle_degrees):
        raise InvalidParameterError(f"angle must be finite, got {angle_degrees}")
    h, w = image.height, image.width
    theta = -math.radians(angle_degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    ys, xs = np.mgrid[0:h, 0:w]
    src_x = np.trunc(xs * cos_t - ys * sin_t).astype(np.int64)
    src_y = np.trunc(xs * sin_t + ys * cos_t).astype(np.int64)

    src = image.rgb_float()
    out = np.zeros((h, w, 3), dtype=np.float64)
    for i in range(4):
        iy = src_y + i - 1
        valid_y = (iy >= 0) & (iy < h)
        for j in range(4):
            ix = src_x + j - 1
            valid = valid_y & (ix >= 0) & (ix < w)
            out[valid] += _RESAMPLE_4X4[i, j] * src[iy[valid], ix[valid]]
    logger.debug("rotate %.2f degrees on %dx%d", angle_degrees, w, h)
    return _to_image(out)


__all__ = ["half_size", "double_size", "resize", "rotate"]
