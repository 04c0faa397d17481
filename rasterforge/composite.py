"""Operations combining two images of the same size.

- difference: per-channel absolute difference of the black-composited RGB
- comp_over / comp_in / comp_out / comp_atop / comp_xor: Porter–Duff
  compositing

Pixels are treated as premultiplied RGBA, which is what
:meth:`~rasterforge.image.Image.to_rgb` assumes when it divides alpha out.
Each operation overwrites the first image and never touches the second.
A size mismatch raises :class:`DimensionMismatchError` before anything is
written.
"""
from __future__ import annotations

import logging

import numpy as np

from .errors import DimensionMismatchError
from .image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray


def _check_same_size(op: str, image: Image, other: Image) -> None:
    if image.size != other.size:
        raise DimensionMismatchError(op, image.size, other.size)


def difference(image: Image, other: Image) -> Image:
    """Replace ``image`` by ``|rgb(image) - rgb(other)|`` with opaque alpha."""
    _check_same_size("difference", image, other)
    a = image.to_rgb().astype(np.int16)
    b = other.to_rgb().astype(np.int16)
    image.pixels[..., :3] = np.abs(a - b).astype(np.uint8)
    image.pixels[..., 3] = 255
    return image


def _porter_duff(op: str, image: Image, other: Image, fa, fb) -> Image:
    """Write ``A * fa(aA, aB) + B * fb(aA, aB)`` into ``image``.

    ``A`` and ``B`` are the premultiplied pixels scaled to [0, 1]; the
    factor callables receive the ``(H, W, 1)`` alpha planes.
    """
    _check_same_size(op, image, other)
    a = image.pixels.astype(np.float64) / 255.0
    b = other.pixels.astype(np.float64) / 255.0
    alpha_a = a[..., 3:4]
    alpha_b = b[..., 3:4]
    out = a * fa(alpha_a, alpha_b) + b * fb(alpha_a, alpha_b)
    image.pixels[...] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    logger.debug("%s composite on %dx%d", op, image.width, image.height)
    return image


def _one(alpha_a: Array, alpha_b: Array) -> Array:
    return np.ones_like(alpha_a)


def _zero(alpha_a: Array, alpha_b: Array) -> Array:
    return np.zeros_like(alpha_a)


def _alpha_b(alpha_a: Array, alpha_b: Array) -> Array:
    return alpha_b


def _inv_alpha_a(alpha_a: Array, alpha_b: Array) -> Array:
    return 1.0 - alpha_a


def _inv_alpha_b(alpha_a: Array, alpha_b: Array) -> Array:
    return 1.0 - alpha_b


def comp_over(image: Image, other: Image) -> Image:
    """``image`` over ``other``."""
    return _porter_duff("over", image, other, _one, _inv_alpha_a)


def comp_in(image: Image, other: Image) -> Image:
    """The part of ``image`` inside ``other``."""
    return _porter_duff("in", image, other, _alpha_b, _zero)


def comp_out(image: Image, other: Image) -> Image:
    """The part of ``image`` outside ``other``."""
    return _porter_duff("out", image, other, _inv_alpha_b, _zero)


def comp_atop(image: Image, other: Image) -> Image:
    """``image`` inside ``other``, over ``other``."""
    return _porter_duff("atop", image, other, _alpha_b, _inv_alpha_a)


def comp_xor(image: Image, other: Image) -> Image:
    """Whichever of the two is present where the other is not."""
    return _porter_duff("xor", image, other, _inv_alpha_b, _inv_alpha_a)


__all__ = ["difference", "comp_over", "comp_in", "comp_out", "comp_atop", "comp_xor"]
