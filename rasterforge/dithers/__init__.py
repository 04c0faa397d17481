"""Halftoning algorithms and a unified entry-point for application.

Exported API
------------
- apply_dither(image, method="fs", rng=None)

Supported methods
-----------------
- "threshold": grayscale, then a fixed threshold of 128
- "random"   : grayscale, uniform noise of +/-51, then threshold 128
- "bright"   : grayscale, per-channel mean as the threshold
- "cluster"  : grayscale, 4x4 clustered-dot ordered matrix
- "fs"       : grayscale Floyd–Steinberg error diffusion to black/white
- "color"    : Floyd–Steinberg over the 3-3-2 bit uniform palette

Implementation notes
--------------------
All dithers work in place on an :class:`~rasterforge.image.Image` and
return it. Only "random" consumes randomness; when no generator is given a
fresh unseeded one is created here.
"""
from __future__ import annotations

from typing import Literal, Optional

import numpy as np

from ..errors import InvalidParameterError
from ..image import Image
from .cluster import dither_cluster
from .floyd import dither_color, dither_fs
from .threshold import RANDOM_AMPLITUDE, dither_bright, dither_random, dither_threshold

DITHER_METHODS = ("threshold", "random", "bright", "cluster", "fs", "color")


def apply_dither(
    image: Image,
    method: Literal["threshold", "random", "bright", "cluster", "fs", "color"] = "fs",
    rng: Optional[np.random.Generator] = None,
    amplitude: int = RANDOM_AMPLITUDE,
) -> Image:
    """Apply the selected dithering method to an image.

    Parameters
    ----------
    image : Image
        Image to dither in place.
    method : str
        Dithering method to apply.
    rng : np.random.Generator | None
        Random source for "random"; ignored by the other methods.
    amplitude : int
        Noise amplitude for "random".

    Returns
    -------
    Image
        The same image, dithered.
    """
    m = method.lower()
    if m == "threshold":
        return dither_threshold(image)
    if m == "random":
        if rng is None:
            rng = np.random.default_rng()
        return dither_random(image, rng, amplitude=amplitude)
    if m == "bright":
        return dither_bright(image)
    if m == "cluster":
        return dither_cluster(image)
    if m == "fs":
        return dither_fs(image)
    if m == "color":
        return dither_color(image)

    raise InvalidParameterError(f"Unknown dithering method: {method}")


__all__ = [
    "apply_dither",
    "DITHER_METHODS",
    "dither_threshold",
    "dither_random",
    "dither_bright",
    "dither_cluster",
    "dither_fs",
    "dither_color",
]
