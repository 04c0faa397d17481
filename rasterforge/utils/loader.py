"""Image loading and saving utilities using Pillow.

All processing in this project occurs on :class:`~rasterforge.image.Image`
values. These helpers only convert between files on disk and RGBA pixel
buffers.

By default rows are reversed on the way in and on the way out, so row 0 of
the in-memory buffer is the bottom scanline (the Targa convention). Load and
save always agree, so a round trip never flips the picture.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..errors import ImageLoadError
from ..image import Image

logger = logging.getLogger(__name__)

# Pillow formats that cannot store an alpha channel.
_OPAQUE_FORMATS = {"JPEG", "BMP", "PPM"}


def load_image(path: Union[str, Path], flip_rows: bool = True) -> Image:
    """Load an image file into an RGBA :class:`Image`.

    Parameters
    ----------
    path : str | Path
        Path to an image supported by Pillow.
    flip_rows : bool
        Reverse the row order so row 0 is the bottom scanline.

    Returns
    -------
    Image
        The decoded image.
    """
    p = Path(path)
    try:
        with PILImage.open(p) as im:
            im = im.convert("RGBA")
            arr = np.array(im, dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as e:
        raise ImageLoadError(f"cannot load image {p}: {e}") from e
    if flip_rows:
        arr = arr[::-1]
    image = Image.from_array(np.ascontiguousarray(arr))
    logger.debug("loaded %s (%dx%d)", p, image.width, image.height)
    return image


def save_image(image: Image, path: Union[str, Path], flip_rows: bool = True) -> None:
    """Save an :class:`Image` to a file via Pillow.

    Parameters
    ----------
    image : Image
        Image to write.
    path : str | Path
        Output file path. The format is inferred from the extension; ``.tga``
        writes 32-bit truecolor Targa. Formats without alpha receive the
        image composited onto black.
    flip_rows : bool
        Reverse the row order back, matching :func:`load_image`.
    """
    if not isinstance(image, Image):
        raise TypeError("image must be a rasterforge Image")

    p = Path(path)
    ext = p.suffix.lower()
    fmt = PILImage.registered_extensions().get(ext)
    if fmt is None:
        raise ImageLoadError(f"cannot save image {p}: unknown file extension {ext!r}")

    if fmt in _OPAQUE_FORMATS:
        arr = image.to_rgb()
    else:
        arr = image.pixels
    if flip_rows:
        arr = arr[::-1]
    im = PILImage.fromarray(np.ascontiguousarray(arr))
    try:
        im.save(p, format=fmt)
    except (OSError, ValueError) as e:
        raise ImageLoadError(f"cannot save image {p}: {e}") from e
    logger.debug("saved %s (%dx%d, %s)", p, image.width, image.height, fmt)


__all__ = ["load_image", "save_image"]
