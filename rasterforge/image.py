"""The owned RGBA raster that every rasterforge operation works on.

Pixels live in a NumPy ``uint8`` array of shape ``(height, width, 4)`` with
channels in R, G, B, A order. Row 0 is the first row of the array; the IO
layer decides whether that is the top or the bottom scanline.

Operations that keep the dimensions mutate the array in place. Operations
that change the dimensions build a new ``Image`` and leave the old one alone.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .errors import InvalidParameterError

Array = np.ndarray

RED, GREEN, BLUE, ALPHA = 0, 1, 2, 3


class Image:
    """A width x height RGBA image owning its pixel buffer.

    Parameters
    ----------
    width, height : int
        Image dimensions (>= 1).
    pixels : np.ndarray | None
        Optional ``(height, width, 4)`` uint8 array. It is copied, so the
        caller's array is never aliased. When omitted the buffer is
        zero-filled, which reads back as black through :meth:`to_rgb`.
    """

    __slots__ = ("width", "height", "pixels")

    def __init__(self, width: int, height: int, pixels: Optional[Array] = None):
        if width < 1 or height < 1:
            raise InvalidParameterError(
                f"image dimensions must be >= 1, got {width}x{height}"
            )
        if pixels is None:
            pixels = np.zeros((height, width, 4), dtype=np.uint8)
        else:
            if not isinstance(pixels, np.ndarray):
                raise InvalidParameterError("pixels must be a NumPy array")
            if pixels.shape != (height, width, 4):
                raise InvalidParameterError(
                    f"pixels must have shape {(height, width, 4)}, got {pixels.shape}"
                )
            if pixels.dtype != np.uint8:
                raise InvalidParameterError("pixels must have dtype=uint8")
            pixels = np.array(pixels, dtype=np.uint8, copy=True)
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels

    # -- construction -------------------------------------------------------

    @classmethod
    def from_array(cls, arr: Array) -> "Image":
        """Build an image from an ``(H, W, 4)`` RGBA or ``(H, W, 3)`` RGB array.

        RGB input receives an opaque alpha channel.
        """
        if not isinstance(arr, np.ndarray) or arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InvalidParameterError("arr must have shape (H, W, 3) or (H, W, 4)")
        if arr.dtype != np.uint8:
            raise InvalidParameterError("arr must have dtype=uint8")
        h, w, c = arr.shape
        if c == 3:
            rgba = np.empty((h, w, 4), dtype=np.uint8)
            rgba[..., :3] = arr
            rgba[..., 3] = 255
            arr = rgba
        return cls(w, h, arr)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Image":
        """Build an image from a contiguous RGBA byte buffer."""
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidParameterError(
                f"buffer holds {len(data)} bytes, expected {expected} for {width}x{height} RGBA"
            )
        arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(width, height, arr)

    def to_bytes(self) -> bytes:
        """Return the pixels as a contiguous RGBA byte string."""
        return np.ascontiguousarray(self.pixels).tobytes()

    def copy(self) -> "Image":
        return Image(self.width, self.height, self.pixels)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height})"

    # -- bounds-checked access ----------------------------------------------

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"pixel ({x}, {y}) outside {self.width}x{self.height} image"
            )

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the ``(r, g, b, a)`` tuple at column ``x``, row ``y``."""
        self._check(x, y)
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, rgba) -> None:
        self._check(x, y)
        if len(rgba) != 4:
            raise InvalidParameterError("rgba must have four components")
        self.pixels[y, x] = np.clip(np.asarray(rgba, dtype=np.int64), 0, 255)

    def channel(self, x: int, y: int, c: int) -> int:
        self._check(x, y)
        if not 0 <= c < 4:
            raise IndexError(f"channel {c} outside 0..3")
        return int(self.pixels[y, x, c])

    # -- normalized float staging -------------------------------------------

    def rgb_float(self) -> Array:
        """Return the RGB channels as a float64 ``(H, W, 3)`` array in [0, 1].

        Alpha is dropped. The array is a fresh copy owned by the caller.
        """
        return self.pixels[..., :3].astype(np.float64) / 255.0

    def write_rgb_float(self, values: Array) -> None:
        """Quantize ``values`` (``(H, W, 3)`` in [0, 1]) back into R, G, B.

        Alpha is carried through unchanged.
        """
        if values.shape != (self.height, self.width, 3):
            raise InvalidParameterError(
                f"values must have shape {(self.height, self.width, 3)}, got {values.shape}"
            )
        self.pixels[..., :3] = np.clip(np.rint(values * 255.0), 0, 255).astype(np.uint8)

    # -- bulk transforms ----------------------------------------------------

    def to_rgb(self) -> Array:
        """Composite onto black and return a new ``(H, W, 3)`` uint8 array.

        Pixels with alpha 0 become (0, 0, 0); the others have alpha divided
        out as ``floor(c * 255 / a)`` clamped to 255. The image is not
        modified.
        """
        rgb = self.pixels[..., :3].astype(np.int64)
        alpha = self.pixels[..., 3:4].astype(np.int64)
        safe = np.where(alpha == 0, 1, alpha)
        out = np.minimum((rgb * 255) // safe, 255)
        out = np.where(alpha == 0, 0, out)
        return out.astype(np.uint8)

    def to_grayscale(self) -> "Image":
        """Replace R, G and B by ``0.30 R + 0.59 G + 0.11 B`` (truncated).

        Alpha is untouched. Integer weights keep the result exact, so
        applying it twice equals applying it once.
        """
        rgb = self.pixels[..., :3].astype(np.int64)
        lum = (30 * rgb[..., RED] + 59 * rgb[..., GREEN] + 11 * rgb[..., BLUE]) // 100
        self.pixels[..., :3] = lum[..., None].astype(np.uint8)
        return self

    def clear_to_black(self) -> "Image":
        """Zero every byte, alpha included."""
        self.pixels.fill(0)
        return self


__all__ = ["Image", "RED", "GREEN", "BLUE", "ALPHA"]
