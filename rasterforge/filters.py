"""2D kernel convolution: low-pass blurs, edge detection and sharpening.

One routine, :func:`convolve`, runs every filter. The filters differ only in
the :class:`Kernel` they build.

Border policy: taps that fall outside the image are skipped and the
remaining weights are not renormalized. Border pixels therefore see a
smaller kernel support and come out darker than an edge-clamped filter
would produce.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from math import comb

import numpy as np

from .errors import InvalidParameterError
from .image import Image

logger = logging.getLogger(__name__)

Array = np.ndarray


@dataclass(frozen=True, eq=False)
class Kernel:
    """An odd-sized square convolution kernel.

    Attributes
    ----------
    weights : np.ndarray
        ``(N, N)`` float64 weights, used exactly as stored.
    bias : float
        Added to every normalized result before clamping to [0, 1].
    """

    weights: Array
    bias: float = 0.0

    def __post_init__(self) -> None:
        try:
            w = np.asarray(self.weights, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidParameterError(f"kernel weights must be numeric: {e}") from e
        object.__setattr__(self, "weights", w)
        if not np.isfinite(w).all():
            raise InvalidParameterError("kernel weights must be finite")
        if w.ndim != 2 or w.shape[0] != w.shape[1] or w.shape[0] % 2 == 0:
            raise InvalidParameterError(
                f"kernel must be square with odd size, got shape {w.shape}"
            )

    @property
    def size(self) -> int:
        return self.weights.shape[0]

    @property
    def center(self) -> int:
        return self.size // 2

    @classmethod
    def low_pass(cls, weights) -> "Kernel":
        """Build a kernel from raw weights normalized to sum to 1."""
        w = np.asarray(weights, dtype=np.float64)
        total = w.sum()
        if not np.isfinite(total):
            raise InvalidParameterError("low-pass kernel weights must be finite")
        if total == 0:
            raise InvalidParameterError("low-pass kernel weights sum to zero")
        return cls(w / total)

    @classmethod
    def high_pass(cls, weights, boost: float, bias: float = 0.0) -> "Kernel":
        """Negate the normalized low-pass ``weights`` and add ``boost`` at the center.

        ``boost=1`` gives a pure high-pass (sum 0), ``boost=2`` the original
        plus its high-pass detail.
        """
        w = -cls.low_pass(weights).weights
        c = w.shape[0] // 2
        w[c, c] += boost
        return cls(w, bias=bias)


def _outer(row) -> Array:
    r = np.asarray(row, dtype=np.float64)
    return np.outer(r, r)


_GAUSSIAN_5 = np.array(
    [
        [1, 4, 7, 4, 1],
        [4, 16, 26, 16, 4],
        [7, 26, 41, 26, 7],
        [4, 16, 26, 16, 4],
        [1, 4, 7, 4, 1],
    ],
    dtype=np.float64,
)


def box_kernel() -> Kernel:
    return Kernel.low_pass(np.ones((5, 5)))


def bartlett_kernel() -> Kernel:
    return Kernel.low_pass(_outer([1, 2, 3, 2, 1]))


def gaussian_kernel() -> Kernel:
    return Kernel.low_pass(_GAUSSIAN_5)


def pascal_row(n: int) -> list[int]:
    """Row ``n`` of Pascal's triangle (row 0 is ``[1]``)."""
    return [comb(n, k) for k in range(n + 1)]


def binomial_kernel(n: int) -> Kernel:
    """N x N Gaussian approximation from Pascal's triangle row ``n - 1``."""
    if n < 1 or n % 2 == 0:
        raise InvalidParameterError(f"Gaussian kernel size must be an odd integer >= 1, got {n}")
    # exact integer division keeps wide rows inside float64 range
    scale = 2 ** (n - 1)
    row = [c / scale for c in pascal_row(n - 1)]
    return Kernel.low_pass(_outer(row))


def edge_kernel() -> Kernel:
    return Kernel.high_pass(_GAUSSIAN_5, boost=1.0, bias=0.5)


def enhance_kernel() -> Kernel:
    return Kernel.high_pass(_GAUSSIAN_5, boost=2.0)


def convolve_channels(values: Array, kernel: Kernel) -> Array:
    """Convolve a float ``(H, W, C)`` array with ``kernel``.

    Out-of-bounds taps contribute nothing, which is the same as padding the
    input with zeros.
    """
    h, w = values.shape[:2]
    c = kernel.center
    padded = np.pad(values, ((c, c), (c, c), (0, 0)), mode="constant")
    out = np.zeros_like(values, dtype=np.float64)
    for i in range(kernel.size):
        for j in range(kernel.size):
            wt = kernel.weights[i, j]
            if wt == 0.0:
                continue
            out += wt * padded[i:i + h, j:j + w, :]
    return out


def convolve(image: Image, kernel: Kernel) -> Image:
    """Filter the RGB channels of ``image`` in place; alpha is unchanged."""
    logger.debug(
        "convolving %dx%d image with %dx%d kernel",
        image.width, image.height, kernel.size, kernel.size,
    )
    result = convolve_channels(image.rgb_float(), kernel)
    if kernel.bias:
        result += kernel.bias
    image.write_rgb_float(np.clip(result, 0.0, 1.0))
    return image


def filter_box(image: Image) -> Image:
    """5x5 box blur."""
    return convolve(image, box_kernel())


def filter_bartlett(image: Image) -> Image:
    """5x5 Bartlett (tent) blur."""
    return convolve(image, bartlett_kernel())


def filter_gaussian(image: Image) -> Image:
    """Fixed 5x5 Gaussian blur."""
    return convolve(image, gaussian_kernel())


def filter_gaussian_n(image: Image, n: int) -> Image:
    """N x N binomial Gaussian blur; ``n`` must be odd and >= 1."""
    return convolve(image, binomial_kernel(n))


def filter_edge(image: Image) -> Image:
    """5x5 high-pass edge detection, biased by +0.5 so flat areas turn mid-gray."""
    return convolve(image, edge_kernel())


def filter_enhance(image: Image) -> Image:
    """5x5 edge enhancement (original plus high-pass detail)."""
    return convolve(image, enhance_kernel())


__all__ = [
    "Kernel",
    "convolve",
    "convolve_channels",
    "box_kernel",
    "bartlett_kernel",
    "gaussian_kernel",
    "binomial_kernel",
    "edge_kernel",
    "enhance_kernel",
    "pascal_row",
    "filter_box",
    "filter_bartlett",
    "filter_gaussian",
    "filter_gaussian_n",
    "filter_edge",
    "filter_enhance",
]
