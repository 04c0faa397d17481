"""Exception types raised by rasterforge.

Every failure the package raises on purpose derives from ``RasterError`` so
callers (the CLI in particular) can turn it into a failure status. The
concrete classes also derive from the matching builtin so code that already
catches ``ValueError``/``OSError``/``KeyError`` keeps working.
"""
from __future__ import annotations


class RasterError(Exception):
    """Base class for all rasterforge errors."""


class ImageLoadError(RasterError, OSError):
    """An image could not be read from or written to disk."""


class DimensionMismatchError(RasterError, ValueError):
    """Two images taking part in a binary operation differ in size."""

    def __init__(self, op: str, size_a: tuple[int, int], size_b: tuple[int, int]):
        self.op = op
        self.size_a = size_a
        self.size_b = size_b
        super().__init__(
            f"{op}: images are not the same size "
            f"({size_a[0]}x{size_a[1]} vs {size_b[0]}x{size_b[1]})"
        )


class InvalidParameterError(RasterError, ValueError):
    """A parameter would produce undefined or degenerate output."""


class UnknownOperationError(RasterError, KeyError):
    """No operation is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown operation: {self.name}"


__all__ = [
    "RasterError",
    "ImageLoadError",
    "DimensionMismatchError",
    "InvalidParameterError",
    "UnknownOperationError",
]
