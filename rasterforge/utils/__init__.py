"""Utility modules for rasterforge.

Modules:
- loader: Load/save Pillow <-> Image conversion utilities.
- resize: Half size, double size, arbitrary scale and rotation.
"""
from .loader import load_image, save_image
from .resize import double_size, half_size, resize, rotate

__all__ = [
    "load_image",
    "save_image",
    "half_size",
    "double_size",
    "resize",
    "rotate",
]
