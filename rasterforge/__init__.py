"""rasterforge: in-memory RGBA raster processing.

Re-exports the public API: the Image type, color reduction, halftoning,
convolution filters, resampling, painterly rendering and two-image
operations, plus the Pillow IO helpers.
"""
from __future__ import annotations

from .composite import comp_atop, comp_in, comp_out, comp_over, comp_xor, difference  # noqa: F401
from .config import PainterlyConfig, ProcessingConfig, load_config  # noqa: F401
from .dithers import (  # noqa: F401
    apply_dither,
    dither_bright,
    dither_cluster,
    dither_color,
    dither_fs,
    dither_random,
    dither_threshold,
)
from .errors import (  # noqa: F401
    DimensionMismatchError,
    ImageLoadError,
    InvalidParameterError,
    RasterError,
    UnknownOperationError,
)
from .filters import (  # noqa: F401
    Kernel,
    convolve,
    filter_bartlett,
    filter_box,
    filter_edge,
    filter_enhance,
    filter_gaussian,
    filter_gaussian_n,
)
from .image import Image  # noqa: F401
from .operations import OPERATIONS, run_operation  # noqa: F401
from .paint import Stroke, npr_paint, paint_stroke  # noqa: F401
from .quantize import quantize_populosity, quantize_uniform  # noqa: F401
from .utils.loader import load_image, save_image  # noqa: F401
from .utils.resize import double_size, half_size, resize, rotate  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "Image",
    "quantize_uniform",
    "quantize_populosity",
    "apply_dither",
    "dither_threshold",
    "dither_random",
    "dither_bright",
    "dither_cluster",
    "dither_fs",
    "dither_color",
    "Kernel",
    "convolve",
    "filter_box",
    "filter_bartlett",
    "filter_gaussian",
    "filter_gaussian_n",
    "filter_edge",
    "filter_enhance",
    "half_size",
    "double_size",
    "resize",
    "rotate",
    "Stroke",
    "paint_stroke",
    "npr_paint",
    "difference",
    "comp_over",
    "comp_in",
    "comp_out",
    "comp_atop",
    "comp_xor",
    "OPERATIONS",
    "run_operation",
    "PainterlyConfig",
    "ProcessingConfig",
    "load_config",
    "load_image",
    "save_image",
    "RasterError",
    "ImageLoadError",
    "DimensionMismatchError",
    "InvalidParameterError",
    "UnknownOperationError",
]
