"""Name -> operation registry used by the command line.

``run_operation`` is the boundary between textual commands and the core: it
looks the name up, checks that the parameters the operation needs are
present, creates the random source for stochastic operations when the caller
did not pass one, and returns the resulting image. In-place operations
return the image they were given; resampling returns a new one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from . import composite, filters, quantize
from .config import ProcessingConfig
from .dithers import apply_dither
from .errors import InvalidParameterError, UnknownOperationError
from .image import Image
from .paint import npr_paint
from .utils.resize import double_size, half_size, resize, rotate

logger = logging.getLogger(__name__)


@dataclass
class OperationContext:
    """Parameters available to every operation handler."""

    other: Optional[Image] = None
    size: Optional[int] = None
    scale: Optional[float] = None
    angle: Optional[float] = None
    rng: Optional[np.random.Generator] = None
    config: Optional[ProcessingConfig] = None

    def require(self, op: str, name: str):
        value = getattr(self, name)
        if value is None:
            raise InvalidParameterError(f"{op} requires the '{name}' parameter")
        return value

    def random(self) -> np.random.Generator:
        if self.rng is None:
            seed = self.config.seed if self.config is not None else None
            self.rng = np.random.default_rng(seed)
        return self.rng

    def settings(self) -> ProcessingConfig:
        if self.config is None:
            self.config = ProcessingConfig()
        return self.config


Handler = Callable[[Image, OperationContext], Image]


def _dither(method: str) -> Handler:
    def handler(image: Image, ctx: OperationContext) -> Image:
        if method == "random":
            return apply_dither(
                image,
                method,
                rng=ctx.random(),
                amplitude=ctx.settings().random_dither_amplitude,
            )
        return apply_dither(image, method)

    return handler


def _binary(fn: Callable[[Image, Image], Image], op: str) -> Handler:
    def handler(image: Image, ctx: OperationContext) -> Image:
        return fn(image, ctx.require(op, "other"))

    return handler


def _unary(fn: Callable[[Image], Image]) -> Handler:
    def handler(image: Image, ctx: OperationContext) -> Image:
        return fn(image)

    return handler


def _gaussian_n(image: Image, ctx: OperationContext) -> Image:
    return filters.filter_gaussian_n(image, int(ctx.require("filter-gaussian-n", "size")))


def _resize(image: Image, ctx: OperationContext) -> Image:
    return resize(image, float(ctx.require("resize", "scale")))


def _rotate(image: Image, ctx: OperationContext) -> Image:
    return rotate(image, float(ctx.require("rotate", "angle")))


def _npr_paint(image: Image, ctx: OperationContext) -> Image:
    return npr_paint(image, ctx.random(), ctx.settings().painterly)


OPERATIONS: dict[str, Handler] = {
    "grayscale": _unary(lambda image: image.to_grayscale()),
    "quant-uniform": _unary(quantize.quantize_uniform),
    "quant-populosity": _unary(quantize.quantize_populosity),
    "dither-threshold": _dither("threshold"),
    "dither-random": _dither("random"),
    "dither-fs": _dither("fs"),
    "dither-bright": _dither("bright"),
    "dither-cluster": _dither("cluster"),
    "dither-color": _dither("color"),
    "filter-box": _unary(filters.filter_box),
    "filter-bartlett": _unary(filters.filter_bartlett),
    "filter-gaussian": _unary(filters.filter_gaussian),
    "filter-gaussian-n": _gaussian_n,
    "filter-edge": _unary(filters.filter_edge),
    "filter-enhance": _unary(filters.filter_enhance),
    "half-size": _unary(half_size),
    "double-size": _unary(double_size),
    "resize": _resize,
    "rotate": _rotate,
    "npr-paint": _npr_paint,
    "difference": _binary(composite.difference, "difference"),
    "comp-over": _binary(composite.comp_over, "comp-over"),
    "comp-in": _binary(composite.comp_in, "comp-in"),
    "comp-out": _binary(composite.comp_out, "comp-out"),
    "comp-atop": _binary(composite.comp_atop, "comp-atop"),
    "comp-xor": _binary(composite.comp_xor, "comp-xor"),
}

BINARY_OPERATIONS = frozenset(
    ["difference", "comp-over", "comp-in", "comp-out", "comp-atop", "comp-xor"]
)


def run_operation(
    name: str,
    image: Image,
    *,
    other: Optional[Image] = None,
    size: Optional[int] = None,
    scale: Optional[float] = None,
    angle: Optional[float] = None,
    rng: Optional[np.random.Generator] = None,
    config: Optional[ProcessingConfig] = None,
) -> Image:
    """Run the operation registered as ``name`` on ``image``.

    Raises
    ------
    UnknownOperationError
        No operation has that name.
    InvalidParameterError
        A required parameter is missing or out of range.
    DimensionMismatchError
        A binary operation got images of different sizes.
    """
    try:
        handler = OPERATIONS[name]
    except KeyError:
        raise UnknownOperationError(name) from None
    ctx = OperationContext(other=other, size=size, scale=scale, angle=angle, rng=rng, config=config)
    logger.info("running %s on %dx%d image", name, image.width, image.height)
    return handler(image, ctx)


__all__ = ["OPERATIONS", "BINARY_OPERATIONS", "OperationContext", "run_operation"]
