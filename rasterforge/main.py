"""Command-line entry point for rasterforge.

This tool loads an image, runs one named operation on it (grayscale,
quantization, dithering, filtering, resampling, painterly rendering or a
two-image operation), and saves the result.

All processing occurs on rasterforge Image values; Pillow is used only for
loading and saving.

Usage example:
    python -m rasterforge.main dither-fs -i input.tga -o output.tga
    python -m rasterforge.main rotate -i input.png -o output.png --angle 15
    python -m rasterforge.main difference -i a.tga --other b.tga -o diff.tga
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional

import numpy as np
from rich.console import Console
from rich.logging import RichHandler

from .config import ProcessingConfig, load_config
from .errors import InvalidParameterError, RasterError
from .operations import BINARY_OPERATIONS, OPERATIONS, run_operation
from .utils.loader import load_image, save_image

console = Console(stderr=True)

logger = logging.getLogger("rasterforge")


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Route rasterforge logging through a Rich console handler.

    Parameters
    ----------
    verbose : bool
        Enable DEBUG output.
    quiet : bool
        Only show errors. Takes precedence over ``verbose``.
    log_file : str | None
        Optional file that receives the same records in plain text.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(console=console, show_time=True, show_path=False, rich_tracebacks=True)
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )
    logger.setLevel(level)
    return logger


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="rasterforge",
        description=(
            "Quantize, dither, filter, resample and paint raster images. "
            "One operation per invocation."
        ),
    )

    parser.add_argument("operation", choices=sorted(OPERATIONS), help="Operation to run")
    parser.add_argument("-i", "--input", required=True, help="Path to input image file")
    parser.add_argument("-o", "--output", required=True, help="Path to output image file")
    parser.add_argument(
        "--other",
        default=None,
        help="Second input image for difference and comp-* operations",
    )
    parser.add_argument("--size", type=int, default=None, help="Kernel size for filter-gaussian-n (odd)")
    parser.add_argument("--scale", type=float, default=None, help="Scale factor for resize (> 0)")
    parser.add_argument("--angle", type=float, default=None, help="Rotation angle in degrees")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for dither-random and npr-paint (overrides the config file)",
    )
    parser.add_argument("--config", default=None, help="JSON configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--log-file", default=None, help="Also append log records to this file")

    return parser.parse_args(argv)


def validate_args(ns: argparse.Namespace) -> None:
    """Validate argument values and raise InvalidParameterError for invalid inputs.

    Parameters
    ----------
    ns : argparse.Namespace
        Parsed CLI arguments.
    """
    if ns.operation in BINARY_OPERATIONS and ns.other is None:
        raise InvalidParameterError(f"{ns.operation} needs a second image (--other)")
    if ns.operation == "filter-gaussian-n" and ns.size is None:
        raise InvalidParameterError("filter-gaussian-n needs --size")
    if ns.operation == "resize" and ns.scale is None:
        raise InvalidParameterError("resize needs --scale")
    if ns.operation == "rotate" and ns.angle is None:
        raise InvalidParameterError("rotate needs --angle")
    if ns.seed is not None and ns.seed < 0:
        raise InvalidParameterError("--seed must be >= 0")


def run(args: argparse.Namespace) -> None:
    """Load, process and save according to parsed arguments."""
    validate_args(args)
    config = load_config(args.config) if args.config else ProcessingConfig()
    if args.seed is not None:
        config.seed = args.seed

    image = load_image(args.input, flip_rows=config.flip_rows)
    logger.info("loaded %s (%dx%d)", args.input, image.width, image.height)
    other = None
    if args.other is not None:
        other = load_image(args.other, flip_rows=config.flip_rows)

    rng = np.random.default_rng(config.seed)
    result = run_operation(
        args.operation,
        image,
        other=other,
        size=args.size,
        scale=args.scale,
        angle=args.angle,
        rng=rng,
        config=config,
    )

    save_image(result, args.output, flip_rows=config.flip_rows)
    logger.info("saved %s (%dx%d)", args.output, result.width, result.height)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry function for the CLI.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing.

    Returns
    -------
    int
        Exit status code (0 for success, 1 for a failed operation; argparse
        exits with 2 on malformed arguments or an unknown operation).
    """
    args = parse_args(argv)
    try:
        setup_logging(args.verbose, args.quiet, args.log_file)
    except OSError as e:
        console.print(f"Cannot open log file {args.log_file}: {e}", style="bold red", markup=False)
        return 1
    try:
        run(args)
    except RasterError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
