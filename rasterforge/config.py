"""Processing configuration for rasterforge.

Settings are plain dataclasses with the built-in defaults; a JSON file can
override any of them:

    {
        "seed": 1234,
        "random_dither_amplitude": 51,
        "flip_rows": true,
        "painterly": {
            "brush_radii": [100, 40, 10, 4, 2],
            "radius_jitter": [0.7, 1.2],
            "position_jitter": 10
        }
    }
"""
from __future__ import annotations

import json
import logging
import numbers
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)


@dataclass
class PainterlyConfig:
    """Brush schedule and jitter for the painterly renderer."""

    brush_radii: tuple[int, ...] = (100, 40, 10, 4, 2)
    radius_jitter: tuple[float, float] = (0.7, 1.2)
    position_jitter: int = 10

    def validate(self) -> None:
        if not self.brush_radii or any(
            not isinstance(r, numbers.Integral) or isinstance(r, bool) or r < 1
            for r in self.brush_radii
        ):
            raise InvalidParameterError("painterly.brush_radii must be a non-empty list of integers >= 1")
        if not isinstance(self.radius_jitter, (tuple, list)) or len(self.radius_jitter) != 2:
            raise InvalidParameterError("painterly.radius_jitter must be a (low, high) pair")
        lo, hi = self.radius_jitter
        if not (0 < lo <= hi):
            raise InvalidParameterError("painterly.radius_jitter must satisfy 0 < low <= high")
        if not isinstance(self.position_jitter, numbers.Integral) or self.position_jitter < 0:
            raise InvalidParameterError("painterly.position_jitter must be >= 0")


@dataclass
class ProcessingConfig:
    """Top-level settings shared by the command surface."""

    seed: Optional[int] = None
    random_dither_amplitude: int = 51
    flip_rows: bool = True
    painterly: PainterlyConfig = field(default_factory=PainterlyConfig)

    def validate(self) -> None:
        if self.seed is not None and self.seed < 0:
            raise InvalidParameterError("seed must be a non-negative integer")
        if self.random_dither_amplitude < 0:
            raise InvalidParameterError("random_dither_amplitude must be >= 0")
        self.painterly.validate()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["painterly"]["brush_radii"] = list(self.painterly.brush_radii)
        data["painterly"]["radius_jitter"] = list(self.painterly.radius_jitter)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProcessingConfig":
        """Build a validated config from a parsed JSON object."""
        if not isinstance(data, dict):
            raise InvalidParameterError("configuration must be a JSON object")
        known = {"seed", "random_dither_amplitude", "flip_rows", "painterly"}
        unknown = set(data) - known
        if unknown:
            raise InvalidParameterError(f"unknown configuration keys: {sorted(unknown)}")

        config = cls()
        if "seed" in data:
            config.seed = _expect(data, "seed", int, allow_none=True)
        if "random_dither_amplitude" in data:
            config.random_dither_amplitude = _expect(data, "random_dither_amplitude", int)
        if "flip_rows" in data:
            config.flip_rows = _expect(data, "flip_rows", bool)
        if "painterly" in data:
            config.painterly = _painterly_from_dict(data["painterly"])
        config.validate()
        return config


def _expect(data: dict[str, Any], key: str, kind: type, allow_none: bool = False):
    value = data[key]
    if value is None and allow_none:
        return None
    # bool is a subclass of int; keep them apart
    if kind is int and isinstance(value, bool):
        raise InvalidParameterError(f"{key} must be an integer")
    if not isinstance(value, kind):
        raise InvalidParameterError(f"{key} must be of type {kind.__name__}")
    return value


def _painterly_from_dict(data: Any) -> PainterlyConfig:
    if not isinstance(data, dict):
        raise InvalidParameterError("painterly must be a JSON object")
    unknown = set(data) - {"brush_radii", "radius_jitter", "position_jitter"}
    if unknown:
        raise InvalidParameterError(f"unknown painterly keys: {sorted(unknown)}")

    cfg = PainterlyConfig()
    if "brush_radii" in data:
        radii = data["brush_radii"]
        if not isinstance(radii, list):
            raise InvalidParameterError("painterly.brush_radii must be a list")
        cfg.brush_radii = tuple(radii)
    if "radius_jitter" in data:
        jitter = data["radius_jitter"]
        if (
            not isinstance(jitter, list)
            or len(jitter) != 2
            or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in jitter)
        ):
            raise InvalidParameterError("painterly.radius_jitter must be a [low, high] pair")
        cfg.radius_jitter = (float(jitter[0]), float(jitter[1]))
    if "position_jitter" in data:
        cfg.position_jitter = _expect(data, "position_jitter", int)
    return cfg


def load_config(path: Union[str, Path]) -> ProcessingConfig:
    """Load and validate a JSON configuration file."""
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InvalidParameterError(f"cannot read configuration {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidParameterError(f"invalid JSON in configuration {p}: {e}") from e
    config = ProcessingConfig.from_dict(data)
    logger.debug("loaded configuration from %s", p)
    return config


__all__ = ["PainterlyConfig", "ProcessingConfig", "load_config"]
