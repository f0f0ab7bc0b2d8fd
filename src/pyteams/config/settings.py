"""Engine tunables read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)

_MAX_SWAP_ITERATIONS_ENV = "PYTEAMS_MAX_SWAP_ITERATIONS"
_BALANCE_SCALE_ENV = "PYTEAMS_BALANCE_SCALE"
_PERFORMANCE_SCALE_ENV = "PYTEAMS_PERFORMANCE_SCALE"
_QUALITY_EXCELLENT_ENV = "PYTEAMS_QUALITY_EXCELLENT"
_QUALITY_GOOD_ENV = "PYTEAMS_QUALITY_GOOD"
_QUALITY_NOT_GREAT_ENV = "PYTEAMS_QUALITY_NOT_GREAT"

_MAX_SWAP_ITERATIONS_DEFAULT = 200
_BALANCE_SCALE_DEFAULT = 100.0
_PERFORMANCE_SCALE_DEFAULT = 50.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


class QualityBand(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    NOT_GREAT = "NOT_GREAT"
    POOR = "POOR"


@dataclass(frozen=True)
class QualityThresholds:
    excellent: float = 0.2
    good: float = 0.3
    not_great: float = 0.4

    def __post_init__(self) -> None:
        if not (0.0 <= self.excellent <= self.good <= self.not_great):
            raise ValueError(f"Quality thresholds must be ascending, got {self}")

    @classmethod
    def from_env(cls) -> "QualityThresholds":
        defaults = cls()
        excellent = _env_float(_QUALITY_EXCELLENT_ENV, defaults.excellent, clamp_min=0.0)
        good = _env_float(_QUALITY_GOOD_ENV, defaults.good, clamp_min=0.0)
        not_great = _env_float(_QUALITY_NOT_GREAT_ENV, defaults.not_great, clamp_min=0.0)
        if not (excellent <= good <= not_great):
            logger.warning(
                "Quality thresholds %.2f/%.2f/%.2f are not ascending; using defaults %.2f/%.2f/%.2f",
                excellent,
                good,
                not_great,
                defaults.excellent,
                defaults.good,
                defaults.not_great,
            )
            return defaults
        return cls(excellent=excellent, good=good, not_great=not_great)

    def classify(self, score: float) -> QualityBand:
        """Band a normalised balance score (lower is better)."""

        if score <= self.excellent:
            return QualityBand.EXCELLENT
        if score <= self.good:
            return QualityBand.GOOD
        if score <= self.not_great:
            return QualityBand.NOT_GREAT
        return QualityBand.POOR


@dataclass(frozen=True)
class EngineSettings:
    max_swap_iterations: int = _MAX_SWAP_ITERATIONS_DEFAULT
    balance_scale: float = _BALANCE_SCALE_DEFAULT
    performance_scale: float = _PERFORMANCE_SCALE_DEFAULT
    thresholds: QualityThresholds = field(default_factory=QualityThresholds)

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            max_swap_iterations=_env_int(_MAX_SWAP_ITERATIONS_ENV, _MAX_SWAP_ITERATIONS_DEFAULT, min_value=0),
            balance_scale=_env_float(_BALANCE_SCALE_ENV, _BALANCE_SCALE_DEFAULT, clamp_min=0.0),
            performance_scale=_env_float(_PERFORMANCE_SCALE_ENV, _PERFORMANCE_SCALE_DEFAULT, clamp_min=0.0),
            thresholds=QualityThresholds.from_env(),
        )


def resolve_settings(settings: Optional[EngineSettings] = None) -> EngineSettings:
    return settings if settings is not None else EngineSettings.from_env()
