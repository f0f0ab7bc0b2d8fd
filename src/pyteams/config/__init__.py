"""Configuration helpers for formations, weights and engine tunables."""

from .formations import (
    POSITION_GROUPS,
    Formation,
    FormationOverrides,
    PositionGroup,
    derive_formation,
    is_simplified_size,
    iter_formations,
    validate_team_size,
)
from .settings import EngineSettings, QualityBand, QualityThresholds, resolve_settings
from .weights import BalanceWeights

__all__ = [
    "POSITION_GROUPS",
    "BalanceWeights",
    "EngineSettings",
    "Formation",
    "FormationOverrides",
    "PositionGroup",
    "QualityBand",
    "QualityThresholds",
    "derive_formation",
    "is_simplified_size",
    "iter_formations",
    "resolve_settings",
    "validate_team_size",
]
