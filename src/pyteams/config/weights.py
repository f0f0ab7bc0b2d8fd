"""Attribute weighting used when scoring team splits."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from pyteams.config.formations import POSITION_GROUPS, PositionGroup
from pyteams.models.player import ATTRIBUTES


def _default_defense() -> Dict[str, float]:
    return {"defending": 0.5, "stamina_pace": 0.3, "control": 0.2}


def _default_midfield() -> Dict[str, float]:
    return {"control": 0.4, "stamina_pace": 0.3, "goalscoring": 0.3}


def _default_attack() -> Dict[str, float]:
    return {"goalscoring": 0.5, "stamina_pace": 0.3, "control": 0.2}


def _default_team() -> Dict[str, float]:
    return {"resilience": 1.0, "teamwork": 1.0}


def _default_groups() -> Dict[str, float]:
    return {group: 1.0 for group in POSITION_GROUPS}


class BalanceWeights(BaseModel):
    """Per-position attribute weights plus whole-team attributes.

    Attributes missing from a position table do not contribute to that
    group's difference. ``group_weights`` scales each position group (and
    ``team``) in the combined score.
    """

    defense: Dict[str, float] = Field(default_factory=_default_defense)
    midfield: Dict[str, float] = Field(default_factory=_default_midfield)
    attack: Dict[str, float] = Field(default_factory=_default_attack)
    team: Dict[str, float] = Field(default_factory=_default_team)
    group_weights: Dict[str, float] = Field(default_factory=_default_groups)

    @field_validator("defense", "midfield", "attack", "team")
    @classmethod
    def _check_attributes(cls, value: Dict[str, float]) -> Dict[str, float]:
        for attribute, weight in value.items():
            if attribute not in ATTRIBUTES:
                raise ValueError(f"Unknown attribute {attribute!r}")
            if weight < 0:
                raise ValueError(f"Weight for {attribute!r} must be non-negative")
        return value

    @field_validator("group_weights")
    @classmethod
    def _check_groups(cls, value: Dict[str, float]) -> Dict[str, float]:
        for group, weight in value.items():
            if group not in POSITION_GROUPS and group != "team":
                raise ValueError(f"Unknown position group {group!r}")
            if weight < 0:
                raise ValueError(f"Weight for {group!r} must be non-negative")
        return value

    def for_group(self, group: PositionGroup) -> Dict[str, float]:
        return getattr(self, group)

    def group_weight(self, group: str) -> float:
        return float(self.group_weights.get(group, 1.0))
