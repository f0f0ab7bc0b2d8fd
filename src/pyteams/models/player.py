"""Canonical player models shared across ingestion, balancing and the API."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


ATTRIBUTES: Tuple[str, ...] = (
    "goalscoring",
    "defending",
    "stamina_pace",
    "control",
    "teamwork",
    "resilience",
)

ATTRIBUTE_MIN = 1
ATTRIBUTE_MAX = 5
ATTRIBUTE_DEFAULT = 3


class PlayerRecord(BaseModel):
    """A rostered (or ringer) player with their six ability ratings."""

    player_id: str = Field(..., min_length=1)
    name: str
    goalscoring: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    defending: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    stamina_pace: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    control: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    teamwork: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    resilience: int = Field(default=ATTRIBUTE_DEFAULT, ge=ATTRIBUTE_MIN, le=ATTRIBUTE_MAX)
    is_ringer: bool = False
    is_retired: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def attribute(self, name: str) -> int:
        if name not in ATTRIBUTES:
            raise KeyError(f"Unknown attribute {name!r}")
        return getattr(self, name)


class PerformanceMetrics(BaseModel):
    """Historical performance figures used by the performance strategy."""

    player_id: str = Field(..., min_length=1)
    power_rating: Optional[float] = None
    goal_threat: Optional[float] = Field(default=None, ge=0.0)

    model_config = ConfigDict(frozen=True)
