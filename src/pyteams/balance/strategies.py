"""Balancing strategy selection."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.config import ConfigDict

from pyteams.errors import TeamValidationError


class AbilityStrategy(BaseModel):
    """Split on the six player attributes, position group by position group."""

    kind: Literal["ability"] = "ability"

    model_config = ConfigDict(frozen=True)


class PerformanceStrategy(BaseModel):
    """Split on historical power rating and goal threat."""

    kind: Literal["performance"] = "performance"
    power_weight: float = Field(default=0.5, ge=0.0)
    goal_weight: float = Field(default=0.5, ge=0.0)

    model_config = ConfigDict(frozen=True)


class RandomStrategy(BaseModel):
    kind: Literal["random"] = "random"
    seed: Optional[int] = None

    model_config = ConfigDict(frozen=True)


Strategy = Annotated[
    Union[AbilityStrategy, PerformanceStrategy, RandomStrategy],
    Field(discriminator="kind"),
]

STRATEGY_KINDS = ("ability", "performance", "random")

_STRATEGY_ADAPTER: TypeAdapter = TypeAdapter(Strategy)


def parse_strategy(value: Union[str, Mapping[str, Any], BaseModel, None]) -> Union[AbilityStrategy, PerformanceStrategy, RandomStrategy]:
    """Accept a strategy model, its ``kind`` as a string, or a plain dict."""

    if isinstance(value, (AbilityStrategy, PerformanceStrategy, RandomStrategy)):
        return value
    if value is None:
        return AbilityStrategy()
    if isinstance(value, str):
        kind = value.strip().lower()
        if kind not in STRATEGY_KINDS:
            raise TeamValidationError(f"Unknown strategy {value!r}; expected one of {', '.join(STRATEGY_KINDS)}")
        value = {"kind": kind}
    try:
        return _STRATEGY_ADAPTER.validate_python(dict(value))
    except (ValidationError, TypeError, ValueError) as exc:
        raise TeamValidationError(f"Invalid strategy {value!r}: {exc}") from exc
