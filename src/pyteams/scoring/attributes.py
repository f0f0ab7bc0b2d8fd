"""Aggregate attribute vectors for position groups and whole teams."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, Literal, Mapping, Sequence

from pyteams.config.formations import POSITION_GROUPS, PositionGroup
from pyteams.config.weights import BalanceWeights
from pyteams.models.player import ATTRIBUTES, PlayerRecord


Normalization = Literal["mean", "sum"]


@dataclass(frozen=True)
class AttributeVector:
    goalscoring: float = 0.0
    defending: float = 0.0
    stamina_pace: float = 0.0
    control: float = 0.0
    teamwork: float = 0.0
    resilience: float = 0.0

    def __sub__(self, other: "AttributeVector") -> "AttributeVector":
        return AttributeVector(**{name: getattr(self, name) - getattr(other, name) for name in ATTRIBUTES})

    def __abs__(self) -> "AttributeVector":
        return AttributeVector(**{name: abs(getattr(self, name)) for name in ATTRIBUTES})

    def get(self, attribute: str) -> float:
        return float(getattr(self, attribute))

    def as_dict(self) -> Dict[str, float]:
        return {item.name: float(getattr(self, item.name)) for item in fields(self)}


ZERO_VECTOR = AttributeVector()

GroupVectors = Dict[PositionGroup, AttributeVector]


def score_group(players: Sequence[PlayerRecord], normalize: Normalization = "mean") -> AttributeVector:
    """Sum or average the six attributes across ``players``.

    An empty group is a valid, if incomplete, state and scores as zero.
    """

    if not players:
        return ZERO_VECTOR
    totals = {name: float(sum(player.attribute(name) for player in players)) for name in ATTRIBUTES}
    if normalize == "sum":
        return AttributeVector(**totals)
    if normalize != "mean":
        raise ValueError(f"Unknown normalization {normalize!r}")
    count = len(players)
    return AttributeVector(**{name: value / count for name, value in totals.items()})


def team_group_vectors(
    players_by_position: Mapping[PositionGroup, Sequence[PlayerRecord]],
    normalize: Normalization = "mean",
) -> GroupVectors:
    return {group: score_group(players_by_position.get(group, ()), normalize) for group in POSITION_GROUPS}


def team_vector(players: Sequence[PlayerRecord]) -> AttributeVector:
    return score_group(players, "mean")


def _weighted_difference(a: AttributeVector, b: AttributeVector, weights: Mapping[str, float]) -> float:
    total_weight = sum(weights.values())
    if total_weight <= 0:
        return 0.0
    difference = sum(abs(a.get(attribute) - b.get(attribute)) * weight for attribute, weight in weights.items())
    return difference / total_weight


def group_differences(groups_a: GroupVectors, groups_b: GroupVectors, weights: BalanceWeights) -> Dict[str, float]:
    """Weight-normalised absolute difference for each position group."""

    return {
        group: _weighted_difference(groups_a[group], groups_b[group], weights.for_group(group))
        for group in POSITION_GROUPS
    }


def weighted_balance_score(
    groups_a: GroupVectors,
    groups_b: GroupVectors,
    team_a: AttributeVector,
    team_b: AttributeVector,
    weights: BalanceWeights,
) -> float:
    """Combine per-group and team-wide differences; lower is more balanced.

    Each term is a weighted mean of attribute differences, so the result is
    expressed in attribute units and can be banded directly.
    """

    terms: Dict[str, float] = group_differences(groups_a, groups_b, weights)
    if weights.team:
        terms["team"] = _weighted_difference(team_a, team_b, weights.team)
    total_weight = 0.0
    total = 0.0
    for name, value in terms.items():
        weight = weights.group_weight(name)
        total += value * weight
        total_weight += weight
    return total / total_weight if total_weight > 0 else 0.0
