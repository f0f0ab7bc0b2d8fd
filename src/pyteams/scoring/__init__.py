"""Attribute aggregation and split scoring."""

from .attributes import (
    ZERO_VECTOR,
    AttributeVector,
    GroupVectors,
    group_differences,
    score_group,
    team_group_vectors,
    team_vector,
    weighted_balance_score,
)
from .performance import DEFAULT_POWER_RATING, ResolvedMetrics, resolve_metrics, team_average, team_score

__all__ = [
    "ZERO_VECTOR",
    "AttributeVector",
    "GroupVectors",
    "group_differences",
    "score_group",
    "team_group_vectors",
    "team_vector",
    "weighted_balance_score",
    "DEFAULT_POWER_RATING",
    "ResolvedMetrics",
    "resolve_metrics",
    "team_average",
    "team_score",
]
