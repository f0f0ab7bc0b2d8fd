"""Past-performance scoring for the performance balancing strategy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from statistics import fmean
from typing import Dict, Iterable, Mapping, Optional, Sequence

from pyteams.models.player import PerformanceMetrics


logger = logging.getLogger(__name__)

DEFAULT_POWER_RATING = 5.35
DEFAULT_GOAL_THREAT = 0.0


@dataclass(frozen=True)
class ResolvedMetrics:
    player_id: str
    power_rating: float
    goal_threat: float
    imputed: bool = False

    def score(self, power_weight: float, goal_weight: float) -> float:
        return power_weight * self.power_rating + goal_weight * self.goal_threat


def resolve_metrics(
    player_ids: Sequence[str],
    metrics: Optional[Iterable[PerformanceMetrics]] = None,
) -> Dict[str, ResolvedMetrics]:
    """Fill gaps in the supplied metrics with the pool average of known values.

    Players without any history (new players, ringers) are scored as an
    average member of the pool; when nothing at all is known the league prior
    is used instead.
    """

    by_id: Mapping[str, PerformanceMetrics] = {item.player_id: item for item in (metrics or [])}
    known_power = [by_id[pid].power_rating for pid in player_ids if pid in by_id and by_id[pid].power_rating is not None]
    known_goal = [by_id[pid].goal_threat for pid in player_ids if pid in by_id and by_id[pid].goal_threat is not None]
    avg_power = fmean(known_power) if known_power else DEFAULT_POWER_RATING
    avg_goal = fmean(known_goal) if known_goal else DEFAULT_GOAL_THREAT

    resolved: Dict[str, ResolvedMetrics] = {}
    imputed = 0
    for player_id in player_ids:
        item = by_id.get(player_id)
        power = item.power_rating if item is not None and item.power_rating is not None else None
        goal = item.goal_threat if item is not None and item.goal_threat is not None else None
        missing = power is None or goal is None
        if missing:
            imputed += 1
        resolved[player_id] = ResolvedMetrics(
            player_id=player_id,
            power_rating=float(power if power is not None else avg_power),
            goal_threat=float(goal if goal is not None else avg_goal),
            imputed=missing,
        )
    if imputed:
        logger.info("Imputed performance metrics for %s of %s players", imputed, len(player_ids))
    return resolved


def team_average(resolved: Mapping[str, ResolvedMetrics], player_ids: Sequence[str], attribute: str) -> float:
    if not player_ids:
        return 0.0
    return fmean(getattr(resolved[pid], attribute) for pid in player_ids)


def team_score(resolved: Mapping[str, ResolvedMetrics], player_ids: Sequence[str], power_weight: float, goal_weight: float) -> float:
    """Average weighted performance score of a team."""

    if not player_ids:
        return 0.0
    return fmean(resolved[pid].score(power_weight, goal_weight) for pid in player_ids)
