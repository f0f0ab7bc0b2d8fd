"""Comparative statistics between two completed teams."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pyteams.config.formations import POSITION_GROUPS, Formation, PositionGroup
from pyteams.config.settings import EngineSettings, QualityBand, resolve_settings
from pyteams.config.weights import BalanceWeights
from pyteams.models.assignment import Assignment
from pyteams.models.player import PerformanceMetrics, PlayerRecord
from pyteams.scoring.attributes import GroupVectors, team_group_vectors, team_vector, weighted_balance_score
from pyteams.scoring.performance import ResolvedMetrics, resolve_metrics, team_average


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparativeStats:
    team_a_groups: GroupVectors
    team_b_groups: GroupVectors
    diffs_by_group: Dict[str, Dict[str, float]]
    team_diffs: Dict[str, float]
    balance_score: float
    balance_percentage: float
    quality_band: QualityBand


@dataclass(frozen=True)
class PerformanceComparison:
    power_rating_a: float
    power_rating_b: float
    goal_threat_a: float
    goal_threat_b: float
    power_rating_diff: float
    goal_threat_diff: float
    balance_score: float
    balance_percentage: float
    quality_band: QualityBand


def balance_percentage(score: float, scale: float) -> float:
    return 100.0 - min(100.0, max(0.0, score * scale))


def _group_by_slot(players: Sequence[PlayerRecord], formation: Formation) -> Dict[PositionGroup, List[PlayerRecord]]:
    grouped: Dict[PositionGroup, List[PlayerRecord]] = {group: [] for group in POSITION_GROUPS}
    for index, player in enumerate(players, start=1):
        grouped[formation.position_for_slot(index)].append(player)
    return grouped


def compare(
    team_a: Sequence[PlayerRecord],
    team_b: Sequence[PlayerRecord],
    formation_a: Formation,
    weights: Optional[BalanceWeights] = None,
    *,
    formation_b: Optional[Formation] = None,
    settings: Optional[EngineSettings] = None,
    scale: Optional[float] = None,
) -> Optional[ComparativeStats]:
    """Compare two teams given in slot order.

    Returns None while either team is short of (or over) its formation; a
    score for an incomplete side would be misleading.
    """

    formation_b = formation_b or formation_a
    if len(team_a) != formation_a.team_size or len(team_b) != formation_b.team_size:
        return None
    weights = weights or BalanceWeights()
    settings = resolve_settings(settings)
    scale = settings.balance_scale if scale is None else scale

    groups_a = team_group_vectors(_group_by_slot(team_a, formation_a))
    groups_b = team_group_vectors(_group_by_slot(team_b, formation_b))
    overall_a = team_vector(team_a)
    overall_b = team_vector(team_b)

    diffs_by_group = {group: (groups_a[group] - groups_b[group]).as_dict() for group in POSITION_GROUPS}
    team_diffs = (overall_a - overall_b).as_dict()
    score = weighted_balance_score(groups_a, groups_b, overall_a, overall_b, weights)
    return ComparativeStats(
        team_a_groups=groups_a,
        team_b_groups=groups_b,
        diffs_by_group=diffs_by_group,
        team_diffs=team_diffs,
        balance_score=score,
        balance_percentage=balance_percentage(score, scale),
        quality_band=settings.thresholds.classify(score),
    )


def _player_lookup(players: Union[Mapping[str, PlayerRecord], Iterable[PlayerRecord]]) -> Mapping[str, PlayerRecord]:
    if isinstance(players, Mapping):
        return players
    return {player.player_id: player for player in players}


def compare_teams(
    assignment: Assignment,
    players: Union[Mapping[str, PlayerRecord], Iterable[PlayerRecord]],
    weights: Optional[BalanceWeights] = None,
    *,
    settings: Optional[EngineSettings] = None,
) -> Optional[ComparativeStats]:
    if not assignment.is_complete():
        logger.debug(
            "Comparison not applicable: team A %s/%s, team B %s/%s",
            assignment.filled_count("A"),
            assignment.formation_a.team_size,
            assignment.filled_count("B"),
            assignment.formation_b.team_size,
        )
        return None
    lookup = _player_lookup(players)
    try:
        team_a = [lookup[pid] for pid in assignment.team_player_ids("A")]
        team_b = [lookup[pid] for pid in assignment.team_player_ids("B")]
    except KeyError as exc:
        raise ValueError(f"Assignment references unknown player {exc.args[0]!r}") from exc
    return compare(
        team_a,
        team_b,
        assignment.formation_a,
        weights,
        formation_b=assignment.formation_b,
        settings=settings,
    )


def compare_performance(
    team_a_ids: Sequence[str],
    team_b_ids: Sequence[str],
    metrics: Union[Mapping[str, ResolvedMetrics], Iterable[PerformanceMetrics], None] = None,
    *,
    power_weight: float = 0.5,
    goal_weight: float = 0.5,
    settings: Optional[EngineSettings] = None,
) -> Optional[PerformanceComparison]:
    if not team_a_ids or not team_b_ids:
        return None
    settings = resolve_settings(settings)
    if isinstance(metrics, Mapping):
        resolved = metrics
    else:
        resolved = resolve_metrics(list(team_a_ids) + list(team_b_ids), metrics)

    power_a = team_average(resolved, team_a_ids, "power_rating")
    power_b = team_average(resolved, team_b_ids, "power_rating")
    goal_a = team_average(resolved, team_a_ids, "goal_threat")
    goal_b = team_average(resolved, team_b_ids, "goal_threat")
    score = abs(power_a - power_b) * power_weight + abs(goal_a - goal_b) * goal_weight
    return PerformanceComparison(
        power_rating_a=power_a,
        power_rating_b=power_b,
        goal_threat_a=goal_a,
        goal_threat_b=goal_b,
        power_rating_diff=power_a - power_b,
        goal_threat_diff=goal_a - goal_b,
        balance_score=score,
        balance_percentage=balance_percentage(score, settings.performance_scale),
        quality_band=settings.thresholds.classify(score),
    )
