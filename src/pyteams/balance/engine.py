"""Split a player pool into two teams and place them into formation slots."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pyteams.config.formations import (
    POSITION_GROUPS,
    Formation,
    FormationOverrides,
    PositionGroup,
    derive_formation,
    is_simplified_size,
    validate_team_size,
)
from pyteams.config.settings import EngineSettings, QualityBand, resolve_settings
from pyteams.config.weights import BalanceWeights
from pyteams.errors import TeamValidationError
from pyteams.models.assignment import Assignment
from pyteams.models.player import PerformanceMetrics, PlayerRecord
from pyteams.scoring.attributes import team_group_vectors, team_vector, weighted_balance_score
from pyteams.scoring.performance import ResolvedMetrics, resolve_metrics, team_score
from pyteams.stats.comparative import ComparativeStats, PerformanceComparison, compare_performance, compare_teams

from .strategies import AbilityStrategy, PerformanceStrategy, RandomStrategy, parse_strategy


logger = logging.getLogger(__name__)

_IMPROVEMENT_EPSILON = 1e-9

TeamGroups = Dict[PositionGroup, List[PlayerRecord]]


@dataclass(frozen=True)
class BalanceResult:
    strategy: str
    balance_score: Optional[float] = None
    quality_band: Optional[QualityBand] = None
    balance_percentage: Optional[float] = None
    stats: Optional[ComparativeStats] = None
    performance: Optional[PerformanceComparison] = None
    swaps: int = 0


@dataclass
class BalanceOutput:
    assignment: Assignment
    result: BalanceResult


def _formation_for(team_size: int, overrides: Optional[FormationOverrides]) -> Formation:
    return derive_formation(team_size, simplified=is_simplified_size(team_size), overrides=overrides)


def _validate_request(
    pool: Sequence[PlayerRecord],
    team_size_a: int,
    team_size_b: int,
    strategy: Union[AbilityStrategy, PerformanceStrategy, RandomStrategy],
) -> None:
    if len(pool) < 2:
        raise TeamValidationError(f"At least 2 players are required to balance teams, got {len(pool)}")

    seen: set[str] = set()
    duplicates: set[str] = set()
    for player in pool:
        if player.player_id in seen:
            duplicates.add(player.player_id)
        seen.add(player.player_id)
    if duplicates:
        raise TeamValidationError(f"Duplicate players in pool: {', '.join(sorted(duplicates))}")

    validate_team_size(team_size_a)
    validate_team_size(team_size_b)

    required = team_size_a + team_size_b
    if len(pool) < required:
        missing = required - len(pool)
        short_side = "A" if len(pool) < team_size_a else "B"
        raise TeamValidationError(
            f"Not enough players: {missing} more needed for {team_size_a}v{team_size_b}; "
            f"team {short_side} cannot be filled"
        )
    if len(pool) > required:
        raise TeamValidationError(
            f"Too many players: {len(pool)} in pool for {required} slots ({team_size_a}v{team_size_b})"
        )

    if isinstance(strategy, AbilityStrategy):
        if team_size_a != team_size_b:
            raise TeamValidationError(
                f"Ability balancing requires equal team sizes, got {team_size_a}v{team_size_b}"
            )
        if is_simplified_size(team_size_a):
            raise TeamValidationError("Ability balancing is not available for simplified 4v4 matches")


def _draft_positions(players: Sequence[PlayerRecord], defenders: int, attackers: int) -> TeamGroups:
    """Best defenders to defence, best finishers of the rest to attack, the others to midfield."""

    by_defending = sorted(players, key=lambda p: (-p.defending, p.player_id))
    defense = by_defending[:defenders]
    rest = sorted(by_defending[defenders:], key=lambda p: (-p.goalscoring, p.player_id))
    attack = rest[:attackers]
    midfield = rest[attackers:]
    return {"defense": defense, "midfield": midfield, "attack": attack}


def _snake_order(index: int) -> str:
    return "A" if index % 4 in (0, 3) else "B"


def _group_strength(player: PlayerRecord, weights: Mapping[str, float]) -> float:
    return sum(player.attribute(attribute) * weight for attribute, weight in weights.items())


def _score_split(groups_a: TeamGroups, groups_b: TeamGroups, weights: BalanceWeights) -> float:
    team_a = [player for group in POSITION_GROUPS for player in groups_a[group]]
    team_b = [player for group in POSITION_GROUPS for player in groups_b[group]]
    return weighted_balance_score(
        team_group_vectors(groups_a),
        team_group_vectors(groups_b),
        team_vector(team_a),
        team_vector(team_b),
        weights,
    )


def _improve_by_swaps(
    groups_a: TeamGroups,
    groups_b: TeamGroups,
    weights: BalanceWeights,
    max_iterations: int,
) -> Tuple[float, int]:
    """Swap same-position players between teams while the score keeps dropping.

    Each iteration applies the single best improving swap; the loop ends when
    no swap helps or ``max_iterations`` swaps have been made.
    """

    current = _score_split(groups_a, groups_b, weights)
    swaps = 0
    while swaps < max_iterations:
        best: Optional[Tuple[float, PositionGroup, int, int]] = None
        for group in POSITION_GROUPS:
            side_a = groups_a[group]
            side_b = groups_b[group]
            for i in range(len(side_a)):
                for j in range(len(side_b)):
                    side_a[i], side_b[j] = side_b[j], side_a[i]
                    candidate = _score_split(groups_a, groups_b, weights)
                    side_a[i], side_b[j] = side_b[j], side_a[i]
                    if candidate < current - _IMPROVEMENT_EPSILON and (best is None or candidate < best[0]):
                        best = (candidate, group, i, j)
        if best is None:
            break
        current, group, i, j = best
        groups_a[group][i], groups_b[group][j] = groups_b[group][j], groups_a[group][i]
        swaps += 1
    return current, swaps


def _slot_order(groups: TeamGroups) -> List[str]:
    return [player.player_id for group in POSITION_GROUPS for player in groups[group]]


def _balance_by_ability(
    pool: Sequence[PlayerRecord],
    formation: Formation,
    weights: BalanceWeights,
    settings: EngineSettings,
) -> Tuple[Assignment, int]:
    drafted = _draft_positions(pool, formation.defenders * 2, formation.attackers * 2)
    groups_a: TeamGroups = {group: [] for group in POSITION_GROUPS}
    groups_b: TeamGroups = {group: [] for group in POSITION_GROUPS}
    for group in POSITION_GROUPS:
        group_weights = weights.for_group(group)
        ranked = sorted(drafted[group], key=lambda p: (-_group_strength(p, group_weights), p.player_id))
        for index, player in enumerate(ranked):
            target = groups_a if _snake_order(index) == "A" else groups_b
            target[group].append(player)

    _, swaps = _improve_by_swaps(groups_a, groups_b, weights, settings.max_swap_iterations)
    assignment = Assignment.from_teams(formation, formation, _slot_order(groups_a), _slot_order(groups_b))
    return assignment, swaps


def _snake_by_capacity(ranked: Sequence[str], size_a: int, size_b: int) -> Tuple[List[str], List[str]]:
    team_a: List[str] = []
    team_b: List[str] = []
    for index, player_id in enumerate(ranked):
        preferred = _snake_order(index)
        if preferred == "A" and len(team_a) >= size_a:
            preferred = "B"
        elif preferred == "B" and len(team_b) >= size_b:
            preferred = "A"
        (team_a if preferred == "A" else team_b).append(player_id)
    return team_a, team_b


def _improve_performance_gap(
    team_a: List[str],
    team_b: List[str],
    resolved: Mapping[str, ResolvedMetrics],
    strategy: PerformanceStrategy,
    max_iterations: int,
) -> int:
    def gap() -> float:
        return abs(
            team_score(resolved, team_a, strategy.power_weight, strategy.goal_weight)
            - team_score(resolved, team_b, strategy.power_weight, strategy.goal_weight)
        )

    current = gap()
    swaps = 0
    while swaps < max_iterations:
        best: Optional[Tuple[float, int, int]] = None
        for i in range(len(team_a)):
            for j in range(len(team_b)):
                team_a[i], team_b[j] = team_b[j], team_a[i]
                candidate = gap()
                team_a[i], team_b[j] = team_b[j], team_a[i]
                if candidate < current - _IMPROVEMENT_EPSILON and (best is None or candidate < best[0]):
                    best = (candidate, i, j)
        if best is None:
            break
        current, i, j = best
        team_a[i], team_b[j] = team_b[j], team_a[i]
        swaps += 1
    return swaps


def _place_in_formation(player_ids: Sequence[str], lookup: Mapping[str, PlayerRecord], formation: Formation) -> List[str]:
    groups = _draft_positions([lookup[pid] for pid in player_ids], formation.defenders, formation.attackers)
    return _slot_order(groups)


def _balance_by_performance(
    pool: Sequence[PlayerRecord],
    formation_a: Formation,
    formation_b: Formation,
    strategy: PerformanceStrategy,
    metrics: Optional[Iterable[PerformanceMetrics]],
    settings: EngineSettings,
) -> Tuple[Assignment, Dict[str, ResolvedMetrics], int]:
    player_ids = [player.player_id for player in pool]
    resolved = resolve_metrics(player_ids, metrics)
    ranked = sorted(
        player_ids,
        key=lambda pid: (-resolved[pid].score(strategy.power_weight, strategy.goal_weight), pid),
    )
    team_a, team_b = _snake_by_capacity(ranked, formation_a.team_size, formation_b.team_size)
    swaps = _improve_performance_gap(team_a, team_b, resolved, strategy, settings.max_swap_iterations)

    lookup = {player.player_id: player for player in pool}
    assignment = Assignment.from_teams(
        formation_a,
        formation_b,
        _place_in_formation(team_a, lookup, formation_a),
        _place_in_formation(team_b, lookup, formation_b),
    )
    return assignment, resolved, swaps


def _balance_randomly(
    pool: Sequence[PlayerRecord],
    formation_a: Formation,
    formation_b: Formation,
    strategy: RandomStrategy,
) -> Assignment:
    player_ids = [player.player_id for player in pool]
    random.Random(strategy.seed).shuffle(player_ids)
    size_a = formation_a.team_size
    return Assignment.from_teams(formation_a, formation_b, player_ids[:size_a], player_ids[size_a:])


def balance_teams(
    pool: Sequence[PlayerRecord],
    team_size_a: int,
    team_size_b: int,
    strategy: Union[str, Mapping, AbilityStrategy, PerformanceStrategy, RandomStrategy, None] = "ability",
    *,
    weights: Optional[BalanceWeights] = None,
    metrics: Optional[Iterable[PerformanceMetrics]] = None,
    settings: Optional[EngineSettings] = None,
    overrides: Optional[FormationOverrides] = None,
) -> BalanceOutput:
    """Balance ``pool`` into two teams of the given sizes.

    Every player in the pool ends up in exactly one slot. Raises
    :class:`TeamValidationError` before doing any work when the request cannot
    be satisfied.
    """

    pool = list(pool)
    parsed = parse_strategy(strategy)
    _validate_request(pool, team_size_a, team_size_b, parsed)
    weights = weights or BalanceWeights()
    settings = resolve_settings(settings)
    formation_a = _formation_for(team_size_a, overrides)
    formation_b = _formation_for(team_size_b, overrides)

    logger.info(
        "Balancing %s players into %sv%s using %s strategy",
        len(pool),
        team_size_a,
        team_size_b,
        parsed.kind,
    )

    if isinstance(parsed, RandomStrategy):
        assignment = _balance_randomly(pool, formation_a, formation_b, parsed)
        result = BalanceResult(strategy=parsed.kind)
        logger.info("Random split complete (seed=%s)", parsed.seed)
        return BalanceOutput(assignment, result)

    if isinstance(parsed, PerformanceStrategy):
        assignment, resolved, swaps = _balance_by_performance(
            pool, formation_a, formation_b, parsed, metrics, settings
        )
        performance = compare_performance(
            assignment.team_player_ids("A"),
            assignment.team_player_ids("B"),
            resolved,
            power_weight=parsed.power_weight,
            goal_weight=parsed.goal_weight,
            settings=settings,
        )
        stats = compare_teams(assignment, pool, weights, settings=settings)
        result = BalanceResult(
            strategy=parsed.kind,
            balance_score=performance.balance_score,
            quality_band=performance.quality_band,
            balance_percentage=performance.balance_percentage,
            stats=stats,
            performance=performance,
            swaps=swaps,
        )
    else:
        assignment, swaps = _balance_by_ability(pool, formation_a, weights, settings)
        stats = compare_teams(assignment, pool, weights, settings=settings)
        result = BalanceResult(
            strategy=parsed.kind,
            balance_score=stats.balance_score,
            quality_band=stats.quality_band,
            balance_percentage=stats.balance_percentage,
            stats=stats,
            swaps=swaps,
        )

    logger.info(
        "Balanced with %s strategy: score %.3f (%s) after %s swaps",
        parsed.kind,
        result.balance_score,
        result.quality_band.value,
        swaps,
    )
    return BalanceOutput(assignment, result)
