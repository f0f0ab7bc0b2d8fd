import pytest

from pyteams.config import BalanceWeights
from pyteams.models import PerformanceMetrics, PlayerRecord
from pyteams.scoring import (
    DEFAULT_POWER_RATING,
    ZERO_VECTOR,
    AttributeVector,
    group_differences,
    resolve_metrics,
    score_group,
    team_score,
    weighted_balance_score,
)


def _player(player_id: str, **ratings) -> PlayerRecord:
    return PlayerRecord(player_id=player_id, name=player_id.upper(), **ratings)


def test_empty_group_scores_zero():
    assert score_group([]) == ZERO_VECTOR


def test_score_group_mean_and_sum():
    players = [_player("a", goalscoring=2), _player("b", goalscoring=4)]
    assert score_group(players).goalscoring == pytest.approx(3.0)
    assert score_group(players, "sum").goalscoring == pytest.approx(6.0)
    with pytest.raises(ValueError):
        score_group(players, "median")  # type: ignore[arg-type]


def test_vector_arithmetic():
    a = AttributeVector(goalscoring=4.0, defending=1.0)
    b = AttributeVector(goalscoring=1.0, defending=3.0)
    diff = a - b
    assert diff.goalscoring == pytest.approx(3.0)
    assert abs(diff).defending == pytest.approx(2.0)


def test_identical_teams_score_zero():
    groups = {"defense": AttributeVector(defending=3.0), "midfield": ZERO_VECTOR, "attack": ZERO_VECTOR}
    assert weighted_balance_score(groups, dict(groups), ZERO_VECTOR, ZERO_VECTOR, BalanceWeights()) == 0.0


def test_single_group_difference_is_weight_normalised():
    weights = BalanceWeights()
    groups_a = {"defense": AttributeVector(defending=1.0), "midfield": ZERO_VECTOR, "attack": ZERO_VECTOR}
    groups_b = {"defense": ZERO_VECTOR, "midfield": ZERO_VECTOR, "attack": ZERO_VECTOR}

    differences = group_differences(groups_a, groups_b, weights)
    assert differences["defense"] == pytest.approx(0.5)
    assert differences["attack"] == 0.0

    # defense, midfield, attack and team terms weigh equally by default
    score = weighted_balance_score(groups_a, groups_b, ZERO_VECTOR, ZERO_VECTOR, weights)
    assert score == pytest.approx(0.125)


def test_group_weights_shift_the_score():
    weights = BalanceWeights(group_weights={"defense": 3.0})
    groups_a = {"defense": AttributeVector(defending=1.0), "midfield": ZERO_VECTOR, "attack": ZERO_VECTOR}
    groups_b = {"defense": ZERO_VECTOR, "midfield": ZERO_VECTOR, "attack": ZERO_VECTOR}
    score = weighted_balance_score(groups_a, groups_b, ZERO_VECTOR, ZERO_VECTOR, weights)
    assert score == pytest.approx(1.5 / 6.0)


def test_weights_reject_unknown_attribute():
    with pytest.raises(ValueError):
        BalanceWeights(defense={"heading": 1.0})


def test_resolve_metrics_imputes_pool_average():
    metrics = [
        PerformanceMetrics(player_id="a", power_rating=6.0, goal_threat=1.0),
        PerformanceMetrics(player_id="b", power_rating=4.0),
    ]
    resolved = resolve_metrics(["a", "b", "c"], metrics)

    assert resolved["a"].imputed is False
    assert resolved["b"].power_rating == pytest.approx(4.0)
    assert resolved["b"].goal_threat == pytest.approx(1.0)
    assert resolved["b"].imputed is True
    assert resolved["c"].power_rating == pytest.approx(5.0)
    assert team_score(resolved, ["a", "c"], 0.5, 0.5) == pytest.approx((3.5 + 3.0) / 2)


def test_resolve_metrics_without_history_uses_prior():
    resolved = resolve_metrics(["a", "b"])
    assert resolved["a"].power_rating == pytest.approx(DEFAULT_POWER_RATING)
    assert resolved["b"].goal_threat == 0.0
