import pytest

from pyteams.balance import balance_teams
from pyteams.config import BalanceWeights, EngineSettings, QualityBand, QualityThresholds, derive_formation
from pyteams.models import Assignment, PerformanceMetrics, PlayerRecord
from pyteams.stats import balance_percentage, compare, compare_performance, compare_teams


SETTINGS = EngineSettings()
RATINGS = ("goalscoring", "defending", "stamina_pace", "control", "teamwork", "resilience")


def _uniform(prefix: str, rating: int, count: int = 5) -> list[PlayerRecord]:
    return [
        PlayerRecord(player_id=f"{prefix}{i}", name=f"{prefix.upper()} {i}", **{name: rating for name in RATINGS})
        for i in range(count)
    ]


def test_identical_teams_are_perfectly_balanced():
    formation = derive_formation(5)
    stats = compare(_uniform("a", 3), _uniform("b", 3), formation, settings=SETTINGS)

    assert stats is not None
    assert stats.balance_score == 0.0
    assert stats.balance_percentage == 100.0
    assert stats.quality_band == QualityBand.EXCELLENT
    assert stats.diffs_by_group["midfield"]["control"] == 0.0


def test_mismatched_teams_score_poorly():
    formation = derive_formation(5)
    stats = compare(_uniform("a", 5), _uniform("b", 1), formation, settings=SETTINGS)

    assert stats.balance_score == pytest.approx(4.0)
    assert stats.balance_percentage == 0.0
    assert stats.quality_band == QualityBand.POOR
    assert stats.diffs_by_group["defense"]["defending"] == pytest.approx(4.0)
    assert stats.team_diffs["teamwork"] == pytest.approx(4.0)


def test_compare_returns_none_for_short_team():
    formation = derive_formation(5)
    assert compare(_uniform("a", 3, count=4), _uniform("b", 3), formation, settings=SETTINGS) is None


def test_compare_takes_weights_as_fourth_argument():
    formation = derive_formation(5)
    weights = BalanceWeights(group_weights={"defense": 2.0})
    stats = compare(_uniform("a", 5), _uniform("b", 1), formation, weights, settings=SETTINGS)

    assert stats is not None
    assert stats.balance_score == pytest.approx(4.0)


def test_compare_uneven_formations():
    stats = compare(
        _uniform("a", 3, count=6),
        _uniform("b", 3, count=5),
        derive_formation(6),
        formation_b=derive_formation(5),
        settings=SETTINGS,
    )
    assert stats is not None
    assert stats.balance_score == 0.0


def test_compare_custom_scale():
    formation = derive_formation(5)
    team_a = _uniform("a", 3)
    team_b = _uniform("b", 3)[:4] + [_uniform("c", 4, count=1)[0]]
    stats = compare(team_a, team_b, formation, settings=SETTINGS, scale=10.0)
    assert stats.balance_percentage == pytest.approx(100.0 - stats.balance_score * 10.0)


def test_compare_teams_on_assignment():
    formation = derive_formation(5)
    team_a = _uniform("a", 3)
    team_b = _uniform("b", 3)
    assignment = Assignment.from_teams(
        formation,
        formation,
        [player.player_id for player in team_a],
        [player.player_id for player in team_b],
    )
    stats = compare_teams(assignment, team_a + team_b, settings=SETTINGS)
    assert stats.balance_score == 0.0

    incomplete = assignment.apply({("A", 1): None}, unassigned=["a0"])
    assert compare_teams(incomplete, team_a + team_b, settings=SETTINGS) is None

    with pytest.raises(ValueError):
        compare_teams(assignment, team_a, settings=SETTINGS)


def test_compare_performance_uses_team_averages():
    metrics = [
        PerformanceMetrics(player_id="a1", power_rating=6.0, goal_threat=0.0),
        PerformanceMetrics(player_id="a2", power_rating=6.0, goal_threat=0.0),
        PerformanceMetrics(player_id="b1", power_rating=4.0, goal_threat=0.0),
        PerformanceMetrics(player_id="b2", power_rating=4.0, goal_threat=0.0),
    ]
    comparison = compare_performance(["a1", "a2"], ["b1", "b2"], metrics, settings=SETTINGS)

    assert comparison.power_rating_diff == pytest.approx(2.0)
    assert comparison.balance_score == pytest.approx(1.0)
    assert comparison.balance_percentage == pytest.approx(50.0)
    assert comparison.quality_band == QualityBand.POOR
    assert compare_performance([], ["b1"], metrics, settings=SETTINGS) is None


def test_balance_percentage_is_clamped():
    assert balance_percentage(5.0, 100.0) == 0.0
    assert balance_percentage(-1.0, 100.0) == 100.0
    assert balance_percentage(0.25, 100.0) == pytest.approx(75.0)


@pytest.mark.parametrize(
    ("score", "band"),
    [
        (0.0, QualityBand.EXCELLENT),
        (0.2, QualityBand.EXCELLENT),
        (0.25, QualityBand.GOOD),
        (0.35, QualityBand.NOT_GREAT),
        (0.41, QualityBand.POOR),
    ],
)
def test_quality_bands(score, band):
    assert QualityThresholds().classify(score) == band


def test_thresholds_must_ascend():
    with pytest.raises(ValueError):
        QualityThresholds(excellent=0.5, good=0.3, not_great=0.4)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PYTEAMS_MAX_SWAP_ITERATIONS", "abc")
    monkeypatch.setenv("PYTEAMS_BALANCE_SCALE", "50")
    monkeypatch.setenv("PYTEAMS_QUALITY_EXCELLENT", "0.1")
    settings = EngineSettings.from_env()

    assert settings.max_swap_iterations == 200
    assert settings.balance_scale == 50.0
    assert settings.thresholds.excellent == 0.1
    assert settings.thresholds.good == 0.3


def test_misordered_thresholds_in_env_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PYTEAMS_QUALITY_EXCELLENT", "0.5")
    monkeypatch.delenv("PYTEAMS_QUALITY_GOOD", raising=False)
    monkeypatch.delenv("PYTEAMS_QUALITY_NOT_GREAT", raising=False)

    assert EngineSettings.from_env().thresholds == QualityThresholds()

    output = balance_teams(_uniform("a", 3) + _uniform("b", 3), 5, 5, "ability")
    assert output.result.quality_band == QualityBand.EXCELLENT
