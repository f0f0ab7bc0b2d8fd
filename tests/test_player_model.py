import pytest
from pydantic import ValidationError

from pyteams.models import PerformanceMetrics, PlayerRecord


def test_player_record_is_frozen():
    record = PlayerRecord(player_id="p1", name="Test Player", goalscoring=5, defending=2)

    assert record.player_id == "p1"
    assert record.attribute("goalscoring") == 5
    assert record.control == 3

    with pytest.raises((TypeError, ValidationError)):
        record.player_id = "p2"  # type: ignore[attr-defined]


@pytest.mark.parametrize("rating", [0, 6])
def test_ratings_outside_range_are_rejected(rating):
    with pytest.raises(ValidationError):
        PlayerRecord(player_id="p1", name="Test Player", defending=rating)


def test_empty_player_id_is_rejected():
    with pytest.raises(ValidationError):
        PlayerRecord(player_id="", name="Nobody")


def test_unknown_attribute_lookup():
    record = PlayerRecord(player_id="p1", name="Test Player")
    with pytest.raises(KeyError):
        record.attribute("heading")


def test_performance_metrics_optional_fields():
    metrics = PerformanceMetrics(player_id="p1", power_rating=6.2)
    assert metrics.goal_threat is None
    with pytest.raises(ValidationError):
        PerformanceMetrics(player_id="p1", goal_threat=-0.5)
