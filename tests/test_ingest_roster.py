from pathlib import Path

import pytest

from pyteams.ingest import RosterRow, exclude_retired, load_roster_csv, rows_to_players


ROSTER = """player_id,name,goalscoring,defending,stamina_pace,control,teamwork,resilience,power_rating,goal_threat,is_ringer,is_retired
p1,Alice,5,2,4,3,3,4,6.1,0.8,,
p2,Bob,,3,3,3,3,3,,,yes,
p3,Carl,1,5,2,2,4,3,,,,true
,Nobody,3,3,3,3,3,3,,,,
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "roster.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_roster_csv(tmp_path: Path):
    players, metrics = load_roster_csv(_write(tmp_path, ROSTER))

    assert [player.player_id for player in players] == ["p1", "p2", "p3"]
    assert players[0].goalscoring == 5
    assert players[1].goalscoring == 3
    assert players[1].is_ringer is True
    assert players[2].is_retired is True
    assert len(metrics) == 1
    assert metrics[0].power_rating == pytest.approx(6.1)
    assert metrics[0].goal_threat == pytest.approx(0.8)


def test_exclude_retired(tmp_path: Path):
    players, _ = load_roster_csv(_write(tmp_path, ROSTER))
    assert [player.player_id for player in exclude_retired(players)] == ["p1", "p2"]


def test_out_of_range_rating_is_rejected(tmp_path: Path):
    text = "player_id,name,goalscoring\np1,Alice,7\n"
    with pytest.raises(ValueError):
        load_roster_csv(_write(tmp_path, text))


def test_duplicate_ids_are_rejected():
    mapping = {"player_id": "id", "name": "Player"}
    rows = [
        RosterRow.from_mapping({"id": "p1", "Player": "Alice"}, mapping),
        RosterRow.from_mapping({"id": "p1", "Player": "Alicia"}, mapping),
    ]
    with pytest.raises(ValueError):
        rows_to_players(rows)


def test_custom_column_mapping(tmp_path: Path):
    text = "id,Player,defending\nx1,Xavier,4\n"
    players, metrics = load_roster_csv(_write(tmp_path, text), mapping={"player_id": "id", "name": "Player"})

    assert players[0].player_id == "x1"
    assert players[0].name == "Xavier"
    assert players[0].defending == 4
    assert metrics == []
