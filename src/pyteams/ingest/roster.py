"""Helpers to load roster CSVs and emit canonical player records."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from pyteams.models.player import ATTRIBUTE_DEFAULT, ATTRIBUTE_MAX, ATTRIBUTE_MIN, ATTRIBUTES, PerformanceMetrics, PlayerRecord


logger = logging.getLogger(__name__)

DEFAULT_ROSTER_MAPPING = {
    "player_id": "player_id",
    "name": "name",
    "goalscoring": "goalscoring",
    "defending": "defending",
    "stamina_pace": "stamina_pace",
    "control": "control",
    "teamwork": "teamwork",
    "resilience": "resilience",
    "power_rating": "power_rating",
    "goal_threat": "goal_threat",
    "is_ringer": "is_ringer",
    "is_retired": "is_retired",
}


class RosterRow(BaseModel):
    raw_id: str
    raw_name: str
    raw_attributes: dict[str, Optional[str]]
    raw_power_rating: Optional[str] = None
    raw_goal_threat: Optional[str] = None
    raw_is_ringer: Optional[str] = None
    raw_is_retired: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "RosterRow":
        def extract(key: str, *, default: Optional[str] = None) -> Optional[str]:
            column = mapping.get(key, DEFAULT_ROSTER_MAPPING.get(key))
            if column is None:
                return default
            value = row.get(column)
            return value.strip() if value is not None else default

        return cls(
            raw_id=extract("player_id", default="") or "",
            raw_name=extract("name", default="") or "",
            raw_attributes={attribute: extract(attribute) for attribute in ATTRIBUTES},
            raw_power_rating=extract("power_rating"),
            raw_goal_threat=extract("goal_threat"),
            raw_is_ringer=extract("is_ringer"),
            raw_is_retired=extract("is_retired"),
        )


def _parse_rating(raw: Optional[str], *, attribute: str) -> int:
    if raw is None or not raw.strip():
        return ATTRIBUTE_DEFAULT
    try:
        value = int(float(raw))
    except ValueError:
        raise ValueError(f"{attribute} '{raw}' is not numeric") from None
    if value < ATTRIBUTE_MIN or value > ATTRIBUTE_MAX:
        raise ValueError(f"{attribute} {value} is outside {ATTRIBUTE_MIN}-{ATTRIBUTE_MAX}")
    return value


def _parse_optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _parse_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "t", "yes", "y"}


def load_roster_rows(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[RosterRow]:
    mapping = mapping or DEFAULT_ROSTER_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [RosterRow.from_mapping(row, mapping) for row in reader]
    return rows


def rows_to_players(rows: Iterable[RosterRow]) -> Tuple[List[PlayerRecord], List[PerformanceMetrics]]:
    players: List[PlayerRecord] = []
    metrics: List[PerformanceMetrics] = []
    seen: set[str] = set()
    for index, row in enumerate(rows, start=2):
        if not row.raw_id:
            logger.warning("Skipping roster row %s without a player id", index)
            continue
        if row.raw_id in seen:
            raise ValueError(f"Duplicate player id '{row.raw_id}' on roster row {index}")
        seen.add(row.raw_id)
        ratings = {attribute: _parse_rating(raw, attribute=attribute) for attribute, raw in row.raw_attributes.items()}
        players.append(
            PlayerRecord(
                player_id=row.raw_id,
                name=row.raw_name or row.raw_id,
                is_ringer=_parse_flag(row.raw_is_ringer),
                is_retired=_parse_flag(row.raw_is_retired),
                **ratings,
            )
        )
        power_rating = _parse_optional_float(row.raw_power_rating)
        goal_threat = _parse_optional_float(row.raw_goal_threat)
        if power_rating is not None or goal_threat is not None:
            metrics.append(
                PerformanceMetrics(
                    player_id=row.raw_id,
                    power_rating=power_rating,
                    goal_threat=max(0.0, goal_threat) if goal_threat is not None else None,
                )
            )
    return players, metrics


def load_roster_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PlayerRecord], List[PerformanceMetrics]]:
    """Read a roster CSV into players plus any performance figures it carries."""

    rows = load_roster_rows(path, mapping=mapping)
    players, metrics = rows_to_players(rows)
    logger.info("Loaded %s players (%s with performance data) from %s", len(players), len(metrics), path)
    return players, metrics


def exclude_retired(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    return [player for player in players if not player.is_retired]
