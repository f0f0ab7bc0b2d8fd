"""Input adapters that normalize raw roster data."""

from .roster import (
    DEFAULT_ROSTER_MAPPING,
    RosterRow,
    exclude_retired,
    load_roster_csv,
    load_roster_rows,
    rows_to_players,
)

__all__ = [
    "DEFAULT_ROSTER_MAPPING",
    "RosterRow",
    "exclude_retired",
    "load_roster_csv",
    "load_roster_rows",
    "rows_to_players",
]
