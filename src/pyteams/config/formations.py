"""Formation templates for supported team sizes."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, Literal, Mapping, Optional, Tuple

from pyteams.errors import TeamValidationError


PositionGroup = Literal["defense", "midfield", "attack"]

POSITION_GROUPS: Tuple[PositionGroup, ...] = ("defense", "midfield", "attack")

MIN_TEAM_SIZE = 5
MAX_TEAM_SIZE = 11
SIMPLIFIED_TEAM_SIZE = 4


@dataclass(frozen=True)
class Formation:
    defenders: int
    midfielders: int
    attackers: int

    def __post_init__(self) -> None:
        if min(self.defenders, self.midfielders, self.attackers) < 0:
            raise ValueError(f"Formation counts must be non-negative, got {self}")

    @property
    def team_size(self) -> int:
        return self.defenders + self.midfielders + self.attackers

    def count(self, group: PositionGroup) -> int:
        return {
            "defense": self.defenders,
            "midfield": self.midfielders,
            "attack": self.attackers,
        }[group]

    def position_for_slot(self, slot_number: int) -> PositionGroup:
        """Map a team-relative slot number (1-based) to its position band."""

        if slot_number < 1 or slot_number > self.team_size:
            raise ValueError(f"Slot {slot_number} is outside a team of {self.team_size}")
        if slot_number <= self.defenders:
            return "defense"
        if slot_number <= self.defenders + self.midfielders:
            return "midfield"
        return "attack"

    def slot_range(self, group: PositionGroup) -> range:
        start = 1
        for candidate in POSITION_GROUPS:
            size = self.count(candidate)
            if candidate == group:
                return range(start, start + size)
            start += size
        raise KeyError(group)

    def as_dict(self) -> Dict[str, int]:
        return {
            "defenders": self.defenders,
            "midfielders": self.midfielders,
            "attackers": self.attackers,
        }


_FORMATIONS: Dict[Tuple[int, bool], Formation] = {
    (4, True): Formation(defenders=0, midfielders=4, attackers=0),
    (5, False): Formation(defenders=2, midfielders=2, attackers=1),
    (6, False): Formation(defenders=2, midfielders=3, attackers=1),
    (7, False): Formation(defenders=2, midfielders=3, attackers=2),
    (8, False): Formation(defenders=2, midfielders=4, attackers=2),
    (9, False): Formation(defenders=3, midfielders=4, attackers=2),
    (10, False): Formation(defenders=4, midfielders=3, attackers=3),
    (11, False): Formation(defenders=4, midfielders=4, attackers=3),
}


def iter_formations() -> Iterable[Tuple[int, bool, Formation]]:
    """Return every tabulated (team_size, simplified, formation) entry."""

    return ((size, simplified, formation) for (size, simplified), formation in _FORMATIONS.items())


def _proportional(team_size: int) -> Formation:
    defenders = team_size * 3 // 10
    attackers = team_size // 5
    return Formation(
        defenders=defenders,
        midfielders=team_size - defenders - attackers,
        attackers=attackers,
    )


@lru_cache(maxsize=None)
def _builtin_formation(team_size: int, simplified: bool) -> Formation:
    key = (team_size, simplified)
    if key in _FORMATIONS:
        return _FORMATIONS[key]
    # The simplified flag only changes the table for the degenerate size.
    if (team_size, False) in _FORMATIONS:
        return _FORMATIONS[(team_size, False)]
    return _proportional(team_size)


class FormationOverrides:
    """Admin-defined formations that take precedence over the built-in table."""

    def __init__(self, overrides: Optional[Mapping[int, Formation]] = None):
        self._overrides: Dict[int, Formation] = {}
        for team_size, formation in (overrides or {}).items():
            self.set(team_size, formation)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, int]]) -> "FormationOverrides":
        overrides = {
            int(size): Formation(
                defenders=int(values["defenders"]),
                midfielders=int(values["midfielders"]),
                attackers=int(values["attackers"]),
            )
            for size, values in data.items()
        }
        return cls(overrides)

    def set(self, team_size: int, formation: Formation) -> None:
        if formation.team_size != team_size:
            raise TeamValidationError(
                f"Formation override {formation.as_dict()} sums to {formation.team_size}, expected {team_size}"
            )
        self._overrides[team_size] = formation

    def get(self, team_size: int) -> Optional[Formation]:
        return self._overrides.get(team_size)

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {str(size): formation.as_dict() for size, formation in sorted(self._overrides.items())}

    def __len__(self) -> int:
        return len(self._overrides)


def derive_formation(
    team_size: int,
    simplified: bool = False,
    overrides: Optional[FormationOverrides] = None,
) -> Formation:
    """Return the formation for one side of ``team_size`` players."""

    if team_size <= 0:
        raise ValueError(f"team_size must be positive, got {team_size}")
    if overrides is not None:
        override = overrides.get(team_size)
        if override is not None:
            return override
    return _builtin_formation(team_size, simplified)


def is_simplified_size(team_size: int) -> bool:
    return team_size == SIMPLIFIED_TEAM_SIZE


def validate_team_size(team_size: int) -> None:
    if team_size == SIMPLIFIED_TEAM_SIZE:
        return
    if team_size < MIN_TEAM_SIZE or team_size > MAX_TEAM_SIZE:
        raise TeamValidationError(
            f"Team size must be between {MIN_TEAM_SIZE} and {MAX_TEAM_SIZE} (or {SIMPLIFIED_TEAM_SIZE}), got {team_size}"
        )
