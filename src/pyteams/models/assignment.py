"""Slot assignment aggregate for one match."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Literal, Mapping, Optional, Sequence, Tuple

from pyteams.config.formations import POSITION_GROUPS, Formation, PositionGroup


Team = Literal["A", "B"]
TEAMS: Tuple[Team, ...] = ("A", "B")
UNASSIGNED = "Unassigned"

SlotKey = Tuple[str, int]


@dataclass(frozen=True)
class Slot:
    team: Team
    slot_number: int
    position: PositionGroup
    player_id: Optional[str] = None

    @property
    def key(self) -> SlotKey:
        return (self.team, self.slot_number)


@dataclass(frozen=True)
class SlotChange:
    """Where one player ends up; ``slot_number`` is None for the unassigned pool."""

    player_id: str
    team: str
    slot_number: Optional[int]


@dataclass(frozen=True)
class Assignment:
    """Every slot of both teams plus the players not placed in any slot.

    Instances are immutable; changes produce a new Assignment through
    :meth:`apply`, which validates the one-player-per-slot invariant before
    returning.
    """

    formation_a: Formation
    formation_b: Formation
    slots: Tuple[Slot, ...]
    unassigned: Tuple[str, ...] = ()

    @classmethod
    def empty(
        cls,
        formation_a: Formation,
        formation_b: Formation,
        player_ids: Iterable[str] = (),
    ) -> "Assignment":
        slots: List[Slot] = []
        for team, formation in (("A", formation_a), ("B", formation_b)):
            for slot_number in range(1, formation.team_size + 1):
                slots.append(Slot(team=team, slot_number=slot_number, position=formation.position_for_slot(slot_number)))
        return cls(
            formation_a=formation_a,
            formation_b=formation_b,
            slots=tuple(slots),
            unassigned=tuple(sorted(set(player_ids))),
        )

    @classmethod
    def from_teams(
        cls,
        formation_a: Formation,
        formation_b: Formation,
        team_a: Sequence[str],
        team_b: Sequence[str],
    ) -> "Assignment":
        """Build an assignment from player ids listed in slot order."""

        base = cls.empty(formation_a, formation_b)
        placements: Dict[SlotKey, Optional[str]] = {}
        for team, player_ids, formation in (("A", team_a, formation_a), ("B", team_b, formation_b)):
            if len(player_ids) > formation.team_size:
                raise ValueError(f"Team {team} has {len(player_ids)} players for {formation.team_size} slots")
            for index, player_id in enumerate(player_ids, start=1):
                placements[(team, index)] = player_id
        return base.apply(placements, unassigned=())

    def formation(self, team: str) -> Formation:
        if team == "A":
            return self.formation_a
        if team == "B":
            return self.formation_b
        raise KeyError(f"Unknown team {team!r}")

    def _index(self) -> Dict[SlotKey, Slot]:
        return {slot.key: slot for slot in self.slots}

    def slot(self, team: str, slot_number: int) -> Optional[Slot]:
        return self._index().get((team, slot_number))

    def team_slots(self, team: str) -> List[Slot]:
        return sorted((slot for slot in self.slots if slot.team == team), key=lambda s: s.slot_number)

    def locate(self, player_id: str) -> Optional[Slot]:
        for slot in self.slots:
            if slot.player_id == player_id:
                return slot
        return None

    def contains(self, player_id: str) -> bool:
        return player_id in self.unassigned or self.locate(player_id) is not None

    def player_ids(self) -> List[str]:
        placed = [slot.player_id for slot in self.slots if slot.player_id is not None]
        return placed + list(self.unassigned)

    def team_player_ids(self, team: str) -> List[str]:
        return [slot.player_id for slot in self.team_slots(team) if slot.player_id is not None]

    def players_by_position(self, team: str) -> Dict[PositionGroup, List[str]]:
        grouped: Dict[PositionGroup, List[str]] = {group: [] for group in POSITION_GROUPS}
        for slot in self.team_slots(team):
            if slot.player_id is not None:
                grouped[slot.position].append(slot.player_id)
        return grouped

    def filled_count(self, team: str) -> int:
        return len(self.team_player_ids(team))

    def is_team_complete(self, team: str) -> bool:
        return self.filled_count(team) == self.formation(team).team_size

    def is_complete(self) -> bool:
        return self.is_team_complete("A") and self.is_team_complete("B")

    def check_invariants(self) -> None:
        seen: set[str] = set()
        keys: set[SlotKey] = set()
        for slot in self.slots:
            if slot.key in keys:
                raise ValueError(f"Slot {slot.team}{slot.slot_number} appears twice")
            keys.add(slot.key)
            if slot.player_id is None:
                continue
            if slot.player_id in seen:
                raise ValueError(f"Player {slot.player_id} occupies more than one slot")
            seen.add(slot.player_id)
        for player_id in self.unassigned:
            if player_id in seen:
                raise ValueError(f"Player {player_id} is both placed and unassigned")
            seen.add(player_id)

    def apply(
        self,
        placements: Mapping[SlotKey, Optional[str]],
        *,
        unassigned: Optional[Iterable[str]] = None,
    ) -> "Assignment":
        """Return a copy with ``placements`` written into their slots.

        ``unassigned`` replaces the pool when given. Every change lands in the
        new value at once; the result is checked before it is returned.
        """

        index = self._index()
        for key in placements:
            if key not in index:
                raise KeyError(f"Unknown slot {key[0]}{key[1]}")
        slots = tuple(
            replace(slot, player_id=placements[slot.key]) if slot.key in placements else slot
            for slot in self.slots
        )
        pool = self.unassigned if unassigned is None else tuple(sorted(set(unassigned)))
        updated = replace(self, slots=slots, unassigned=pool)
        updated.check_invariants()
        return updated

    def changes_from(self, previous: "Assignment") -> List[SlotChange]:
        """Describe where each player whose position differs from ``previous`` now sits."""

        def positions(assignment: "Assignment") -> Dict[str, Tuple[str, Optional[int]]]:
            located: Dict[str, Tuple[str, Optional[int]]] = {
                slot.player_id: (slot.team, slot.slot_number) for slot in assignment.slots if slot.player_id is not None
            }
            for player_id in assignment.unassigned:
                located[player_id] = (UNASSIGNED, None)
            return located

        before = positions(previous)
        after = positions(self)
        changes = [
            SlotChange(player_id=player_id, team=team, slot_number=slot_number)
            for player_id, (team, slot_number) in after.items()
            if before.get(player_id) != (team, slot_number)
        ]
        return sorted(changes, key=lambda change: change.player_id)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)
