"""Undoable edits applied to an assignment by the slot store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from pyteams.errors import SlotConflictError, TeamValidationError
from pyteams.models.assignment import TEAMS, UNASSIGNED, Assignment, SlotChange, SlotKey


class _AnyOccupant:
    def __repr__(self) -> str:
        return "ANY_OCCUPANT"


ANY_OCCUPANT = _AnyOccupant()


@dataclass(frozen=True)
class CommandPlan:
    assignment: Assignment
    changes: List[SlotChange]


class Command:
    """Plans the complete next assignment and remembers the one it replaced."""

    def __init__(self) -> None:
        self._previous: Optional[Assignment] = None

    def plan(self, assignment: Assignment) -> CommandPlan:
        self._previous = assignment
        updated = self._build(assignment)
        return CommandPlan(assignment=updated, changes=updated.changes_from(assignment))

    def _build(self, assignment: Assignment) -> Assignment:
        raise NotImplementedError

    def undo(self) -> Assignment:
        if self._previous is None:
            raise RuntimeError(f"{self.describe()} has not been planned")
        return self._previous

    def describe(self) -> str:
        return type(self).__name__


class MoveCommand(Command):
    """Move a player to a slot, swapping with whoever is there."""

    def __init__(
        self,
        player_id: str,
        target_team: str,
        target_slot: Optional[int] = None,
        expected_occupant: object = ANY_OCCUPANT,
    ):
        super().__init__()
        self.player_id = player_id
        self.target_team = target_team
        self.target_slot = target_slot
        self.expected_occupant = expected_occupant

    def describe(self) -> str:
        if self.target_team == UNASSIGNED:
            return f"move {self.player_id} to {UNASSIGNED}"
        return f"move {self.player_id} to {self.target_team}{self.target_slot}"

    def _build(self, assignment: Assignment) -> Assignment:
        if not assignment.contains(self.player_id):
            raise TeamValidationError(f"Player {self.player_id} is not part of this match")
        source = assignment.locate(self.player_id)

        if self.target_team == UNASSIGNED:
            if source is None:
                return assignment
            return assignment.apply(
                {source.key: None},
                unassigned=list(assignment.unassigned) + [self.player_id],
            )

        if self.target_team not in TEAMS:
            raise TeamValidationError(f"Unknown team {self.target_team!r}")
        if self.target_slot is None:
            raise TeamValidationError(f"A slot number is required to move into team {self.target_team}")
        target = assignment.slot(self.target_team, self.target_slot)
        if target is None:
            raise TeamValidationError(f"Team {self.target_team} has no slot {self.target_slot}")

        occupant = target.player_id
        if self.expected_occupant is not ANY_OCCUPANT and self.expected_occupant != occupant:
            raise SlotConflictError(
                f"Slot {self.target_team}{self.target_slot} holds {occupant or 'nobody'}, "
                f"expected {self.expected_occupant or 'nobody'}",
                team=self.target_team,
                slot_number=self.target_slot,
                expected=self.expected_occupant,  # type: ignore[arg-type]
                actual=occupant,
            )
        if occupant == self.player_id:
            return assignment

        placements: Dict[SlotKey, Optional[str]] = {target.key: self.player_id}
        pool = [player_id for player_id in assignment.unassigned if player_id != self.player_id]
        if source is not None:
            placements[source.key] = occupant
        elif occupant is not None:
            pool.append(occupant)
        return assignment.apply(placements, unassigned=pool)


class ClearCommand(Command):
    """Return every placed player to the unassigned pool."""

    def _build(self, assignment: Assignment) -> Assignment:
        return assignment.apply(
            {slot.key: None for slot in assignment.slots},
            unassigned=assignment.player_ids(),
        )


class ReplaceCommand(Command):
    """Swap in a freshly balanced assignment of the same players."""

    def __init__(self, replacement: Assignment):
        super().__init__()
        self.replacement = replacement

    def _build(self, assignment: Assignment) -> Assignment:
        if sorted(self.replacement.player_ids()) != sorted(assignment.player_ids()):
            raise TeamValidationError("A replacement assignment must hold the same players")
        self.replacement.check_invariants()
        return self.replacement
