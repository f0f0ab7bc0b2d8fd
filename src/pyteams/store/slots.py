"""The single mutator of a match's slot assignment."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional
from uuid import uuid4

from pyteams.errors import PersistenceError, TeamValidationError
from pyteams.models.assignment import Assignment, SlotChange
from pyteams.persistence import AssignmentPersistence

from .commands import ANY_OCCUPANT, ClearCommand, Command, MoveCommand, ReplaceCommand


logger = logging.getLogger(__name__)


class SlotAssignmentStore:
    """Holds the current assignment of one session and applies edits to it.

    Every edit is planned in full before the snapshot is replaced, so readers
    never see a half-applied swap. When the persistence collaborator rejects
    the batch the command's snapshot is restored and
    :class:`PersistenceError` is raised.
    """

    def __init__(
        self,
        assignment: Assignment,
        persistence: Optional[AssignmentPersistence] = None,
        session_id: Optional[str] = None,
    ):
        assignment.check_invariants()
        self.session_id = session_id or uuid4().hex
        self._assignment = assignment
        self._persistence = persistence
        self._history: List[Command] = []
        self._lock = threading.RLock()

    @property
    def current(self) -> Assignment:
        with self._lock:
            return self._assignment

    @property
    def can_undo(self) -> bool:
        with self._lock:
            return bool(self._history)

    def _persist(self, changes: List[SlotChange]) -> None:
        if self._persistence is None:
            return
        try:
            stored = self._persistence.persist(self.session_id, changes)
        except Exception as exc:
            raise PersistenceError(f"Persisting {len(changes)} slot changes failed: {exc}") from exc
        if not stored:
            raise PersistenceError(f"Persistence rejected {len(changes)} slot changes")

    def execute(self, command: Command) -> Assignment:
        with self._lock:
            plan = command.plan(self._assignment)
            if not plan.changes and plan.assignment == self._assignment:
                return self._assignment
            self._assignment = plan.assignment
            try:
                self._persist(plan.changes)
            except PersistenceError as exc:
                self._assignment = command.undo()
                exc.command = command
                logger.warning("Rolled back %s for session %s: %s", command.describe(), self.session_id, exc.message)
                raise
            self._history.append(command)
            logger.debug("Applied %s (%s changes) to session %s", command.describe(), len(plan.changes), self.session_id)
            return self._assignment

    def move_or_swap(
        self,
        player_id: str,
        target_team: str,
        target_slot: Optional[int] = None,
        expected_occupant: object = ANY_OCCUPANT,
    ) -> Assignment:
        return self.execute(MoveCommand(player_id, target_team, target_slot, expected_occupant))

    def clear(self) -> Assignment:
        return self.execute(ClearCommand())

    def replace(self, assignment: Assignment) -> Assignment:
        return self.execute(ReplaceCommand(assignment))

    def undo(self) -> Assignment:
        """Revert the most recent edit, persisting the reversal."""

        with self._lock:
            if not self._history:
                raise TeamValidationError("Nothing to undo")
            command = self._history.pop()
            restored = command.undo()
            changes = restored.changes_from(self._assignment)
            current = self._assignment
            self._assignment = restored
            try:
                self._persist(changes)
            except PersistenceError as exc:
                self._assignment = current
                self._history.append(command)
                exc.command = command
                logger.warning("Undo of %s failed for session %s: %s", command.describe(), self.session_id, exc.message)
                raise
            return self._assignment
