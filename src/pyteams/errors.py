"""Exception types raised by the balancing engine and slot store."""

from __future__ import annotations

from typing import Any


class BalanceError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TeamValidationError(BalanceError):
    """Invalid team size, pool or strategy; raised before anything is mutated."""


class SlotConflictError(BalanceError):
    def __init__(self, message: str, *, team: str, slot_number: int | None, expected: str | None, actual: str | None):
        super().__init__(message)
        self.team = team
        self.slot_number = slot_number
        self.expected = expected
        self.actual = actual


class PersistenceError(BalanceError):
    """The persistence collaborator rejected a change; local state was rolled back."""

    def __init__(self, message: str, *, command: Any = None):
        super().__init__(message)
        self.command = command


class IncompleteTeamsError(BalanceError):
    def __init__(self, message: str, *, missing_a: int = 0, missing_b: int = 0):
        super().__init__(message)
        self.missing_a = missing_a
        self.missing_b = missing_b
