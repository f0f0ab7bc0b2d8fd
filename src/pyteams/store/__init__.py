"""Slot assignment store and the commands it applies."""

from .commands import ANY_OCCUPANT, ClearCommand, Command, CommandPlan, MoveCommand, ReplaceCommand
from .slots import SlotAssignmentStore

__all__ = [
    "ANY_OCCUPANT",
    "ClearCommand",
    "Command",
    "CommandPlan",
    "MoveCommand",
    "ReplaceCommand",
    "SlotAssignmentStore",
]
