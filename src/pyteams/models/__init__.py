"""Player and assignment models."""

from .player import ATTRIBUTES, PerformanceMetrics, PlayerRecord
from .assignment import TEAMS, UNASSIGNED, Assignment, Slot, SlotChange, Team

__all__ = [
    "ATTRIBUTES",
    "Assignment",
    "PerformanceMetrics",
    "PlayerRecord",
    "Slot",
    "SlotChange",
    "TEAMS",
    "Team",
    "UNASSIGNED",
]
