"""Pydantic models for API I/O."""

from .session import (
    AssignmentResponse,
    BalanceResultResponse,
    ComparisonResponse,
    FormationResponse,
    MoveRequest,
    PerformanceResponse,
    RebalanceRequest,
    SessionRequest,
    SlotResponse,
    TeamResponse,
)

__all__ = [
    "AssignmentResponse",
    "BalanceResultResponse",
    "ComparisonResponse",
    "FormationResponse",
    "MoveRequest",
    "PerformanceResponse",
    "RebalanceRequest",
    "SessionRequest",
    "SlotResponse",
    "TeamResponse",
]
