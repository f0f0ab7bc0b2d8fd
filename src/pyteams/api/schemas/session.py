from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from pyteams.config.weights import BalanceWeights
from pyteams.models.player import PerformanceMetrics, PlayerRecord


class SessionRequest(BaseModel):
    players: List[PlayerRecord]
    metrics: List[PerformanceMetrics] = Field(default_factory=list)
    team_size_a: int = Field(..., ge=1)
    team_size_b: int | None = Field(default=None, ge=1)
    strategy: str | Dict[str, Any] = "ability"
    weights: BalanceWeights | None = None


class RebalanceRequest(BaseModel):
    team_size_a: int | None = Field(default=None, ge=1)
    team_size_b: int | None = Field(default=None, ge=1)
    strategy: str | Dict[str, Any] = "ability"
    weights: BalanceWeights | None = None


class MoveRequest(BaseModel):
    """Drag ``player_id`` onto a slot.

    Sending ``expected_occupant`` (even as null) makes the move conditional
    on the slot still holding that player.
    """

    player_id: str
    target_team: str
    target_slot: int | None = Field(default=None, ge=1)
    expected_occupant: str | None = None


class FormationResponse(BaseModel):
    team_size: int
    defenders: int
    midfielders: int
    attackers: int


class SlotResponse(BaseModel):
    team: str
    slot_number: int
    position: str
    player_id: str | None
    name: str | None


class TeamResponse(BaseModel):
    team: str
    formation: FormationResponse
    slots: List[SlotResponse]
    complete: bool


class BalanceResultResponse(BaseModel):
    strategy: str
    balance_score: float | None = None
    balance_percentage: float | None = None
    quality_band: str | None = None
    swaps: int = 0


class AssignmentResponse(BaseModel):
    session_id: str
    teams: List[TeamResponse]
    unassigned: List[str]
    result: BalanceResultResponse | None = None
    can_undo: bool = False


class PerformanceResponse(BaseModel):
    power_rating_a: float
    power_rating_b: float
    goal_threat_a: float
    goal_threat_b: float
    balance_score: float
    balance_percentage: float
    quality_band: str


class ComparisonResponse(BaseModel):
    applicable: bool
    balance_score: float | None = None
    balance_percentage: float | None = None
    quality_band: str | None = None
    team_a: Dict[str, Dict[str, float]] | None = None
    team_b: Dict[str, Dict[str, float]] | None = None
    diffs_by_group: Dict[str, Dict[str, float]] | None = None
    team_diffs: Dict[str, float] | None = None
    performance: PerformanceResponse | None = None
