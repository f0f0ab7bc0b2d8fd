"""REST API for balancing teams and editing slot assignments."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, NoReturn, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query

from pyteams.api.schemas import (
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
from pyteams.balance import BalanceResult, PerformanceStrategy, balance_teams, parse_strategy
from pyteams.config import BalanceWeights, Formation, derive_formation
from pyteams.errors import BalanceError, PersistenceError, SlotConflictError
from pyteams.models import TEAMS, Assignment, PerformanceMetrics, PlayerRecord
from pyteams.persistence import SlotStore
from pyteams.stats import compare_performance, compare_teams
from pyteams.store import ANY_OCCUPANT, SlotAssignmentStore


logger = logging.getLogger("uvicorn.error")


@dataclass
class MatchSession:
    store: SlotAssignmentStore
    players: Dict[str, PlayerRecord]
    metrics: List[PerformanceMetrics] = field(default_factory=list)
    weights: BalanceWeights = field(default_factory=BalanceWeights)
    performance: PerformanceStrategy = field(default_factory=PerformanceStrategy)
    result: Optional[BalanceResult] = None


def _raise_http(exc: BalanceError) -> NoReturn:
    if isinstance(exc, SlotConflictError):
        raise HTTPException(status_code=409, detail=exc.message) from exc
    if isinstance(exc, PersistenceError):
        raise HTTPException(status_code=502, detail=exc.message) from exc
    raise HTTPException(status_code=400, detail=exc.message) from exc


def _formation_response(formation: Formation) -> FormationResponse:
    return FormationResponse(team_size=formation.team_size, **formation.as_dict())


def _result_response(result: Optional[BalanceResult]) -> Optional[BalanceResultResponse]:
    if result is None:
        return None
    return BalanceResultResponse(
        strategy=result.strategy,
        balance_score=result.balance_score,
        balance_percentage=result.balance_percentage,
        quality_band=result.quality_band.value if result.quality_band else None,
        swaps=result.swaps,
    )


def _assignment_response(session_id: str, session: MatchSession, assignment: Assignment) -> AssignmentResponse:
    teams = []
    for team in TEAMS:
        slots = [
            SlotResponse(
                team=slot.team,
                slot_number=slot.slot_number,
                position=slot.position,
                player_id=slot.player_id,
                name=session.players[slot.player_id].name if slot.player_id else None,
            )
            for slot in assignment.team_slots(team)
        ]
        teams.append(
            TeamResponse(
                team=team,
                formation=_formation_response(assignment.formation(team)),
                slots=slots,
                complete=assignment.is_team_complete(team),
            )
        )
    return AssignmentResponse(
        session_id=session_id,
        teams=teams,
        unassigned=list(assignment.unassigned),
        result=_result_response(session.result),
        can_undo=session.store.can_undo,
    )


def _result_payload(result: BalanceResult) -> dict:
    response = _result_response(result)
    return response.model_dump() if response is not None else {}


def create_app(db_path: Path | str | None = None) -> FastAPI:
    app = FastAPI(title="pyteams balancer")
    slot_store = SlotStore(db_path or Path(__file__).resolve().parent.parent / "pyteams.sqlite")
    app.state.slot_store = slot_store
    sessions: Dict[str, MatchSession] = {}
    sessions_lock = threading.Lock()
    app.state.sessions = sessions

    def _fetch_session_or_404(session_id: str) -> MatchSession:
        with sessions_lock:
            session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/formations/{team_size}", response_model=FormationResponse)
    async def formation(team_size: int, simplified: bool = Query(False)) -> FormationResponse:
        try:
            derived = derive_formation(team_size, simplified=simplified)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _formation_response(derived)

    @app.post("/sessions", response_model=AssignmentResponse)
    async def create_session(request: SessionRequest) -> AssignmentResponse:
        team_size_b = request.team_size_b if request.team_size_b is not None else request.team_size_a
        weights = request.weights or BalanceWeights()
        try:
            strategy = parse_strategy(request.strategy)
            output = balance_teams(
                request.players,
                request.team_size_a,
                team_size_b,
                strategy,
                weights=weights,
                metrics=request.metrics,
            )
        except BalanceError as exc:
            _raise_http(exc)

        session_id = uuid4().hex
        try:
            slot_store.save_assignment(
                session_id,
                output.assignment,
                strategy=strategy.kind,
                result=_result_payload(output.result),
            )
        except sqlite3.Error as exc:
            logger.warning("Could not store session %s: %s", session_id, exc)
            raise HTTPException(status_code=502, detail=f"Could not store session: {exc}") from exc
        session = MatchSession(
            store=SlotAssignmentStore(output.assignment, slot_store, session_id=session_id),
            players={player.player_id: player for player in request.players},
            metrics=list(request.metrics),
            weights=weights,
            performance=strategy if isinstance(strategy, PerformanceStrategy) else PerformanceStrategy(),
            result=output.result,
        )
        with sessions_lock:
            sessions[session_id] = session
        logger.info("Created session %s with %s players", session_id, len(request.players))
        return _assignment_response(session_id, session, output.assignment)

    @app.get("/sessions/{session_id}", response_model=AssignmentResponse)
    async def get_session(session_id: str) -> AssignmentResponse:
        session = _fetch_session_or_404(session_id)
        return _assignment_response(session_id, session, session.store.current)

    @app.put("/sessions/{session_id}/balance", response_model=AssignmentResponse)
    async def rebalance(session_id: str, request: RebalanceRequest) -> AssignmentResponse:
        session = _fetch_session_or_404(session_id)
        current = session.store.current
        team_size_a = request.team_size_a or current.formation_a.team_size
        team_size_b = request.team_size_b or (
            request.team_size_a if request.team_size_a is not None else current.formation_b.team_size
        )
        weights = request.weights or session.weights
        try:
            strategy = parse_strategy(request.strategy)
            output = balance_teams(
                list(session.players.values()),
                team_size_a,
                team_size_b,
                strategy,
                weights=weights,
                metrics=session.metrics,
            )
            assignment = session.store.replace(output.assignment)
        except BalanceError as exc:
            _raise_http(exc)

        try:
            slot_store.update_result(
                session_id,
                strategy=strategy.kind,
                result=_result_payload(output.result),
                team_size_a=team_size_a,
                team_size_b=team_size_b,
            )
        except sqlite3.Error as exc:
            logger.warning("Could not store balance result for session %s: %s", session_id, exc)
            # The new slots are already stored; only the verdict is missing.
            session.result = None
            raise HTTPException(status_code=502, detail=f"Could not store balance result: {exc}") from exc
        session.weights = weights
        if isinstance(strategy, PerformanceStrategy):
            session.performance = strategy
        session.result = output.result
        return _assignment_response(session_id, session, assignment)

    @app.post("/sessions/{session_id}/moves", response_model=AssignmentResponse)
    async def move(session_id: str, request: MoveRequest) -> AssignmentResponse:
        session = _fetch_session_or_404(session_id)
        expected = request.expected_occupant if "expected_occupant" in request.model_fields_set else ANY_OCCUPANT
        try:
            assignment = session.store.move_or_swap(
                request.player_id,
                request.target_team,
                request.target_slot,
                expected_occupant=expected,
            )
        except BalanceError as exc:
            _raise_http(exc)
        # A hand-edited split no longer matches the balancer's verdict.
        session.result = None
        return _assignment_response(session_id, session, assignment)

    @app.post("/sessions/{session_id}/clear", response_model=AssignmentResponse)
    async def clear(session_id: str) -> AssignmentResponse:
        session = _fetch_session_or_404(session_id)
        try:
            assignment = session.store.clear()
        except BalanceError as exc:
            _raise_http(exc)
        session.result = None
        return _assignment_response(session_id, session, assignment)

    @app.post("/sessions/{session_id}/undo", response_model=AssignmentResponse)
    async def undo(session_id: str) -> AssignmentResponse:
        session = _fetch_session_or_404(session_id)
        try:
            assignment = session.store.undo()
        except BalanceError as exc:
            _raise_http(exc)
        session.result = None
        return _assignment_response(session_id, session, assignment)

    @app.get("/sessions/{session_id}/compare", response_model=ComparisonResponse, response_model_exclude_none=True)
    async def compare(session_id: str) -> ComparisonResponse:
        session = _fetch_session_or_404(session_id)
        assignment = session.store.current
        stats = compare_teams(assignment, session.players, session.weights)
        if stats is None:
            return ComparisonResponse(applicable=False)
        performance = compare_performance(
            assignment.team_player_ids("A"),
            assignment.team_player_ids("B"),
            session.metrics,
            power_weight=session.performance.power_weight,
            goal_weight=session.performance.goal_weight,
        )
        return ComparisonResponse(
            applicable=True,
            balance_score=stats.balance_score,
            balance_percentage=stats.balance_percentage,
            quality_band=stats.quality_band.value,
            team_a={group: vector.as_dict() for group, vector in stats.team_a_groups.items()},
            team_b={group: vector.as_dict() for group, vector in stats.team_b_groups.items()},
            diffs_by_group=stats.diffs_by_group,
            team_diffs=stats.team_diffs,
            performance=PerformanceResponse(
                power_rating_a=performance.power_rating_a,
                power_rating_b=performance.power_rating_b,
                goal_threat_a=performance.goal_threat_a,
                goal_threat_b=performance.goal_threat_b,
                balance_score=performance.balance_score,
                balance_percentage=performance.balance_percentage,
                quality_band=performance.quality_band.value,
            )
            if performance is not None
            else None,
        )

    return app


__all__ = ["MatchSession", "create_app"]
