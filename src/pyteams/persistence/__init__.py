"""Persistence layer for match sessions and their slot assignments."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from pyteams.models.assignment import UNASSIGNED, Assignment, SlotChange


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "PYTEAMS_DB_PATH"


class AssignmentPersistence(Protocol):
    """Anything that can durably record a batch of slot changes.

    ``persist`` returns False (or raises) when the batch was not stored; the
    caller then restores its previous assignment.
    """

    def persist(self, session_id: str, changes: Sequence[SlotChange]) -> bool:
        ...


@dataclass
class SessionRecord:
    session_id: str
    created_at: datetime
    updated_at: datetime
    team_size_a: int
    team_size_b: int
    strategy: Optional[str]
    result: dict


class SlotStore:
    """SQLite-backed store of sessions and where each player sits."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv(_DB_PATH_ENV)
        if env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "pyteams-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "pyteams.sqlite"
                logger.warning("Could not open %s; falling back to %s", self.db_path, fallback)
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                team_size_a INTEGER NOT NULL,
                team_size_b INTEGER NOT NULL,
                strategy TEXT,
                result_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS slot_assignments (
                session_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                team TEXT NOT NULL,
                slot_number INTEGER,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (session_id, player_id)
            )
            """
        )
        conn.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS slot_assignments_slot
            ON slot_assignments (session_id, team, slot_number)
            WHERE slot_number IS NOT NULL
            """
        )
        conn.commit()

    def _write_changes(self, conn: sqlite3.Connection, session_id: str, changes: Sequence[SlotChange], now: str) -> None:
        # Remove every moved player first so a swap never trips the slot index mid-batch.
        conn.executemany(
            "DELETE FROM slot_assignments WHERE session_id = ? AND player_id = ?",
            [(session_id, change.player_id) for change in changes],
        )
        conn.executemany(
            """
            INSERT INTO slot_assignments (session_id, player_id, team, slot_number, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(session_id, change.player_id, change.team, change.slot_number, now) for change in changes],
        )

    def persist(self, session_id: str, changes: Sequence[SlotChange]) -> bool:
        """Write a batch of slot changes in one transaction."""

        if not changes:
            return True
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._connect() as conn:
                self._write_changes(conn, session_id, changes, now)
                conn.execute("UPDATE sessions SET updated_at = ? WHERE id = ?", (now, session_id))
                conn.commit()
        except sqlite3.Error as exc:
            logger.warning("Failed to persist %s slot changes for session %s: %s", len(changes), session_id, exc)
            return False
        return True

    def save_assignment(
        self,
        session_id: str,
        assignment: Assignment,
        *,
        strategy: Optional[str] = None,
        result: Optional[dict] = None,
    ) -> SessionRecord:
        """Replace the stored slots of ``session_id`` with ``assignment``."""

        now = datetime.now(timezone.utc).isoformat()
        changes = [
            SlotChange(player_id=slot.player_id, team=slot.team, slot_number=slot.slot_number)
            for slot in assignment.slots
            if slot.player_id is not None
        ]
        changes.extend(
            SlotChange(player_id=player_id, team=UNASSIGNED, slot_number=None) for player_id in assignment.unassigned
        )
        with self._connect() as conn:
            existing = conn.execute("SELECT created_at FROM sessions WHERE id = ?", (session_id,)).fetchone()
            created_at = existing["created_at"] if existing is not None else now
            conn.execute(
                """
                INSERT OR REPLACE INTO sessions (
                    id, created_at, updated_at, team_size_a, team_size_b, strategy, result_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    created_at,
                    now,
                    assignment.formation_a.team_size,
                    assignment.formation_b.team_size,
                    strategy,
                    json.dumps(result or {}),
                ),
            )
            conn.execute("DELETE FROM slot_assignments WHERE session_id = ?", (session_id,))
            self._write_changes(conn, session_id, changes, now)
            conn.commit()
        record = self.get_session(session_id)
        if record is None:  # pragma: no cover
            raise KeyError(f"Session {session_id} not found after save")
        return record

    def update_result(
        self,
        session_id: str,
        *,
        strategy: Optional[str],
        result: Optional[dict],
        team_size_a: Optional[int] = None,
        team_size_b: Optional[int] = None,
    ) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE sessions
                SET strategy = ?, result_json = ?, updated_at = ?,
                    team_size_a = COALESCE(?, team_size_a),
                    team_size_b = COALESCE(?, team_size_b)
                WHERE id = ?
                """,
                (strategy, json.dumps(result or {}), now, team_size_a, team_size_b, session_id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise KeyError(f"Session {session_id} not found")

    def load_slots(self, session_id: str) -> List[SlotChange]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT player_id, team, slot_number FROM slot_assignments WHERE session_id = ? "
                "ORDER BY team, slot_number, player_id",
                (session_id,),
            ).fetchall()
        return [
            SlotChange(player_id=row["player_id"], team=row["team"], slot_number=row["slot_number"])
            for row in rows
        ]

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_record(row)

    def list_sessions(self, limit: int = 50) -> List[SessionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM sessions ORDER BY datetime(updated_at) DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def _row_to_record(self, row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            session_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            team_size_a=row["team_size_a"],
            team_size_b=row["team_size_b"],
            strategy=row["strategy"],
            result=json.loads(row["result_json"]),
        )


__all__ = [
    "AssignmentPersistence",
    "SessionRecord",
    "SlotStore",
]
