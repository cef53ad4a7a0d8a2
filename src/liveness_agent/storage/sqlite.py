"""SQLite-backed store for health calls and manager checks.

Schema is owned by the SQL files under ``migrations/``; this module only
reads and appends rows. Each write opens a short-lived connection and is
interrupted once the caller's deadline passes.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Any

from liveness_agent.deadline import Deadline
from liveness_agent.health.models import ManagerCheckRecord
from liveness_agent.storage.protocols import StorageError


# sqlite VM instructions between deadline checks
_PROGRESS_STEPS = 1_000


class SQLiteStore:
    """Implements both HealthCallStore and ManagerCheckStore."""

    def __init__(self, db_path: Path | str, logger: logging.Logger | None = None) -> None:
        self._db_path = Path(db_path)
        self._log = logger or logging.getLogger(__name__)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self, deadline: Deadline | None = None) -> sqlite3.Connection:
        timeout = deadline.remaining() if deadline else 5.0
        conn = sqlite3.connect(str(self._db_path), timeout=timeout)
        conn.row_factory = sqlite3.Row
        if deadline is not None:
            conn.set_progress_handler(lambda: int(deadline.expired), _PROGRESS_STEPS)
        return conn

    def _execute(self, op: str, sql: str, params: tuple[Any, ...], deadline: Deadline) -> int:
        if deadline.expired:
            raise StorageError(f"{op}: deadline exceeded")
        try:
            with closing(self._connect(deadline)) as conn:
                with conn:
                    cursor = conn.execute(sql, params)
                return cursor.lastrowid
        except sqlite3.Error as e:
            self._log.error("failed to %s: %s", op, e)
            raise StorageError(f"{op}: {e}") from e

    # ── Writes ───────────────────────────────────────────────────────────

    def save_health_call(self, called_at: datetime, deadline: Deadline) -> None:
        self._execute(
            "save health call",
            "INSERT INTO health_calls (called_at) VALUES (?)",
            (called_at.isoformat(),),
            deadline,
        )

    def save_manager_check(self, record: ManagerCheckRecord, deadline: Deadline) -> int:
        return self._execute(
            "save manager check",
            "INSERT INTO manager_checks "
            "(checked_at, manager_url, status, http_status, error_message) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                record.checked_at.isoformat(), record.manager_url, record.status.value,
                record.http_status, record.error_message,
            ),
            deadline,
        )

    # ── Reads ────────────────────────────────────────────────────────────

    def ping(self) -> None:
        """Verify the database is reachable and migrated."""
        try:
            with closing(self._connect()) as conn:
                conn.execute("SELECT 1 FROM health_calls LIMIT 1")
                conn.execute("SELECT 1 FROM manager_checks LIMIT 1")
        except sqlite3.Error as e:
            raise StorageError(f"ping database: {e}") from e

    def count_health_calls(self) -> int:
        with closing(self._connect()) as conn:
            return conn.execute("SELECT COUNT(*) FROM health_calls").fetchone()[0]

    def recent_manager_checks(self, limit: int = 50) -> list[dict[str, Any]]:
        """Most recent manager checks, newest first."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM manager_checks ORDER BY id DESC LIMIT ?", (limit,),
            ).fetchall()
        return [dict(r) for r in rows]
