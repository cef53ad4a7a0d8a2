"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path

import httpx
import pytest

from liveness_agent.deadline import Deadline
from liveness_agent.health.models import ManagerCheckRecord
from liveness_agent.storage.migrator import run_migrations
from liveness_agent.storage.protocols import StorageError

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


class FakeStore:
    """In-memory store satisfying both persistence ports.

    Records every call; ``fail_*`` flags make the next writes raise StorageError.
    """

    def __init__(self) -> None:
        self.health_calls: list[datetime] = []
        self.manager_checks: list[ManagerCheckRecord] = []
        self.fail_health_calls = False
        self.fail_manager_checks: set[str] | bool = False

    def save_health_call(self, called_at: datetime, deadline: Deadline) -> None:
        if self.fail_health_calls:
            raise StorageError("save health call: database is locked")
        self.health_calls.append(called_at)

    def save_manager_check(self, record: ManagerCheckRecord, deadline: Deadline) -> int:
        failing = self.fail_manager_checks
        if failing is True or (isinstance(failing, set) and record.manager_url in failing):
            self.manager_checks.append(record)
            raise StorageError("save manager check: disk I/O error")
        self.manager_checks.append(record)
        return len(self.manager_checks)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def migrated_db(tmp_path: Path) -> Path:
    """SQLite file with the repository's migrations applied."""
    db_path = tmp_path / "agent.db"
    run_migrations(db_path, MIGRATIONS_DIR)
    return db_path


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def manager_client() -> Iterator[Callable[[dict[str, Handler]], httpx.Client]]:
    """Build an httpx.Client whose requests are answered per host.

    Unknown hosts behave like a refused connection.
    """
    clients: list[httpx.Client] = []

    def _make(handlers: dict[str, Handler]) -> httpx.Client:
        def dispatch(request: httpx.Request) -> httpx.Response:
            handler = handlers.get(request.url.host)
            if handler is None:
                raise httpx.ConnectError("Connection refused", request=request)
            return handler(request)

        client = httpx.Client(
            transport=httpx.MockTransport(dispatch), timeout=5.0, follow_redirects=True,
        )
        clients.append(client)
        return client

    yield _make

    for c in clients:
        c.close()
