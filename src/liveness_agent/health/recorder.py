"""Records calls to the agent's own /health endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from liveness_agent.deadline import Deadline
from liveness_agent.storage.protocols import HealthCallStore


class HealthRecorder:
    def __init__(self, store: HealthCallStore, logger: logging.Logger | None = None) -> None:
        self._store = store
        self._log = logger or logging.getLogger(__name__)

    def record_health_call(self, deadline: Deadline) -> None:
        """Append one health-call record. StorageError propagates unchanged."""
        called_at = datetime.now(timezone.utc)
        self._store.save_health_call(called_at, deadline)
        self._log.debug("Health call recorded at %s", called_at.isoformat())
