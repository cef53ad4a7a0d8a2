"""Persistence ports the health core depends on."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from liveness_agent.deadline import Deadline
from liveness_agent.health.models import ManagerCheckRecord


class StorageError(Exception):
    """Raised when a durable write fails or its deadline has passed."""


@runtime_checkable
class HealthCallStore(Protocol):
    """Append-only log of calls to the agent's own /health endpoint."""

    def save_health_call(self, called_at: datetime, deadline: Deadline) -> None:
        """Append one record.

        Raises:
            StorageError: on any storage failure.
        """
        ...


@runtime_checkable
class ManagerCheckStore(Protocol):
    """Append-only log of manager probe outcomes."""

    def save_manager_check(self, record: ManagerCheckRecord, deadline: Deadline) -> int:
        """Append one record and return its storage-assigned id.

        Raises:
            StorageError: on any storage failure.
        """
        ...
