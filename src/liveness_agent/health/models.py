"""Probe result types and the persisted manager-check record."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator


class ProbeStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeOutcome:
    """Classification of a single manager probe."""

    manager_url: str
    status: ProbeStatus
    http_status: int | None = None
    error_message: str | None = None

    @classmethod
    def success(cls, manager_url: str) -> "ProbeOutcome":
        return cls(manager_url=manager_url, status=ProbeStatus.SUCCESS, http_status=200)

    @classmethod
    def failure(
        cls, manager_url: str, message: str, http_status: int | None = None,
    ) -> "ProbeOutcome":
        return cls(
            manager_url=manager_url,
            status=ProbeStatus.ERROR,
            http_status=http_status,
            error_message=message,
        )

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Response item: ``http_status`` only when received, ``error`` only on failure."""
        item: dict[str, Any] = {"manager_url": self.manager_url, "status": self.status.value}
        if self.http_status is not None:
            item["http_status"] = self.http_status
        if not self.ok:
            item["error"] = self.error_message
        return item


@dataclass(frozen=True)
class CycleResult:
    """Outcomes of one check cycle, in configuration order."""

    outcomes: tuple[ProbeOutcome, ...] = ()

    @property
    def status(self) -> ProbeStatus:
        if any(not o.ok for o in self.outcomes):
            return ProbeStatus.ERROR
        return ProbeStatus.SUCCESS

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[ProbeOutcome]:
        return iter(self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "managers": [o.to_dict() for o in self.outcomes],
        }


@dataclass(frozen=True)
class ManagerCheckRecord:
    """Durable mirror of a ProbeOutcome. ``id`` is assigned by storage."""

    checked_at: datetime
    manager_url: str
    status: ProbeStatus
    http_status: int | None = None
    error_message: str | None = None
    id: int | None = None

    @classmethod
    def from_outcome(
        cls, outcome: ProbeOutcome, checked_at: datetime | None = None,
    ) -> "ManagerCheckRecord":
        return cls(
            checked_at=checked_at or datetime.now(timezone.utc),
            manager_url=outcome.manager_url,
            status=outcome.status,
            http_status=outcome.http_status,
            error_message=outcome.error_message,
        )


class ManagerHealthBody(BaseModel):
    """Body returned by a manager's /health endpoint.

    A ``null`` body or ``null`` status reads as an empty status.
    """

    status: str = ""

    @model_validator(mode="before")
    @classmethod
    def _null_as_empty(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict) and data.get("status", "") is None:
            return {**data, "status": ""}
        return data
