"""Manager prober — probes each manager's /health and records the outcome.

Each configured manager is probed once per cycle, in configuration order.
Every failure is classified into the outcome instead of being raised, and
every outcome is persisted as soon as it is known.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from liveness_agent.deadline import Deadline
from liveness_agent.health.models import (
    CycleResult,
    ManagerCheckRecord,
    ManagerHealthBody,
    ProbeOutcome,
)
from liveness_agent.storage.protocols import ManagerCheckStore

DEFAULT_TIMEOUT_SECONDS = 5.0


class ManagerProber:
    """Runs check cycles against a fixed list of manager base URLs."""

    def __init__(
        self,
        client: httpx.Client,
        store: ManagerCheckStore,
        manager_urls: Sequence[str],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._manager_urls = tuple(manager_urls)
        self._timeout = timeout
        self._log = logger or logging.getLogger(__name__)

    @property
    def manager_urls(self) -> tuple[str, ...]:
        return self._manager_urls

    def run_cycle(self, deadline: Deadline) -> CycleResult:
        """Probe every manager sequentially. Never raises for probe failures."""
        outcomes = []
        for url in self._manager_urls:
            outcome = self.probe(url, deadline)
            self._save(outcome, deadline)
            outcomes.append(outcome)
        return CycleResult(outcomes=tuple(outcomes))

    def probe(self, manager_url: str, deadline: Deadline) -> ProbeOutcome:
        """Probe a single manager and classify the result."""
        outcome = self._classify(manager_url, deadline)
        if outcome.ok:
            self._log.info("manager check: success url=%s", manager_url)
        else:
            self._log.error(
                "manager check failed: url=%s http_status=%s error=%s",
                manager_url, outcome.http_status, outcome.error_message,
            )
        return outcome

    def _classify(self, manager_url: str, deadline: Deadline) -> ProbeOutcome:
        try:
            request = self._client.build_request(
                "GET",
                f"{manager_url.rstrip('/')}/health",
                timeout=deadline.cap(self._timeout),
            )
        except httpx.InvalidURL as e:
            return ProbeOutcome.failure(manager_url, f"failed to create request: {e}")

        if deadline.expired:
            return ProbeOutcome.failure(manager_url, "HTTP request failed: deadline exceeded")

        try:
            response = self._client.send(request, stream=True)
        except httpx.RequestError as e:
            return ProbeOutcome.failure(manager_url, f"HTTP request failed: {_describe(e)}")

        try:
            code = response.status_code
            if code != 200:
                return ProbeOutcome.failure(
                    manager_url, f"unexpected HTTP status: {code}", http_status=code,
                )

            try:
                body = response.read()
            except httpx.HTTPError as e:
                return ProbeOutcome.failure(
                    manager_url, f"failed to read response body: {_describe(e)}", http_status=code,
                )

            try:
                health = ManagerHealthBody.model_validate_json(body)
            except ValidationError as e:
                return ProbeOutcome.failure(
                    manager_url, f"failed to parse response: {_first_error(e)}", http_status=code,
                )

            if health.status != "success":
                return ProbeOutcome.failure(
                    manager_url, f"manager returned status: {health.status}", http_status=code,
                )

            return ProbeOutcome.success(manager_url)
        finally:
            response.close()

    def _save(self, outcome: ProbeOutcome, deadline: Deadline) -> None:
        record = ManagerCheckRecord.from_outcome(outcome, checked_at=datetime.now(timezone.utc))
        try:
            self._store.save_manager_check(record, deadline)
        except Exception:
            self._log.exception("failed to save manager check result: url=%s", outcome.manager_url)


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]
