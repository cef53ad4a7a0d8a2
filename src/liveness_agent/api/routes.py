"""HTTP routes for the agent.

Endpoints:
  GET /health         — record the call, report agent status
  GET /check-manager  — probe every configured manager, report each outcome
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from liveness_agent.deadline import Deadline
from liveness_agent.storage.protocols import StorageError

logger = logging.getLogger(__name__)

HEALTH_DEADLINE_SECONDS = 5.0
CHECK_DEADLINE_SECONDS = 10.0

router = APIRouter()


@router.get("/health")
def health(request: Request) -> JSONResponse:
    """Record this call and report whether it was stored."""
    recorder = request.app.state.health_recorder
    try:
        recorder.record_health_call(Deadline.after(HEALTH_DEADLINE_SECONDS))
    except StorageError as e:
        logger.error("health handler: failed to save health call: %s", e)
        return JSONResponse(status_code=500, content={"status": "error"})
    except Exception:
        logger.exception("health handler: failed to record health call")
        return JSONResponse(status_code=500, content={"status": "error"})
    return JSONResponse(status_code=200, content={"status": "success"})


@router.get("/check-manager")
def check_manager(request: Request) -> JSONResponse:
    """Run one check cycle. Unhealthy managers still yield 200."""
    prober = request.app.state.manager_prober
    try:
        result = prober.run_cycle(Deadline.after(CHECK_DEADLINE_SECONDS))
    except Exception:
        logger.exception("check-manager handler: check cycle failed")
        return JSONResponse(status_code=500, content={"status": "error", "managers": []})
    return JSONResponse(status_code=200, content=result.to_dict())
