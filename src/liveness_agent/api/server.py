"""FastAPI application for the liveness agent."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from liveness_agent import __version__
from liveness_agent.api.routes import router
from liveness_agent.config import AgentSettings, load_settings
from liveness_agent.health.prober import ManagerProber
from liveness_agent.health.recorder import HealthRecorder
from liveness_agent.storage.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


def create_app(settings: AgentSettings | None = None) -> FastAPI:
    """Create the agent app. Shared resources are built in the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = settings or load_settings()
        app.state.settings = cfg

        store = SQLiteStore(cfg.database_path)
        store.ping()
        logger.info("Connected to database %s", store.db_path)

        client = httpx.Client(timeout=float(cfg.manager_timeout), follow_redirects=True)
        app.state.http_client = client
        app.state.store = store
        app.state.health_recorder = HealthRecorder(store)
        app.state.manager_prober = ManagerProber(
            client=client,
            store=store,
            manager_urls=cfg.manager_urls,
            timeout=float(cfg.manager_timeout),
        )
        logger.info(
            "Agent ready: service=%s env=%s managers=%d",
            cfg.service_name, cfg.service_env, len(cfg.manager_urls),
        )

        yield

        client.close()
        logger.info("Agent stopped")

    app = FastAPI(
        title="Liveness Agent",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app
