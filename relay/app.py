from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from config import RelaySettings, get_settings
from relay.exceptions import RelayError
from relay.routes import health, home, webhook
from relay.services.forwarder import WebhookForwarder
from relay.services.metrics import MetricsRegistry
from worker import RelayWorker


def create_app(
    settings: Optional[RelaySettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay application; ``transport`` replaces the outbound network."""
    settings = settings or get_settings()
    forwarder = WebhookForwarder(timeout=settings.forward_timeout, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Relay ready (limit={}, ellipsis={}, gitmoji={})",
            settings.display_limit,
            settings.ellipsis_width,
            settings.resolve_gitmoji,
        )
        yield
        await forwarder.aclose()

    app = FastAPI(title="commit-relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.metrics = MetricsRegistry()
    app.state.worker = RelayWorker(settings, forwarder, app.state.metrics)
    app.state.start_time = datetime.now(timezone.utc)

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
        if exc.status_code < 500:
            app.state.metrics.inc("webhooks.rejected")
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    app.include_router(webhook.router)
    app.include_router(health.router)
    app.include_router(home.router)
    return app
