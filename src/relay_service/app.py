from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from relay_service.api.v1.routers import health, pages, ws
from relay_service.config import detect_environment, settings
from relay_service.domain.value_objects.enums import Environment
from relay_service.infrastructure.net import lan_address
from relay_service.services.relay import Relay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup banner; stops every relay peer on shutdown."""
    environment: Environment = app.state.environment
    logger.info("Teleprompter relay starting (%s, one-to-one)", environment)
    if environment is Environment.LOCAL:
        logger.info("Local access: http://localhost:%d", settings.PORT)
        logger.info("LAN access: http://%s:%d", lan_address(), settings.PORT)
    else:
        logger.info("Server %s listening on port %d", settings.server_name, settings.PORT)

    yield

    logger.info("Teleprompter relay stopping (%s)", app.state.relay.describe())
    await app.state.relay.shutdown()


def create_app(environment: Environment | None = None) -> FastAPI:
    if environment is None:
        environment = detect_environment(settings)

    app = FastAPI(
        title="Teleprompter Relay",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.environment = environment
    app.state.relay = Relay(
        allow_unknown=settings.ALLOW_UNKNOWN_ROLE,
        notify_display_route_failure=settings.NOTIFY_DISPLAY_ROUTE_FAILURE,
        max_pending=settings.OUTBOX_LIMIT,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(pages.router)
    app.include_router(ws.router)

    _mount_static(app, environment)
    return app


def _mount_static(app: FastAPI, environment: Environment) -> None:
    if environment is not Environment.LOCAL or not settings.STATIC_DIR:
        return
    directory = Path(settings.STATIC_DIR)
    if not directory.is_dir():
        logger.info("Static directory %s not found; serving relay pages only", directory)
        return
    # Mounted last; the catch-all WebSocket route keeps upgrades away from StaticFiles.
    app.mount("/", StaticFiles(directory=directory), name="static")
