from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_hub.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_hub.api.v1.routers import events, groups, health, presence, ws
from chat_hub.application.exceptions import (
    HubNotRunningError,
    ValidationError,
)
from chat_hub.config import settings
from chat_hub.infrastructure.ws.hub import Hub

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    hub = Hub()
    await hub.start()
    app.state.hub = hub

    yield

    await hub.stop()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Hub",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(presence.router)
    app.include_router(groups.router)
    app.include_router(events.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(HubNotRunningError)
    async def _hub_down(_req: Request, exc: HubNotRunningError) -> JSONResponse:
        logger.warning("Request rejected: %s", exc.detail)
        return JSONResponse(status_code=503, content={"detail": exc.detail})
