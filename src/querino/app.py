"""Web app entry point: FastAPI app factory and lifespan wiring."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from querino.config import Settings, load_settings
from querino.database.client import CosmosClient
from querino.errors import QuerinoError
from querino.logging import configure_logging
from querino.routes import documents_router, versions_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_SERVER_ERROR = 500


async def init_database(settings: Settings) -> CosmosClient:
    cosmos = CosmosClient(settings.cosmos)
    await cosmos.initialize()
    if settings.cosmos.create_containers:
        await cosmos.ensure_containers()
    return cosmos


async def handle_querino_error(request: Request, exc: QuerinoError) -> JSONResponse:
    """Render application errors with their status code and error envelope."""
    if exc.status_code >= _SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    configure_logging(settings.app.log_level)
    logger.info("Starting querino (env=%s)", settings.app.env)

    cosmos = await init_database(settings)
    app.state.settings = settings
    app.state.cosmos = cosmos
    try:
        yield
    finally:
        await cosmos.close()
        logger.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title="Querino", lifespan=lifespan)
    app.add_exception_handler(QuerinoError, handle_querino_error)
    app.include_router(documents_router)
    app.include_router(versions_router)
    return app
