"""FastAPI application entrypoint.

Run with ``uvicorn stock_puzzle.main:get_app --factory``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from fastapi import FastAPI

from stock_puzzle.api.routes import api_router
from stock_puzzle.config import get_settings
from stock_puzzle.context import AppContext
from stock_puzzle.core.logging import setup_logging
from stock_puzzle.core.telemetry import setup_telemetry


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the API around an explicitly constructed context.

    A context passed in stays owned by the caller; otherwise one is built from
    the environment and closed on shutdown.
    """

    owned = context is None
    context = context or AppContext.build(get_settings())
    settings = context.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await context.start()
        try:
            yield
        finally:
            if owned:
                await context.aclose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.context = context
    setup_telemetry(settings, app=app, engine=context.database.engine)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "timezone": settings.puzzle_timezone,
        }

    app.include_router(api_router)
    return app


def get_app() -> FastAPI:
    setup_logging()
    return create_app()


__all__ = ["create_app", "get_app"]
