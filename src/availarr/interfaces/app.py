"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from availarr.infrastructure.config import AppConfig
from availarr.interfaces.app_state import AppState
from availarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app — configuration ONLY, NO resource initialization.

    Resources (HTTP client, cache, providers) are created in lifespan().
    """
    app = FastAPI(
        title="Availarr",
        description="High-quality stream availability across Stremio addons",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from availarr.interfaces.api.availability.router import (
        router as availability_router,
    )
    from availarr.interfaces.api.just_released.router import (
        router as just_released_router,
    )
    from availarr.interfaces.api.providers.router import router as providers_router
    from availarr.interfaces.api.stats.router import router as stats_router

    app.include_router(availability_router, prefix="/api/v1")
    app.include_router(just_released_router, prefix="/api/v1")
    app.include_router(providers_router, prefix="/api/v1")
    app.include_router(stats_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness probe — returns 200 as long as the process is running."""
        providers = getattr(app.state, "providers", None)
        return {"status": "ok", "providers": len(providers) if providers else 0}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
