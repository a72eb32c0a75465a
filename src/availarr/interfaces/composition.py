"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from availarr.application.use_cases import (
    AvailabilityUseCase,
    BatchAvailabilityUseCase,
    JustReleasedUseCase,
    ProviderFallbackChain,
)
from availarr.infrastructure.cache import create_cache
from availarr.infrastructure.circuit_breaker import ProviderHealthTracker
from availarr.infrastructure.metrics import MetricsCollector
from availarr.infrastructure.providers import build_providers
from availarr.infrastructure.stremio.stream_classifier import classify_streams
from availarr.infrastructure.tmdb.client import HttpxTmdbClient
from availarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan hook: initialize and clean up all resources.

    Order matters:
        1. Metrics + cache (used by everything else)
        2. Shared HTTP client
        3. Health tracker + providers
        4. Fallback chain + availability use cases
        5. Metadata client + just-released feeds (only with a TMDB key)
    """
    state = cast(AppState, app.state)
    config = state.config
    avail = config.availability

    # 1) Metrics + cache
    state.metrics = MetricsCollector()

    cache = create_cache(config.cache)
    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", backend=config.cache.backend)

    if config.environment == "dev":
        await cache.clear()
        log.debug("cache_cleared", environment="dev")

    # 2) HTTP client (providers add their own per-request deadlines)
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(avail.request_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized")

    # 3) Providers
    state.health_tracker = ProviderHealthTracker(
        failure_threshold=avail.failure_threshold,
        cooldown_seconds=avail.health_check_interval_seconds,
    )
    state.providers = build_providers(
        config.providers,
        http_client=state.http_client,
        availability=avail,
        user_agent=config.http_user_agent,
    )

    # 4) Availability engine
    state.fallback_chain = ProviderFallbackChain(
        providers=state.providers,
        health=state.health_tracker,
        metrics=state.metrics,
    )
    state.availability_uc = AvailabilityUseCase(
        streams=state.fallback_chain,
        classify_fn=classify_streams,
    )

    # 5) Metadata + feeds
    if config.tmdb_api_key:
        state.metadata_client = HttpxTmdbClient(
            api_key=config.tmdb_api_key,
            http_client=state.http_client,
            cache=state.cache,
        )
        log.info("tmdb_client_initialized")
    else:
        state.metadata_client = None
        log.warning("tmdb_client_disabled", reason="no API key configured")

    state.batch_uc = BatchAvailabilityUseCase(
        availability=state.availability_uc,
        metadata=state.metadata_client,
        concurrency=avail.batch_concurrency,
        metrics=state.metrics,
    )

    if state.metadata_client is not None:
        state.just_released_uc = JustReleasedUseCase(
            metadata=state.metadata_client,
            batch=state.batch_uc,
            cache=state.cache,
            config=avail,
        )
    else:
        state.just_released_uc = None

    log.info("app_startup_complete", providers=[p.name for p in state.providers])

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
