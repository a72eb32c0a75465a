"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from availarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from availarr.application.use_cases import (
        AvailabilityUseCase,
        BatchAvailabilityUseCase,
        JustReleasedUseCase,
        ProviderFallbackChain,
    )
    from availarr.domain.ports import CachePort, MetadataClientPort
    from availarr.infrastructure.circuit_breaker import ProviderHealthTracker
    from availarr.infrastructure.metrics import MetricsCollector
    from availarr.infrastructure.providers import StremioAddonProvider


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient

    # Metrics (zero-impact in-memory counters)
    metrics: MetricsCollector

    # Providers, in priority order, and their shared health state
    providers: list[StremioAddonProvider]
    health_tracker: ProviderHealthTracker

    # Availability engine
    fallback_chain: ProviderFallbackChain
    availability_uc: AvailabilityUseCase
    batch_uc: BatchAvailabilityUseCase

    # Metadata (optional — requires TMDB API key)
    metadata_client: MetadataClientPort | None
    just_released_uc: JustReleasedUseCase | None
