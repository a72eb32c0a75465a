"""Provider fallback chain.

Try providers one at a time in ascending priority; the first one that
returns at least one stream wins.  Failing providers are counted by the
health tracker and skipped while their circuit is open.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

import structlog

from availarr.domain.entities.availability import (
    NO_PROVIDER,
    FallbackResult,
    ProviderError,
    StreamRecord,
)
from availarr.domain.ports.stream_provider import StreamProviderPort

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocols — define what this use case needs from its dependencies.
# ---------------------------------------------------------------------------


class _HealthTracker(Protocol):
    """Per-provider circuit breaker."""

    def should_skip(self, name: str) -> bool: ...

    def record_failure(self, name: str) -> None: ...

    def record_success(self, name: str) -> None: ...


class _MetricsRecorder(Protocol):
    """Records provider fetch metrics."""

    def record_provider_fetch(
        self,
        name: str,
        duration_ns: int,
        stream_count: int,
        *,
        success: bool,
    ) -> None: ...

    def record_provider_skip(self, name: str) -> None: ...

    def record_provider_probe(self, name: str, *, ok: bool) -> None: ...


_FetchFn = Callable[[StreamProviderPort], Awaitable[list[StreamRecord]]]


class ProviderFallbackChain:
    """Query providers in priority order until one returns streams.

    Never raises for provider failures: exhaustion is reported as
    ``FallbackResult([], "none")``.
    """

    def __init__(
        self,
        *,
        providers: Sequence[StreamProviderPort],
        health: _HealthTracker,
        metrics: _MetricsRecorder | None = None,
    ) -> None:
        self._providers = sorted(providers, key=lambda p: p.priority)
        self._health = health
        self._metrics = metrics

    @property
    def providers(self) -> list[StreamProviderPort]:
        return list(self._providers)

    async def fetch_movie_streams(self, external_id: str) -> FallbackResult:
        return await self._run(
            lambda p: p.get_movie_streams(external_id),
            target=external_id,
        )

    async def fetch_tv_streams(
        self, external_id: str, season: int, episode: int
    ) -> FallbackResult:
        return await self._run(
            lambda p: p.get_tv_streams(external_id, season, episode),
            target=f"{external_id}:{season}:{episode}",
        )

    async def check_health(self) -> list[tuple[str, bool]]:
        """Probe every provider concurrently, in priority order."""

        async def _probe(provider: StreamProviderPort) -> bool:
            ok = await provider.is_available()
            if self._metrics is not None:
                self._metrics.record_provider_probe(provider.name, ok=ok)
            return ok

        results = await asyncio.gather(*(_probe(p) for p in self._providers))
        return [(p.name, ok) for p, ok in zip(self._providers, results)]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _run(self, fetch: _FetchFn, *, target: str) -> FallbackResult:
        errors: list[str] = []

        for provider in self._providers:
            name = provider.name
            if self._health.should_skip(name):
                log.info("provider_skipped", provider=name, target=target)
                if self._metrics is not None:
                    self._metrics.record_provider_skip(name)
                continue

            t0 = time.perf_counter_ns()
            streams: list[StreamRecord] = []
            success = False
            try:
                streams = await fetch(provider)
                success = True
            except ProviderError as exc:
                self._health.record_failure(name)
                errors.append(f"{name}: {exc}")
                log.warning(
                    "provider_fetch_failed",
                    provider=name,
                    target=target,
                    error=str(exc),
                )
            except Exception as exc:  # noqa: BLE001
                self._health.record_failure(name)
                errors.append(f"{name}: {exc}")
                log.warning(
                    "provider_fetch_error",
                    provider=name,
                    target=target,
                    exc_info=True,
                )
            finally:
                if self._metrics is not None:
                    self._metrics.record_provider_fetch(
                        name,
                        time.perf_counter_ns() - t0,
                        len(streams),
                        success=success,
                    )

            if streams:
                self._health.record_success(name)
                log.debug(
                    "provider_streams_found",
                    provider=name,
                    target=target,
                    count=len(streams),
                )
                return FallbackResult(streams=streams, provider=name)

            if success:
                log.debug("provider_no_streams", provider=name, target=target)

        log.warning("all_providers_failed", target=target, errors=errors)
        return FallbackResult(streams=[], provider=NO_PROVIDER)
