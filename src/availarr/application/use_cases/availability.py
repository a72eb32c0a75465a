"""Single-item availability resolution.

external id -> provider fallback chain -> stream classifier
-> AvailabilityStatus.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol

import structlog

from availarr.domain.entities.availability import (
    AvailabilityStatus,
    FallbackResult,
    StreamRecord,
)

log = structlog.get_logger(__name__)


class _StreamSource(Protocol):
    """Fetches raw streams with provider fallback."""

    async def fetch_movie_streams(self, external_id: str) -> FallbackResult: ...

    async def fetch_tv_streams(
        self, external_id: str, season: int, episode: int
    ) -> FallbackResult: ...


# Pure classification function, see infrastructure.stremio.stream_classifier.
_ClassifyFn = Callable[[Iterable[StreamRecord], str], AvailabilityStatus]


class AvailabilityUseCase:
    """Decide whether a movie or episode is available in acceptable quality."""

    def __init__(self, *, streams: _StreamSource, classify_fn: _ClassifyFn) -> None:
        self._streams = streams
        self._classify = classify_fn

    async def resolve_movie(self, external_id: str) -> AvailabilityStatus:
        result = await self._streams.fetch_movie_streams(external_id)
        return self._verdict(result, target=external_id)

    async def resolve_tv(
        self, external_id: str, season: int = 1, episode: int = 1
    ) -> AvailabilityStatus:
        result = await self._streams.fetch_tv_streams(external_id, season, episode)
        return self._verdict(result, target=f"{external_id}:{season}:{episode}")

    def _verdict(self, result: FallbackResult, *, target: str) -> AvailabilityStatus:
        if result.exhausted:
            log.debug("availability_exhausted", target=target)
            return AvailabilityStatus.unavailable()

        status = self._classify(result.streams, result.provider)
        log.debug(
            "availability_resolved",
            target=target,
            provider=result.provider,
            streams=len(result.streams),
            available=status.available,
            best_quality=status.best_quality.label if status.best_quality else None,
        )
        return status
