"""Recently released feeds with cache-aside.

Recent popular titles from the metadata service, narrowed to the ones
available in acceptable quality.  Verified feeds are cached for a long
time; when nothing can be verified the raw candidates are served as a
short-lived ``metadata_fallback`` feed instead.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

import structlog

from availarr.domain.entities.availability import (
    AnnotatedItem,
    AvailabilityStatus,
    ContentRef,
    ContentType,
    ReleaseFeed,
)
from availarr.domain.ports.cache import CachePort
from availarr.domain.ports.metadata import MetadataClientPort

log = structlog.get_logger(__name__)

# Discovery pages fetched per feed (20 results each).
DISCOVER_PAGES = 2


class _FeedConfig(Protocol):
    """Configuration values consumed by JustReleasedUseCase."""

    target_count: int
    candidate_count: int
    recent_window_days: int
    recent_episode_days: int
    batch_timeout_seconds: float
    verified_ttl_seconds: int
    fallback_ttl_seconds: int


class _BatchChecker(Protocol):
    async def execute(
        self,
        items: Sequence[ContentRef],
        *,
        required_count: int,
        timeout_seconds: float,
    ) -> list[AnnotatedItem]: ...


_DiscoverFn = Callable[..., Awaitable[list[ContentRef]]]


def feed_cache_key(media_type: ContentType, days: int, count: int) -> str:
    return f"availarr:just-released:{media_type}:d{days}:n{count}"


class JustReleasedUseCase:
    """Build the recently released movie and series feeds."""

    def __init__(
        self,
        *,
        metadata: MetadataClientPort,
        batch: _BatchChecker,
        cache: CachePort,
        config: _FeedConfig,
    ) -> None:
        self._metadata = metadata
        self._batch = batch
        self._cache = cache
        self._config = config

    async def movies(self) -> ReleaseFeed:
        return await self._feed(
            "movie",
            self._config.recent_window_days,
            self._metadata.discover_recent_movies,
        )

    async def series(self) -> ReleaseFeed:
        return await self._feed(
            "series",
            self._config.recent_episode_days,
            self._metadata.discover_recent_series,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _feed(
        self,
        media_type: ContentType,
        days: int,
        discover: _DiscoverFn,
    ) -> ReleaseFeed:
        cfg = self._config
        key = feed_cache_key(media_type, days, cfg.target_count)

        cached = await self._cache_get(key)
        if cached and cached.get("items"):
            log.debug("just_released_cache_hit", key=key)
            return ReleaseFeed.from_dict(cached)

        candidates = await self._candidates(discover, days)
        if media_type == "series":
            candidates = await self._with_latest_episodes(candidates)
        log.info(
            "just_released_candidates",
            media_type=media_type,
            count=len(candidates),
        )

        if not candidates:
            return ReleaseFeed(
                items=[], source="metadata_fallback", generated_at=time.time()
            )

        verified = await self._batch.execute(
            candidates,
            required_count=cfg.target_count,
            timeout_seconds=cfg.batch_timeout_seconds,
        )

        if verified:
            # Batch results arrive in completion order; restore popularity order.
            rank = {ref.content_id: i for i, ref in enumerate(candidates)}
            verified.sort(key=lambda item: rank.get(item.ref.content_id, len(rank)))
            feed = ReleaseFeed(
                items=verified, source="verified", generated_at=time.time()
            )
            ttl = cfg.verified_ttl_seconds
        else:
            log.warning("just_released_fallback", media_type=media_type)
            feed = ReleaseFeed(
                items=[
                    AnnotatedItem(ref, AvailabilityStatus.unavailable())
                    for ref in candidates[: cfg.target_count]
                ],
                source="metadata_fallback",
                generated_at=time.time(),
            )
            ttl = cfg.fallback_ttl_seconds

        await self._cache_set(key, feed.to_dict(), ttl)
        return feed

    async def _candidates(self, discover: _DiscoverFn, days: int) -> list[ContentRef]:
        pages = await asyncio.gather(
            *(discover(days=days, page=p) for p in range(1, DISCOVER_PAGES + 1))
        )
        seen: set[int] = set()
        unique: list[ContentRef] = []
        for page in pages:
            for ref in page:
                if ref.content_id in seen:
                    continue
                seen.add(ref.content_id)
                unique.append(ref)
        return unique[: self._config.candidate_count]

    async def _with_latest_episodes(
        self, candidates: list[ContentRef]
    ) -> list[ContentRef]:
        latest = await asyncio.gather(
            *(self._metadata.get_latest_episode(ref) for ref in candidates)
        )
        return [episode or ref for ref, episode in zip(candidates, latest)]

    async def _cache_get(self, key: str) -> dict[str, Any] | None:
        try:
            return await self._cache.get(key)
        except Exception:  # noqa: BLE001
            log.warning("just_released_cache_read_failed", key=key, exc_info=True)
            return None

    async def _cache_set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        try:
            await self._cache.set(key, value, ttl=ttl)
        except Exception:  # noqa: BLE001
            log.warning("just_released_cache_write_failed", key=key, exc_info=True)
