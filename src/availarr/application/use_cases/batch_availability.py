"""Batch availability check.

Resolve many content items concurrently, keep the available ones and stop
as soon as enough were found or the wall-clock budget is spent.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Protocol

import structlog

from availarr.domain.entities.availability import (
    AnnotatedItem,
    AvailabilityStatus,
    ContentRef,
)
from availarr.domain.ports.metadata import MetadataClientPort

log = structlog.get_logger(__name__)


class _Resolver(Protocol):
    """Resolves the availability of one movie or episode."""

    async def resolve_movie(self, external_id: str) -> AvailabilityStatus: ...

    async def resolve_tv(
        self, external_id: str, season: int = 1, episode: int = 1
    ) -> AvailabilityStatus: ...


class _MetricsRecorder(Protocol):
    """Records batch metrics."""

    def record_batch(
        self,
        total: int,
        available: int,
        duration_ns: int,
        *,
        timed_out: bool,
    ) -> None: ...


class BatchAvailabilityUseCase:
    """Annotate items with availability, returning only the available ones.

    Items are checked with bounded concurrency and appear in completion
    order.  On timeout the items found so far are returned; an empty list
    is a normal outcome.
    """

    def __init__(
        self,
        *,
        availability: _Resolver,
        metadata: MetadataClientPort | None = None,
        concurrency: int = 5,
        metrics: _MetricsRecorder | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._availability = availability
        self._metadata = metadata
        self._concurrency = concurrency
        self._metrics = metrics

    async def execute(
        self,
        items: Sequence[ContentRef],
        *,
        required_count: int,
        timeout_seconds: float,
    ) -> list[AnnotatedItem]:
        if required_count < 1:
            raise ValueError("required_count must be >= 1")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if not items:
            return []

        t0 = time.perf_counter_ns()
        collected: list[AnnotatedItem] = []
        worker = asyncio.create_task(self._collect(items, required_count, collected))

        done, _ = await asyncio.wait({worker}, timeout=timeout_seconds)
        timed_out = worker not in done
        if timed_out:
            # Stragglers may still finish in the background; their results
            # are dropped.
            worker.cancel()
            log.warning(
                "batch_availability_timeout",
                timeout=timeout_seconds,
                items=len(items),
                found=len(collected),
            )
        else:
            worker.result()

        result = collected[:required_count]
        if self._metrics is not None:
            self._metrics.record_batch(
                len(items),
                len(result),
                time.perf_counter_ns() - t0,
                timed_out=timed_out,
            )
        log.info(
            "batch_availability_done",
            items=len(items),
            available=len(result),
            required=required_count,
            timed_out=timed_out,
        )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _collect(
        self,
        items: Sequence[ContentRef],
        required_count: int,
        collected: list[AnnotatedItem],
    ) -> None:
        """Append available items to *collected* as they complete."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _check(ref: ContentRef) -> AnnotatedItem:
            async with semaphore:
                return await self._annotate(ref)

        tasks = [asyncio.create_task(_check(ref)) for ref in items]
        try:
            for next_done in asyncio.as_completed(tasks):
                item = await next_done
                if not item.availability.available:
                    continue
                collected.append(item)
                if len(collected) >= required_count:
                    break
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _annotate(self, ref: ContentRef) -> AnnotatedItem:
        """Resolve one item. Failures yield an unavailable item."""
        try:
            external_id = ref.external_id
            if not external_id and self._metadata is not None:
                external_id = await self._metadata.get_external_id(
                    ref.content_id, ref.media_type
                )
            if not external_id:
                log.debug("batch_item_no_external_id", content_id=ref.content_id)
                return AnnotatedItem(ref, AvailabilityStatus.unavailable())

            if ref.media_type == "series":
                season = ref.season if ref.season is not None else 1
                episode = ref.episode if ref.episode is not None else 1
                status = await self._availability.resolve_tv(
                    external_id, season, episode
                )
            else:
                status = await self._availability.resolve_movie(external_id)
            return AnnotatedItem(ref, status, external_id=external_id)
        except Exception:
            log.warning(
                "batch_item_failed",
                content_id=ref.content_id,
                media_type=ref.media_type,
                exc_info=True,
            )
            return AnnotatedItem(ref, AvailabilityStatus.unavailable())
