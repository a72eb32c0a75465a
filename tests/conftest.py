"""Shared test fixtures for the Availarr test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from availarr.domain.entities.availability import ContentRef, StreamRecord
from availarr.infrastructure.circuit_breaker import ProviderHealthTracker

# ---------------------------------------------------------------------------
# Stream fixtures
# ---------------------------------------------------------------------------

UHD_WEB_DL_TITLE = (
    "Dune.Part.Two.2024.2160p.WEB-DL.DDP5.1.Atmos.DV.HDR.H.265-FLUX\n"
    "👤 120 💾 18.2 GB ⚙️ ThePirateBay"
)


@pytest.fixture()
def uhd_stream() -> StreamRecord:
    """A stream that passes every classification stage."""
    return StreamRecord(name="Torrentio\n4k DV | HDR", title=UHD_WEB_DL_TITLE)


@pytest.fixture()
def hd_stream() -> StreamRecord:
    """A clean 1080p release (rejected by the 4K gate)."""
    return StreamRecord(
        name="Torrentio\n1080p",
        title="Dune.Part.Two.2024.1080p.BluRay.DTS-HD.MA.5.1.x264-GROUP",
    )


@pytest.fixture()
def cam_stream() -> StreamRecord:
    """A 4K-tagged cam release."""
    return StreamRecord(
        name="Torrentio\n4k",
        title="Dune.Part.Two.2024.2160p.HDCAM.x264-NOGRP",
    )


# ---------------------------------------------------------------------------
# Provider doubles
# ---------------------------------------------------------------------------


class FakeProvider:
    """In-memory StreamProviderPort double that records its calls."""

    def __init__(
        self,
        name: str,
        priority: int,
        *,
        streams: list[StreamRecord] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        call_log: list[str] | None = None,
    ) -> None:
        self.name = name
        self.base_url = f"https://{name}.example"
        self.priority = priority
        self.streams = streams or []
        self.error = error
        self.delay = delay
        self.calls: list[tuple[Any, ...]] = []
        self.call_log = call_log

    async def _answer(self) -> list[StreamRecord]:
        if self.call_log is not None:
            self.call_log.append(self.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.streams)

    async def is_available(self) -> bool:
        return self.error is None

    async def get_movie_streams(self, external_id: str) -> list[StreamRecord]:
        self.calls.append(("movie", external_id))
        return await self._answer()

    async def get_tv_streams(
        self, external_id: str, season: int, episode: int
    ) -> list[StreamRecord]:
        self.calls.append(("series", external_id, season, episode))
        return await self._answer()


@pytest.fixture()
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture()
def tracker() -> ProviderHealthTracker:
    """Isolated health tracker with default thresholds."""
    return ProviderHealthTracker(failure_threshold=3, cooldown_seconds=300.0)


# ---------------------------------------------------------------------------
# Content fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_ref() -> Callable[..., ContentRef]:
    def _make(
        content_id: int,
        media_type: str = "movie",
        external_id: str | None = None,
        **kwargs: Any,
    ) -> ContentRef:
        return ContentRef(
            content_id=content_id,
            media_type=media_type,  # type: ignore[arg-type]
            title=kwargs.pop("title", f"Title {content_id}"),
            external_id=external_id,
            **kwargs,
        )

    return _make
