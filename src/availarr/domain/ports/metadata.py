"""Port for metadata (TMDB) lookups used around availability checks."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from availarr.domain.entities.availability import ContentRef, ContentType


@runtime_checkable
class MetadataClientPort(Protocol):
    """Async interface for metadata lookups.

    All methods return ``None`` / empty lists on upstream failures.
    """

    async def get_external_id(
        self, content_id: int, media_type: ContentType
    ) -> str | None:
        """Return the IMDb-style external id for a metadata id."""
        ...

    async def discover_recent_movies(
        self, *, days: int, page: int = 1
    ) -> list[ContentRef]:
        """Popular movies released within the last *days* days."""
        ...

    async def discover_recent_series(
        self, *, days: int, page: int = 1
    ) -> list[ContentRef]:
        """Popular series with an episode aired within the last *days* days."""
        ...

    async def get_latest_episode(self, ref: ContentRef) -> ContentRef | None:
        """Copy of *ref* pointing at the latest aired episode, or None."""
        ...
