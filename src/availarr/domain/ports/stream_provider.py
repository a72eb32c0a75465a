"""Port for upstream stream indexing services."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from availarr.domain.entities.availability import StreamRecord


@runtime_checkable
class StreamProviderPort(Protocol):
    """Capability set shared by every upstream indexing service.

    Fetch operations raise ``ProviderError`` subclasses on non-2xx
    responses, timeouts and malformed bodies.  An empty list is a valid
    "nothing found" answer, not an error.
    """

    name: str
    base_url: str
    priority: int

    async def is_available(self) -> bool:
        """Lightweight liveness probe. Never raises."""
        ...

    async def get_movie_streams(self, external_id: str) -> list[StreamRecord]:
        """Fetch candidate streams for a movie."""
        ...

    async def get_tv_streams(
        self, external_id: str, season: int, episode: int
    ) -> list[StreamRecord]:
        """Fetch candidate streams for one episode of a series."""
        ...
