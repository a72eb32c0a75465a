"""Stremio addon provider - one upstream stream indexing service.

Every supported service speaks the same addon protocol::

    GET {base}/stream/movie/{imdb_id}.json
    GET {base}/stream/series/{imdb_id}:{season}:{episode}.json
    GET {base}/manifest.json

and answers with ``{"streams": [{"name": ..., "title": ..., ...}]}``.
Services differ only in name, base URL and priority, so one class
configured per descriptor covers all of them.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import structlog

from availarr.domain.entities.availability import (
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
    StreamRecord,
)

DEFAULT_REQUEST_TIMEOUT = 8.0
DEFAULT_PROBE_TIMEOUT = 5.0


def _to_record(entry: dict[str, Any]) -> StreamRecord:
    hints = entry.get("behaviorHints")
    filename = hints.get("filename") if isinstance(hints, dict) else None
    file_idx = entry.get("fileIdx")
    return StreamRecord(
        name=str(entry.get("name") or ""),
        title=str(entry.get("title") or entry.get("description") or ""),
        url=entry.get("url"),
        info_hash=entry.get("infoHash"),
        file_idx=file_idx if isinstance(file_idx, int) else None,
        filename=filename if isinstance(filename, str) else None,
    )


class StremioAddonProvider:
    """Client for one Stremio-addon-compatible indexing service.

    Implements ``StreamProviderPort``.  Fetch methods raise
    ``ProviderError`` subclasses; only ``is_available`` swallows errors.
    """

    def __init__(
        self,
        *,
        name: str,
        base_url: str,
        priority: int,
        http_client: httpx.AsyncClient,
        user_agent: str = "Availarr/0.1.0",
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.priority = priority
        self._http = http_client
        self._headers = {"Accept": "application/json", "User-Agent": user_agent}
        self._request_timeout = request_timeout
        self._probe_timeout = probe_timeout
        self._log = structlog.get_logger(__name__).bind(provider=name)

    def __repr__(self) -> str:
        return (
            f"StremioAddonProvider(name={self.name!r}, "
            f"base_url={self.base_url!r}, priority={self.priority})"
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _request(self, url: str, timeout: float) -> httpx.Response:
        """GET *url* bounded by a total deadline, mapping transport errors."""
        try:
            return await asyncio.wait_for(
                self._http.get(url, headers=self._headers, timeout=timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ProviderTimeoutError(
                self.name, f"{self.name} timed out after {timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                self.name, f"{self.name} request failed: {exc.__class__.__name__}"
            ) from exc

    async def _fetch_streams(self, url: str) -> list[StreamRecord]:
        resp = await self._request(url, self._request_timeout)
        if not resp.is_success:
            raise ProviderHTTPError(self.name, resp.status_code)

        try:
            data = resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ProviderResponseError(
                self.name, f"{self.name} returned invalid JSON"
            ) from exc
        if not isinstance(data, dict):
            raise ProviderResponseError(
                self.name,
                f"{self.name} returned {type(data).__name__}, expected object",
            )

        raw_streams = data.get("streams") or []
        if not isinstance(raw_streams, list):
            raise ProviderResponseError(
                self.name, f"{self.name} returned non-list 'streams'"
            )

        streams = [_to_record(s) for s in raw_streams if isinstance(s, dict)]
        self._log.debug("provider_streams_fetched", url=url, count=len(streams))
        return streams

    # ------------------------------------------------------------------
    # Public API (StreamProviderPort)
    # ------------------------------------------------------------------

    async def is_available(self) -> bool:
        """Probe ``manifest.json``; any failure means unavailable."""
        url = f"{self.base_url}/manifest.json"
        try:
            resp = await self._request(url, self._probe_timeout)
        except ProviderError as exc:
            self._log.info("provider_probe_failed", error=str(exc))
            return False
        if not resp.is_success:
            self._log.info("provider_probe_failed", status=resp.status_code)
            return False
        return True

    async def get_movie_streams(self, external_id: str) -> list[StreamRecord]:
        return await self._fetch_streams(
            f"{self.base_url}/stream/movie/{external_id}.json"
        )

    async def get_tv_streams(
        self, external_id: str, season: int, episode: int
    ) -> list[StreamRecord]:
        return await self._fetch_streams(
            f"{self.base_url}/stream/series/{external_id}:{season}:{episode}.json"
        )
