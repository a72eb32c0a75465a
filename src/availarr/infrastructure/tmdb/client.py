"""TMDB API client — async httpx implementation with caching."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Any

import httpx
import structlog

from availarr.domain.entities.availability import ContentRef, ContentType
from availarr.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_BASE_URL = "https://api.themoviedb.org/3"

# Cache TTLs (seconds)
_TTL_EXTERNAL_IDS = 86_400  # 24 hours
_TTL_DISCOVER = 21_600  # 6 hours
_TTL_DETAILS = 3_600  # 1 hour

# Discovery quality floor
_MOVIE_MIN_VOTES = 50
_MOVIE_MIN_RATING = 5.5
_SERIES_MIN_VOTES = 20

_TMDB_PATH: dict[ContentType, str] = {"movie": "movie", "series": "tv"}


def _date_window(days: int) -> tuple[str, str]:
    """ISO dates for ``[today - days, today]``."""
    today = date.today()
    return (today - timedelta(days=days)).isoformat(), today.isoformat()


class HttpxTmdbClient:
    """Async TMDB client using httpx + CachePort.

    Implements ``MetadataClientPort`` from domain.ports.metadata.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: CachePort,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _params(self, **extra: Any) -> dict[str, Any]:
        """Build query params with api_key and English locale."""
        return {"api_key": self._api_key, "language": "en-US", **extra}

    async def _get(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{_BASE_URL}{path}"
        try:
            resp = await self._http.get(url, params=self._params(**(params or {})))
            if resp.status_code == 401:
                log.error("tmdb_api_key_invalid", status=401)
                return None
            if resp.status_code == 404:
                log.debug("tmdb_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError:
            log.warning("tmdb_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("tmdb_network_error", path=path, exc_info=True)
            return None

    @staticmethod
    def _movie_to_ref(movie: dict[str, Any]) -> ContentRef:
        return ContentRef(
            content_id=int(movie["id"]),
            media_type="movie",
            title=movie.get("title") or movie.get("original_title") or "",
            release_date=movie.get("release_date") or None,
        )

    @staticmethod
    def _tv_to_ref(show: dict[str, Any]) -> ContentRef:
        return ContentRef(
            content_id=int(show["id"]),
            media_type="series",
            title=show.get("name") or show.get("original_name") or "",
            release_date=show.get("first_air_date") or None,
        )

    async def _discover(
        self,
        kind: str,
        cache_key: str,
        params: dict[str, Any],
    ) -> list[dict[str, Any]]:
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get(f"/discover/{kind}", params)
        if data is None:
            return []

        results = [r for r in data.get("results", []) if r.get("id")]
        if results:
            await self._cache.set(cache_key, results, ttl=_TTL_DISCOVER)
        return results

    # ------------------------------------------------------------------
    # Public API (MetadataClientPort)
    # ------------------------------------------------------------------

    async def get_external_id(
        self, content_id: int, media_type: ContentType
    ) -> str | None:
        """Lookup the IMDb id of a TMDB movie or show. None if unknown."""
        cache_key = f"tmdb:external_ids:{media_type}:{content_id}"
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get(f"/{_TMDB_PATH[media_type]}/{content_id}/external_ids")
        if data is None:
            return None

        imdb_id = data.get("imdb_id") or None
        if imdb_id:
            await self._cache.set(cache_key, imdb_id, ttl=_TTL_EXTERNAL_IDS)
        return imdb_id

    async def discover_recent_movies(
        self, *, days: int, page: int = 1
    ) -> list[ContentRef]:
        """Popular, reasonably rated movies released in the last *days* days."""
        start, end = _date_window(days)
        results = await self._discover(
            "movie",
            f"tmdb:discover:movie:{start}:{end}:p{page}",
            {
                "page": page,
                "sort_by": "popularity.desc",
                "primary_release_date.gte": start,
                "primary_release_date.lte": end,
                "vote_count.gte": _MOVIE_MIN_VOTES,
                "vote_average.gte": _MOVIE_MIN_RATING,
            },
        )
        return [self._movie_to_ref(m) for m in results]

    async def discover_recent_series(
        self, *, days: int, page: int = 1
    ) -> list[ContentRef]:
        """Popular shows with an episode aired in the last *days* days."""
        start, end = _date_window(days)
        results = await self._discover(
            "tv",
            f"tmdb:discover:tv:{start}:{end}:p{page}",
            {
                "page": page,
                "sort_by": "popularity.desc",
                "air_date.gte": start,
                "air_date.lte": end,
                "vote_count.gte": _SERIES_MIN_VOTES,
            },
        )
        return [self._tv_to_ref(s) for s in results]

    async def get_latest_episode(self, ref: ContentRef) -> ContentRef | None:
        """Point *ref* at the show's last aired episode. None if unknown."""
        cache_key = f"tmdb:last_episode:{ref.content_id}"
        episode = await self._cache.get(cache_key)
        if episode is None:
            data = await self._get(f"/tv/{ref.content_id}")
            if data is None:
                return None
            episode = data.get("last_episode_to_air")
            if not episode:
                log.debug("tmdb_no_aired_episode", content_id=ref.content_id)
                return None
            episode = {
                "season": episode.get("season_number"),
                "episode": episode.get("episode_number"),
                "air_date": episode.get("air_date"),
            }
            await self._cache.set(cache_key, episode, ttl=_TTL_DETAILS)

        if episode.get("season") is None or not episode.get("episode"):
            return None
        return replace(
            ref,
            season=int(episode["season"]),
            episode=int(episode["episode"]),
            release_date=episode.get("air_date") or ref.release_date,
        )
