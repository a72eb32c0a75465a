"""Availability endpoints: single movie, single episode, batch."""

from __future__ import annotations

import re
from typing import Literal, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from availarr.domain.entities.availability import ContentRef
from availarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])

_IMDB_ID_RE = re.compile(r"^tt\d{5,10}$")

# Upper bound for one batch request.
MAX_BATCH_ITEMS = 100


class BatchItem(BaseModel):
    content_id: int
    media_type: Literal["movie", "series"]
    title: str = ""
    external_id: str | None = None
    season: int | None = Field(default=None, ge=0)
    episode: int | None = Field(default=None, ge=1)
    release_date: str | None = None

    def to_ref(self) -> ContentRef:
        return ContentRef(
            content_id=self.content_id,
            media_type=self.media_type,
            title=self.title,
            external_id=self.external_id,
            season=self.season,
            episode=self.episode,
            release_date=self.release_date,
        )


class BatchRequest(BaseModel):
    items: list[BatchItem] = Field(max_length=MAX_BATCH_ITEMS)
    required_count: int = Field(default=20, ge=1)
    timeout_seconds: float | None = Field(default=None, gt=0, le=60)


def _is_imdb_id(value: str) -> bool:
    return bool(_IMDB_ID_RE.match(value))


def _parse_series_id(raw_id: str) -> tuple[str, int, int] | None:
    """Parse ``tt123:season:episode``; a bare id means S1E1."""
    parts = raw_id.split(":")
    if not _is_imdb_id(parts[0]):
        return None
    if len(parts) == 1:
        return parts[0], 1, 1
    if len(parts) != 3:
        return None
    try:
        season = int(parts[1])
        episode = int(parts[2])
    except ValueError:
        return None
    if season < 0 or episode < 1:
        return None
    return parts[0], season, episode


def _not_configured() -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": "availability_not_ready"})


def _invalid_id(raw_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_id", "id": raw_id},
    )


@router.get("/movie/{imdb_id}")
async def movie_availability(request: Request, imdb_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    uc = getattr(state, "availability_uc", None)
    if uc is None:
        return _not_configured()
    if not _is_imdb_id(imdb_id):
        return _invalid_id(imdb_id)

    status = await uc.resolve_movie(imdb_id)
    return JSONResponse(content={"imdb_id": imdb_id, "availability": status.to_dict()})


@router.get("/series/{series_id}")
async def series_availability(request: Request, series_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    uc = getattr(state, "availability_uc", None)
    if uc is None:
        return _not_configured()
    parsed = _parse_series_id(series_id)
    if parsed is None:
        return _invalid_id(series_id)

    imdb_id, season, episode = parsed
    status = await uc.resolve_tv(imdb_id, season, episode)
    return JSONResponse(
        content={
            "imdb_id": imdb_id,
            "season": season,
            "episode": episode,
            "availability": status.to_dict(),
        }
    )


@router.post("/batch")
async def batch_availability(request: Request, body: BatchRequest) -> JSONResponse:
    """Return only the available items, at most ``required_count``."""
    state = cast(AppState, request.app.state)
    uc = getattr(state, "batch_uc", None)
    if uc is None:
        return _not_configured()

    timeout = body.timeout_seconds
    if timeout is None:
        timeout = state.config.availability.batch_timeout_seconds

    items = await uc.execute(
        [item.to_ref() for item in body.items],
        required_count=body.required_count,
        timeout_seconds=timeout,
    )
    return JSONResponse(
        content={"items": [i.to_dict() for i in items], "count": len(items)}
    )
