"""Recently released, availability-verified feeds."""

from __future__ import annotations

from typing import cast

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from availarr.interfaces.app_state import AppState

router = APIRouter(prefix="/just-released", tags=["just-released"])


def _feed_unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "metadata_not_configured", "items": []},
    )


@router.get("/movies")
async def just_released_movies(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    uc = getattr(state, "just_released_uc", None)
    if uc is None:
        return _feed_unavailable()
    feed = await uc.movies()
    return JSONResponse(content=feed.to_dict(include_provider=False))


@router.get("/series")
async def just_released_series(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    uc = getattr(state, "just_released_uc", None)
    if uc is None:
        return _feed_unavailable()
    feed = await uc.series()
    return JSONResponse(content=feed.to_dict(include_provider=False))
