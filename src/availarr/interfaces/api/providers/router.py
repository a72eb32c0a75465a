"""Provider liveness and circuit-breaker state."""

from __future__ import annotations

from typing import Any, cast

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from availarr.interfaces.app_state import AppState

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("/health")
async def providers_health(request: Request) -> JSONResponse:
    """Probe every provider live and attach its tracked failure state."""
    state = cast(AppState, request.app.state)
    chain = getattr(state, "fallback_chain", None)
    if chain is None:
        return JSONResponse(status_code=503, content={"error": "providers_not_ready"})

    probes = await chain.check_health()
    tracked = state.health_tracker.snapshot()

    providers: list[dict[str, Any]] = []
    for provider, (name, available) in zip(chain.providers, probes):
        health = tracked.get(name, {})
        providers.append(
            {
                "name": name,
                "base_url": provider.base_url,
                "priority": provider.priority,
                "available": available,
                "failures": health.get("failures", 0),
                "skipped": health.get("skipped", False),
            }
        )

    return JSONResponse(
        content={
            "providers": providers,
            "healthy": sum(1 for p in providers if p["available"]),
        }
    )
