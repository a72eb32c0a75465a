"""Tests for /api/v1/providers/health."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import FastAPI
from fastapi.testclient import TestClient

from availarr.application.use_cases.provider_fallback import ProviderFallbackChain
from availarr.infrastructure.circuit_breaker import ProviderHealthTracker
from availarr.interfaces.api.providers.router import router
from availarr.interfaces.app_state import AppState


def _build_app(
    make_provider: Callable | None = None,
) -> tuple[TestClient, ProviderHealthTracker]:
    app = FastAPI()
    app.state = AppState()
    tracker = ProviderHealthTracker(failure_threshold=2)
    if make_provider is not None:
        app.state.health_tracker = tracker
        app.state.fallback_chain = ProviderFallbackChain(
            providers=[
                make_provider("comet", 2, error=RuntimeError("down")),
                make_provider("torrentio", 1),
            ],
            health=tracker,
        )
    app.include_router(router, prefix="/api/v1")
    return TestClient(app), tracker


class TestProvidersHealth:
    def test_reports_each_provider(self, make_provider: Callable) -> None:
        client, tracker = _build_app(make_provider)
        tracker.record_failure("comet")
        tracker.record_failure("comet")

        resp = client.get("/api/v1/providers/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["healthy"] == 1
        assert data["providers"] == [
            {
                "name": "torrentio",
                "base_url": "https://torrentio.example",
                "priority": 1,
                "available": True,
                "failures": 0,
                "skipped": False,
            },
            {
                "name": "comet",
                "base_url": "https://comet.example",
                "priority": 2,
                "available": False,
                "failures": 2,
                "skipped": True,
            },
        ]

    def test_not_ready(self) -> None:
        client, _ = _build_app()
        resp = client.get("/api/v1/providers/health")
        assert resp.status_code == 503
