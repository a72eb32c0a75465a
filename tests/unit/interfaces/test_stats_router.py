"""Tests for /api/v1/stats/metrics endpoint."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from availarr.infrastructure.circuit_breaker import ProviderHealthTracker
from availarr.infrastructure.metrics import MetricsCollector
from availarr.interfaces.api.stats.router import router
from availarr.interfaces.app_state import AppState


def _build_app() -> TestClient:
    """Build a minimal FastAPI app with the stats router for testing."""
    app = FastAPI()
    app.state = AppState()
    app.state.metrics = MetricsCollector()
    app.state.metrics.record_provider_fetch("torrentio", 1_000_000, 3, success=True)
    app.state.health_tracker = ProviderHealthTracker()
    app.state.health_tracker.record_failure("comet")
    app.include_router(router, prefix="/api/v1")
    return TestClient(app)


class TestMetricsEndpoint:
    def test_returns_200(self) -> None:
        client = _build_app()
        resp = client.get("/api/v1/stats/metrics")
        assert resp.status_code == 200

    def test_contains_uptime(self) -> None:
        client = _build_app()
        data = client.get("/api/v1/stats/metrics").json()
        assert "uptime_seconds" in data

    def test_contains_providers(self) -> None:
        client = _build_app()
        data = client.get("/api/v1/stats/metrics").json()
        assert data["providers"]["torrentio"]["successes"] == 1

    def test_contains_batch(self) -> None:
        client = _build_app()
        data = client.get("/api/v1/stats/metrics").json()
        assert data["batch"]["runs"] == 0

    def test_contains_provider_health(self) -> None:
        client = _build_app()
        data = client.get("/api/v1/stats/metrics").json()
        assert data["provider_health"]["comet"]["failures"] == 1

    def test_empty_state(self) -> None:
        app = FastAPI()
        app.state = AppState()
        app.include_router(router, prefix="/api/v1")
        assert TestClient(app).get("/api/v1/stats/metrics").json() == {}
