"""Integration test for the application factory and its lifespan."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from availarr.infrastructure.config import AppConfig
from availarr.infrastructure.config.schema import CacheConfig, ProviderDescriptor
from availarr.interfaces.app import create_app

pytestmark = pytest.mark.integration


def _config(tmp_path: Path, **overrides: object) -> AppConfig:
    return AppConfig(
        environment="test",
        cache=CacheConfig(directory=tmp_path / "cache"),
        providers=[
            ProviderDescriptor(
                name="torrentio", base_url="https://torrentio.example", priority=1
            ),
            ProviderDescriptor(
                name="comet",
                base_url="https://comet.example",
                priority=2,
                enabled=False,
            ),
        ],
        **overrides,
    )


class TestLifespan:
    def test_healthz_counts_enabled_providers(self, tmp_path: Path) -> None:
        with TestClient(create_app(_config(tmp_path))) as client:
            resp = client.get("/api/v1/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "providers": 1}

    def test_feeds_disabled_without_tmdb_key(self, tmp_path: Path) -> None:
        with TestClient(create_app(_config(tmp_path))) as client:
            resp = client.get("/api/v1/just-released/movies")
        assert resp.status_code == 503

    def test_resources_wired(self, tmp_path: Path) -> None:
        app = create_app(_config(tmp_path, tmdb_api_key="key"))
        with TestClient(app):
            state = app.state
            assert [p.name for p in state.providers] == ["torrentio"]
            assert state.metadata_client is not None
            assert state.just_released_uc is not None
            assert state.health_tracker.snapshot() == {}

    def test_invalid_id_through_full_app(self, tmp_path: Path) -> None:
        with TestClient(create_app(_config(tmp_path))) as client:
            resp = client.get("/api/v1/availability/movie/abc")
        assert resp.status_code == 400
