"""Tests for build_providers (descriptor -> provider list)."""

from __future__ import annotations

import httpx
import pytest

from availarr.infrastructure.config.schema import (
    AvailabilityConfig,
    ProviderDescriptor,
)
from availarr.infrastructure.providers import StremioAddonProvider, build_providers


def _d(name: str, priority: int, *, enabled: bool = True) -> ProviderDescriptor:
    return ProviderDescriptor(
        name=name,
        base_url=f"https://{name}.example",
        priority=priority,
        enabled=enabled,
    )


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


def _build(
    descriptors: list[ProviderDescriptor],
    http_client: httpx.AsyncClient,
    availability: AvailabilityConfig | None = None,
) -> list[StremioAddonProvider]:
    return build_providers(
        descriptors,
        http_client=http_client,
        availability=availability or AvailabilityConfig(),
        user_agent="Availarr-Test/1.0",
    )


class TestBuildProviders:
    def test_sorted_by_priority(self, http_client: httpx.AsyncClient) -> None:
        providers = _build(
            [_d("comet", 2), _d("knightcrawler", 5), _d("torrentio", 1)],
            http_client,
        )
        assert [p.name for p in providers] == ["torrentio", "comet", "knightcrawler"]

    def test_equal_priority_keeps_config_order(
        self, http_client: httpx.AsyncClient
    ) -> None:
        providers = _build([_d("b", 1), _d("a", 1), _d("c", 0)], http_client)
        assert [p.name for p in providers] == ["c", "b", "a"]

    def test_disabled_skipped(self, http_client: httpx.AsyncClient) -> None:
        providers = _build(
            [_d("torrentio", 1), _d("comet", 2, enabled=False)],
            http_client,
        )
        assert [p.name for p in providers] == ["torrentio"]

    def test_duplicate_names_rejected(self, http_client: httpx.AsyncClient) -> None:
        with pytest.raises(ValueError, match="duplicate provider name"):
            _build([_d("torrentio", 1), _d("torrentio", 2)], http_client)

    def test_empty(self, http_client: httpx.AsyncClient) -> None:
        assert _build([], http_client) == []

    def test_timeouts_from_config(self, http_client: httpx.AsyncClient) -> None:
        availability = AvailabilityConfig(
            request_timeout_seconds=3.0, probe_timeout_seconds=1.5
        )
        (provider,) = _build([_d("torrentio", 1)], http_client, availability)
        assert provider._request_timeout == 3.0
        assert provider._probe_timeout == 1.5


class TestProviderDescriptor:
    def test_base_url_normalized(self) -> None:
        d = ProviderDescriptor(
            name=" comet ", base_url="https://comet.example/", priority=2
        )
        assert d.name == "comet"
        assert d.base_url == "https://comet.example"
        assert d.enabled is True

    def test_non_http_url_rejected(self) -> None:
        with pytest.raises(ValueError, match="http"):
            ProviderDescriptor(name="x", base_url="ftp://x.example", priority=1)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            ProviderDescriptor(name="  ", base_url="https://x.example", priority=1)
