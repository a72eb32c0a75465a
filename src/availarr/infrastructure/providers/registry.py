"""Build the ordered provider list from configuration."""

from __future__ import annotations

from collections.abc import Iterable

import httpx
import structlog

from availarr.infrastructure.config.schema import (
    AvailabilityConfig,
    ProviderDescriptor,
)
from availarr.infrastructure.providers.addon import StremioAddonProvider

log = structlog.get_logger(__name__)


def build_providers(
    descriptors: Iterable[ProviderDescriptor],
    *,
    http_client: httpx.AsyncClient,
    availability: AvailabilityConfig,
    user_agent: str,
) -> list[StremioAddonProvider]:
    """One provider per enabled descriptor, ascending priority.

    Raises:
        ValueError: On duplicate provider names.
    """
    providers: list[StremioAddonProvider] = []
    seen: set[str] = set()

    for descriptor in descriptors:
        if descriptor.name in seen:
            raise ValueError(f"duplicate provider name: {descriptor.name!r}")
        seen.add(descriptor.name)
        if not descriptor.enabled:
            log.info("provider_disabled", provider=descriptor.name)
            continue
        providers.append(
            StremioAddonProvider(
                name=descriptor.name,
                base_url=descriptor.base_url,
                priority=descriptor.priority,
                http_client=http_client,
                user_agent=user_agent,
                request_timeout=availability.request_timeout_seconds,
                probe_timeout=availability.probe_timeout_seconds,
            )
        )

    # sorted() is stable: equal priorities keep configuration order.
    providers.sort(key=lambda p: p.priority)
    log.info(
        "providers_registered",
        count=len(providers),
        order=[p.name for p in providers],
    )
    return providers
