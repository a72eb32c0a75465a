from __future__ import annotations

from .load import load_config
from .schema import (
    AppConfig,
    AvailabilityConfig,
    CacheConfig,
    EnvOverrides,
    ProviderDescriptor,
)

__all__ = [
    "AppConfig",
    "AvailabilityConfig",
    "CacheConfig",
    "EnvOverrides",
    "ProviderDescriptor",
    "load_config",
]
