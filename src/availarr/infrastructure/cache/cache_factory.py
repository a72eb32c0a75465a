"""Cache factory - builds the adapter selected in CacheConfig."""

from __future__ import annotations

from typing import Literal

import structlog

from availarr.domain.ports.cache import CachePort
from availarr.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from availarr.infrastructure.cache.redis_adapter import RedisAdapter
from availarr.infrastructure.config.schema import CacheConfig

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis"]

# Redis copes with far more parallel ops than SQLite.
_REDIS_MAX_CONCURRENT = 50


def create_cache(config: CacheConfig, *, namespace: str = "availarr") -> CachePort:
    """Create the cache adapter for ``config.backend``.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend: str = config.backend
    if backend == "diskcache":
        log.info(
            "cache_factory_create",
            backend=backend,
            directory=str(config.directory),
            ttl=config.ttl_seconds,
            max_concurrent=config.max_concurrent,
        )
        return DiskcacheAdapter(
            directory=config.directory,
            ttl_seconds=config.ttl_seconds,
            max_concurrent=config.max_concurrent,
        )
    if backend == "redis":
        log.info(
            "cache_factory_create",
            backend=backend,
            url=config.redis_url,
            ttl=config.ttl_seconds,
            max_concurrent=_REDIS_MAX_CONCURRENT,
        )
        return RedisAdapter(
            url=config.redis_url,
            namespace=namespace,
            ttl_seconds=config.ttl_seconds,
            max_concurrent=_REDIS_MAX_CONCURRENT,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'diskcache' or 'redis'."
    )
