"""Redis adapter - async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache with a bounded number of parallel operations.

    - Keys are prefixed with ``{namespace}:`` so a shared Redis DB is safe;
      ``clear()`` only removes this namespace.
    - Values are JSON-encoded.
    - Redis errors are logged and degrade to cache misses.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        namespace: str = "availarr",
        ttl_seconds: int = 3600,
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.namespace = namespace
        self.default_ttl = ttl_seconds
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    # --- Context Manager ---
    async def __aenter__(self) -> RedisAdapter:
        """Create the client and PING once."""
        if self._client is None:
            self._client = Redis.from_url(self.url, decode_responses=True)
            try:
                await self._client.ping()
                log.info("redis_connected", url=self.url)
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")

        async with self._semaphore:
            try:
                raw = await self._client.get(self._key(key))
            except RedisError as e:
                log.error("redis_get_error", key=key, error=str(e))
                return None

        if raw is None:
            log.debug("cache_miss", key=key)
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            log.warning("cache_corrupt_entry", key=key)
            return None
        log.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        if self._client is None:
            raise RuntimeError("Redis not initialized.")

        expire_time = ttl if ttl is not None else self.default_ttl
        packed = json.dumps(value, separators=(",", ":"))

        async with self._semaphore:
            try:
                if expire_time > 0:
                    await self._client.setex(self._key(key), expire_time, packed)
                else:
                    await self._client.set(self._key(key), packed)
                log.debug(
                    "cache_set", key=key, ttl=expire_time, size_bytes=len(packed)
                )
            except RedisError as e:
                log.error("redis_set_error", key=key, error=str(e))

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False

        async with self._semaphore:
            try:
                deleted = await self._client.delete(self._key(key))
            except RedisError as e:
                log.error("redis_delete_error", key=key, error=str(e))
                return False
        log.debug("cache_delete", key=key, deleted=deleted > 0)
        return deleted > 0

    async def clear(self) -> None:
        """Delete every key of this namespace."""
        if self._client is None:
            return

        async with self._semaphore:
            try:
                keys = [k async for k in self._client.scan_iter(f"{self.namespace}:*")]
                if keys:
                    await self._client.delete(*keys)
                log.warning(
                    "redis_namespace_cleared",
                    namespace=self.namespace,
                    keys=len(keys),
                )
            except RedisError as e:
                log.error("redis_clear_error", error=str(e))
