"""Per-provider health tracking to skip consistently failing providers.

When a provider accumulates ``failure_threshold`` failures it is skipped
until ``cooldown_seconds`` have passed since its last failure.  After the
cooldown the record is discarded on the next check, so the provider gets a
clean slate.  Any success discards the record immediately.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import structlog

log = structlog.get_logger(__name__)


@dataclass
class _Health:
    failure_count: int
    last_check: float


class ProviderHealthTracker:
    """Track per-provider failure counts keyed by provider name.

    Thread-safety note: this class is *not* thread-safe but is safe
    for single-threaded asyncio (no concurrent mutations within one
    event loop tick).  Lost updates between in-flight resolutions only
    cause an extra retry or an extra skip.
    """

    def __init__(
        self,
        *,
        failure_threshold: int = 3,
        cooldown_seconds: float = 300.0,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be > 0")
        self._threshold = failure_threshold
        self._cooldown = cooldown_seconds
        self._records: dict[str, _Health] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def should_skip(self, name: str) -> bool:
        """Return ``True`` if *name* has failed too often recently.

        A record older than the cooldown is dropped and the provider is
        allowed again.
        """
        record = self._records.get(name)
        if record is None:
            return False

        elapsed = time.monotonic() - record.last_check
        if elapsed >= self._cooldown:
            del self._records[name]
            log.info(
                "provider_health_expired",
                provider=name,
                failure_count=record.failure_count,
            )
            return False

        return record.failure_count >= self._threshold

    def record_success(self, name: str) -> None:
        """Forget all failures of *name*."""
        self._records.pop(name, None)

    def record_failure(self, name: str) -> None:
        """Increment the failure counter of *name* and stamp the time."""
        now = time.monotonic()
        record = self._records.get(name)
        if record is None:
            record = _Health(failure_count=1, last_check=now)
            self._records[name] = record
        else:
            record.failure_count += 1
            record.last_check = now

        if record.failure_count == self._threshold:
            log.warning(
                "provider_circuit_open",
                provider=name,
                failure_count=record.failure_count,
                cooldown_seconds=self._cooldown,
            )

    def failure_count(self, name: str) -> int:
        """Current failure count of *name* (0 when untracked)."""
        record = self._records.get(name)
        return record.failure_count if record else 0

    def reset(self, name: str) -> None:
        """Manually clear *name*."""
        self.record_success(name)

    def snapshot(self) -> dict[str, dict[str, object]]:
        """Return a diagnostic snapshot of all tracked providers."""
        now = time.monotonic()
        result: dict[str, dict[str, object]] = {}
        for name in sorted(self._records):
            record = self._records[name]
            result[name] = {
                "failures": record.failure_count,
                "seconds_since_failure": round(now - record.last_check, 1),
                "skipped": record.failure_count >= self._threshold
                and now - record.last_check < self._cooldown,
            }
        return result
