"""Zero-impact in-memory performance metrics.

All counters are plain Python integers manipulated inside the single-threaded
async event loop — no locks, no I/O, no disk, no external dependencies.

``time.perf_counter_ns()`` is used for timing (monotonic, nanosecond
resolution, near-zero overhead).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class ProviderStats:
    """Accumulated statistics for a single provider."""

    fetches: int = 0
    successes: int = 0
    empties: int = 0
    failures: int = 0
    skips: int = 0
    probes: int = 0
    probe_failures: int = 0
    total_streams: int = 0
    total_duration_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable summary."""
        avg_ms = (
            round(self.total_duration_ns / self.fetches / 1_000_000, 1)
            if self.fetches
            else 0.0
        )
        return {
            "fetches": self.fetches,
            "successes": self.successes,
            "empties": self.empties,
            "failures": self.failures,
            "skips": self.skips,
            "probes": self.probes,
            "probe_failures": self.probe_failures,
            "total_streams": self.total_streams,
            "avg_duration_ms": avg_ms,
        }


@dataclass
class BatchStats:
    """Accumulated statistics for batch availability checks."""

    runs: int = 0
    total_items: int = 0
    available: int = 0
    timeouts: int = 0
    total_duration_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable summary."""
        avg_ms = (
            round(self.total_duration_ns / self.runs / 1_000_000, 1)
            if self.runs
            else 0.0
        )
        return {
            "runs": self.runs,
            "total_items": self.total_items,
            "available": self.available,
            "timeouts": self.timeouts,
            "avg_duration_ms": avg_ms,
        }


@dataclass
class MetricsCollector:
    """Central in-memory metrics collector.

    Thread-safety is not required — the async event loop is
    single-threaded, so plain integer increments are atomic enough.
    """

    _providers: dict[str, ProviderStats] = field(default_factory=dict)
    _batch: BatchStats = field(default_factory=BatchStats)
    _start_ns: int = field(default_factory=time.perf_counter_ns)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _stats(self, name: str) -> ProviderStats:
        stats = self._providers.get(name)
        if stats is None:
            stats = ProviderStats()
            self._providers[name] = stats
        return stats

    def record_provider_fetch(
        self,
        name: str,
        duration_ns: int,
        stream_count: int,
        *,
        success: bool,
    ) -> None:
        """Record one provider stream fetch."""
        stats = self._stats(name)
        stats.fetches += 1
        stats.total_duration_ns += duration_ns

        if not success:
            stats.failures += 1
        elif stream_count:
            stats.successes += 1
            stats.total_streams += stream_count
        else:
            stats.empties += 1

    def record_provider_skip(self, name: str) -> None:
        """Record that *name* was skipped by the health tracker."""
        self._stats(name).skips += 1

    def record_provider_probe(self, name: str, *, ok: bool) -> None:
        """Record one liveness probe; kept apart from the fetch counters."""
        stats = self._stats(name)
        stats.probes += 1
        if not ok:
            stats.probe_failures += 1

    def record_batch(
        self,
        total: int,
        available: int,
        duration_ns: int,
        *,
        timed_out: bool,
    ) -> None:
        """Record one batch availability run."""
        self._batch.runs += 1
        self._batch.total_items += total
        self._batch.available += available
        self._batch.total_duration_ns += duration_ns
        if timed_out:
            self._batch.timeouts += 1

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable snapshot of all metrics."""
        uptime_ns = time.perf_counter_ns() - self._start_ns
        uptime_s = round(uptime_ns / 1_000_000_000, 1)

        return {
            "uptime_seconds": uptime_s,
            "providers": {
                name: stats.snapshot()
                for name, stats in sorted(self._providers.items())
            },
            "batch": self._batch.snapshot(),
        }
