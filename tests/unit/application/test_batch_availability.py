"""Tests for BatchAvailabilityUseCase."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from availarr.application.use_cases.batch_availability import (
    BatchAvailabilityUseCase,
)
from availarr.domain.entities.availability import (
    AvailabilityStatus,
    ContentRef,
    ContentType,
    StreamQuality,
)
from availarr.infrastructure.metrics import MetricsCollector

_AVAILABLE = AvailabilityStatus(
    available=True,
    stream_count=1,
    best_quality=StreamQuality.UHD_4K,
    sources=frozenset({"WEB-DL"}),
    provider="torrentio",
)


class FakeResolver:
    """Resolver answering from a table of external ids."""

    def __init__(
        self,
        available: set[str],
        *,
        delays: dict[str, float] | None = None,
        errors: set[str] | None = None,
    ) -> None:
        self.available = available
        self.delays = delays or {}
        self.errors = errors or set()
        self.calls: list[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _resolve(self, external_id: str) -> AvailabilityStatus:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(external_id, 0))
            if external_id in self.errors:
                raise RuntimeError(f"resolver failed for {external_id}")
            if external_id in self.available:
                return _AVAILABLE
            return AvailabilityStatus.unavailable("torrentio")
        finally:
            self.in_flight -= 1

    async def resolve_movie(self, external_id: str) -> AvailabilityStatus:
        self.calls.append(("movie", external_id))
        return await self._resolve(external_id)

    async def resolve_tv(
        self, external_id: str, season: int = 1, episode: int = 1
    ) -> AvailabilityStatus:
        self.calls.append(("series", external_id, season, episode))
        return await self._resolve(external_id)


class FakeMetadata:
    def __init__(self, ids: dict[int, str]) -> None:
        self.ids = ids
        self.lookups: list[int] = []

    async def get_external_id(
        self, content_id: int, media_type: ContentType
    ) -> str | None:
        self.lookups.append(content_id)
        return self.ids.get(content_id)


def _refs(
    make_ref: Callable, count: int, media_type: str = "movie"
) -> list[ContentRef]:
    return [
        make_ref(i, media_type, external_id=f"tt{i:07d}") for i in range(1, count + 1)
    ]


class TestValidation:
    @pytest.mark.asyncio()
    async def test_required_count_must_be_positive(self) -> None:
        uc = BatchAvailabilityUseCase(availability=FakeResolver(set()))
        with pytest.raises(ValueError, match="required_count"):
            await uc.execute([], required_count=0, timeout_seconds=1)

    @pytest.mark.asyncio()
    async def test_timeout_must_be_positive(self) -> None:
        uc = BatchAvailabilityUseCase(availability=FakeResolver(set()))
        with pytest.raises(ValueError, match="timeout_seconds"):
            await uc.execute([], required_count=1, timeout_seconds=0)

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="concurrency"):
            BatchAvailabilityUseCase(availability=FakeResolver(set()), concurrency=0)

    @pytest.mark.asyncio()
    async def test_empty_input(self) -> None:
        resolver = FakeResolver(set())
        uc = BatchAvailabilityUseCase(availability=resolver)
        assert await uc.execute([], required_count=5, timeout_seconds=1) == []
        assert resolver.calls == []


class TestFiltering:
    @pytest.mark.asyncio()
    async def test_only_available_returned(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 6)
        resolver = FakeResolver({"tt0000002", "tt0000005"})
        uc = BatchAvailabilityUseCase(availability=resolver)

        items = await uc.execute(refs, required_count=10, timeout_seconds=5)

        assert sorted(i.ref.content_id for i in items) == [2, 5]
        assert all(i.availability.available for i in items)
        assert {i.external_id for i in items} == {"tt0000002", "tt0000005"}

    @pytest.mark.asyncio()
    async def test_none_available_is_empty(self, make_ref: Callable) -> None:
        uc = BatchAvailabilityUseCase(availability=FakeResolver(set()))
        items = await uc.execute(
            _refs(make_ref, 4), required_count=2, timeout_seconds=5
        )
        assert items == []

    @pytest.mark.asyncio()
    async def test_resolver_errors_are_unavailable(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 3)
        resolver = FakeResolver(
            {"tt0000001", "tt0000002", "tt0000003"}, errors={"tt0000002"}
        )
        uc = BatchAvailabilityUseCase(availability=resolver)

        items = await uc.execute(refs, required_count=5, timeout_seconds=5)

        assert sorted(i.ref.content_id for i in items) == [1, 3]

    @pytest.mark.asyncio()
    async def test_series_use_episode(self, make_ref: Callable) -> None:
        refs = [
            make_ref(1, "series", external_id="tt0944947", season=8, episode=6),
            make_ref(2, "series", external_id="tt0903747"),
        ]
        resolver = FakeResolver({"tt0944947", "tt0903747"})
        uc = BatchAvailabilityUseCase(availability=resolver)

        await uc.execute(refs, required_count=5, timeout_seconds=5)

        assert sorted(resolver.calls) == [
            ("series", "tt0903747", 1, 1),
            ("series", "tt0944947", 8, 6),
        ]

    @pytest.mark.asyncio()
    async def test_specials_season_kept(self, make_ref: Callable) -> None:
        ref = make_ref(1, "series", external_id="tt1234567", season=0, episode=3)
        resolver = FakeResolver({"tt1234567"})
        uc = BatchAvailabilityUseCase(availability=resolver)

        await uc.execute([ref], required_count=1, timeout_seconds=5)

        assert resolver.calls == [("series", "tt1234567", 0, 3)]


class TestExternalIdResolution:
    @pytest.mark.asyncio()
    async def test_missing_id_looked_up(self, make_ref: Callable) -> None:
        metadata = FakeMetadata({1: "tt1111111"})
        resolver = FakeResolver({"tt1111111"})
        uc = BatchAvailabilityUseCase(availability=resolver, metadata=metadata)

        items = await uc.execute([make_ref(1)], required_count=1, timeout_seconds=5)

        assert metadata.lookups == [1]
        assert items[0].external_id == "tt1111111"
        assert items[0].to_dict()["external_id"] == "tt1111111"

    @pytest.mark.asyncio()
    async def test_unknown_id_skipped(self, make_ref: Callable) -> None:
        metadata = FakeMetadata({})
        resolver = FakeResolver(set())
        uc = BatchAvailabilityUseCase(availability=resolver, metadata=metadata)

        items = await uc.execute([make_ref(1)], required_count=1, timeout_seconds=5)

        assert items == []
        assert resolver.calls == []

    @pytest.mark.asyncio()
    async def test_no_metadata_client(self, make_ref: Callable) -> None:
        resolver = FakeResolver(set())
        uc = BatchAvailabilityUseCase(availability=resolver)

        items = await uc.execute([make_ref(1)], required_count=1, timeout_seconds=5)
        assert items == []
        assert resolver.calls == []


class TestEarlyStop:
    @pytest.mark.asyncio()
    async def test_stops_at_required_count(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 20)
        ids = {r.external_id for r in refs}
        # Later items are slow so an early stop leaves them unchecked.
        delays = {f"tt{i:07d}": 1.0 for i in range(4, 21)}
        resolver = FakeResolver(ids, delays=delays)
        uc = BatchAvailabilityUseCase(availability=resolver, concurrency=20)

        started = asyncio.get_running_loop().time()
        items = await uc.execute(refs, required_count=3, timeout_seconds=10)
        elapsed = asyncio.get_running_loop().time() - started

        assert len(items) == 3
        assert sorted(i.ref.content_id for i in items) == [1, 2, 3]
        assert elapsed < 0.9

    @pytest.mark.asyncio()
    async def test_never_exceeds_required(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 10)
        uc = BatchAvailabilityUseCase(
            availability=FakeResolver({r.external_id for r in refs})
        )
        items = await uc.execute(refs, required_count=4, timeout_seconds=5)
        assert len(items) == 4

    @pytest.mark.asyncio()
    async def test_concurrency_bounded(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 12)
        delays = {r.external_id: 0.01 for r in refs}
        resolver = FakeResolver(set(), delays=delays)
        uc = BatchAvailabilityUseCase(availability=resolver, concurrency=3)

        await uc.execute(refs, required_count=1, timeout_seconds=5)

        assert len(resolver.calls) == 12
        assert resolver.max_in_flight <= 3


class TestTimeout:
    @pytest.mark.asyncio()
    async def test_partial_results_on_timeout(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 4)
        ids = {r.external_id for r in refs}
        delays = {"tt0000003": 5.0, "tt0000004": 5.0}
        resolver = FakeResolver(ids, delays=delays)
        metrics = MetricsCollector()
        uc = BatchAvailabilityUseCase(
            availability=resolver, concurrency=4, metrics=metrics
        )

        started = asyncio.get_running_loop().time()
        items = await uc.execute(refs, required_count=4, timeout_seconds=0.2)
        elapsed = asyncio.get_running_loop().time() - started

        assert sorted(i.ref.content_id for i in items) == [1, 2]
        assert elapsed < 2.0
        batch = metrics.snapshot()["batch"]
        assert batch["timeouts"] == 1
        assert batch["available"] == 2

    @pytest.mark.asyncio()
    async def test_timeout_with_nothing_found(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 2)
        resolver = FakeResolver(
            {r.external_id for r in refs},
            delays={r.external_id: 5.0 for r in refs},
        )
        uc = BatchAvailabilityUseCase(availability=resolver)

        assert await uc.execute(refs, required_count=2, timeout_seconds=0.05) == []

    @pytest.mark.asyncio()
    async def test_metrics_without_timeout(self, make_ref: Callable) -> None:
        refs = _refs(make_ref, 3)
        metrics = MetricsCollector()
        uc = BatchAvailabilityUseCase(
            availability=FakeResolver({"tt0000001"}), metrics=metrics
        )

        await uc.execute(refs, required_count=2, timeout_seconds=5)

        batch = metrics.snapshot()["batch"]
        assert batch["runs"] == 1
        assert batch["total_items"] == 3
        assert batch["available"] == 1
        assert batch["timeouts"] == 0

    @pytest.mark.asyncio()
    async def test_stalled_item_dropped_after_one_second(
        self, make_ref: Callable
    ) -> None:
        refs = _refs(make_ref, 3)
        stalled = asyncio.Event()

        class _StallingResolver(FakeResolver):
            async def resolve_movie(self, external_id: str) -> AvailabilityStatus:
                if external_id == "tt0000002":
                    await stalled.wait()
                return await super().resolve_movie(external_id)

        resolver = _StallingResolver({r.external_id for r in refs})
        uc = BatchAvailabilityUseCase(availability=resolver)

        started = asyncio.get_running_loop().time()
        items = await uc.execute(refs, required_count=3, timeout_seconds=1.0)
        elapsed = asyncio.get_running_loop().time() - started

        assert sorted(i.ref.content_id for i in items) == [1, 3]
        assert 0.9 <= elapsed < 1.5
