"""Domain entities for stream availability resolution.

Pure value objects — no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Literal

ContentType = Literal["movie", "series"]

# Provider name reported when every provider was skipped or failed.
NO_PROVIDER = "none"


class StreamQuality(IntEnum):
    """Resolution tiers ranked by priority (higher value = better)."""

    UNKNOWN = 0
    SD = 1
    HD_720P = 2
    HD_1080P = 3
    UHD_4K = 5

    @property
    def label(self) -> str:
        return _QUALITY_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> StreamQuality:
        for quality, text in _QUALITY_LABELS.items():
            if text == label:
                return quality
        raise ValueError(f"Unknown quality label: {label!r}")


_QUALITY_LABELS: dict[StreamQuality, str] = {
    StreamQuality.UNKNOWN: "unknown",
    StreamQuality.SD: "480p",
    StreamQuality.HD_720P: "720p",
    StreamQuality.HD_1080P: "1080p",
    StreamQuality.UHD_4K: "2160p",
}


@dataclass(frozen=True)
class StreamRecord:
    """One candidate stream returned by a provider.

    ``name`` and ``title`` are free text that encode quality, source and
    codec information in no fixed format.
    """

    name: str = ""
    title: str = ""
    url: str | None = None
    info_hash: str | None = None
    file_idx: int | None = None
    filename: str | None = None


@dataclass(frozen=True)
class FallbackResult:
    """Streams from the first provider that returned any, or none at all."""

    streams: list[StreamRecord] = field(default_factory=list)
    provider: str = NO_PROVIDER

    @property
    def exhausted(self) -> bool:
        return self.provider == NO_PROVIDER


@dataclass(frozen=True)
class AvailabilityStatus:
    """Normalized availability verdict for one content item.

    ``available`` implies ``best_quality`` is at least UHD_4K and
    ``sources`` is non-empty.
    """

    available: bool
    stream_count: int = 0
    best_quality: StreamQuality | None = None
    sources: frozenset[str] = frozenset()
    audio_codec: str | None = None
    video_codec: str | None = None
    has_hdr: bool = False
    provider: str = NO_PROVIDER

    @classmethod
    def unavailable(cls, provider: str = NO_PROVIDER) -> AvailabilityStatus:
        return cls(available=False, provider=provider)

    def to_dict(self, *, include_provider: bool = True) -> dict[str, Any]:
        """JSON-safe representation (cache values, API responses).

        Public feeds pass ``include_provider=False`` so upstream names stay
        internal.
        """
        data = {
            "available": self.available,
            "stream_count": self.stream_count,
            "best_quality": self.best_quality.label if self.best_quality else None,
            "sources": sorted(self.sources),
            "audio_codec": self.audio_codec,
            "video_codec": self.video_codec,
            "has_hdr": self.has_hdr,
        }
        if include_provider:
            data["provider"] = self.provider
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AvailabilityStatus:
        quality = data.get("best_quality")
        return cls(
            available=bool(data.get("available", False)),
            stream_count=int(data.get("stream_count", 0)),
            best_quality=StreamQuality.from_label(quality) if quality else None,
            sources=frozenset(data.get("sources") or ()),
            audio_codec=data.get("audio_codec"),
            video_codec=data.get("video_codec"),
            has_hdr=bool(data.get("has_hdr", False)),
            provider=data.get("provider") or NO_PROVIDER,
        )


@dataclass(frozen=True)
class ContentRef:
    """A content item to check, as known to the metadata service.

    ``external_id`` may be missing; the batch coordinator then asks the
    metadata client for it.  ``season``/``episode`` only apply to series.
    """

    content_id: int
    media_type: ContentType
    title: str = ""
    external_id: str | None = None
    season: int | None = None
    episode: int | None = None
    release_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": self.content_id,
            "media_type": self.media_type,
            "title": self.title,
            "external_id": self.external_id,
            "season": self.season,
            "episode": self.episode,
            "release_date": self.release_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentRef:
        return cls(
            content_id=int(data["content_id"]),
            media_type=data["media_type"],
            title=data.get("title", ""),
            external_id=data.get("external_id"),
            season=data.get("season"),
            episode=data.get("episode"),
            release_date=data.get("release_date"),
        )


@dataclass(frozen=True)
class AnnotatedItem:
    """A content item together with its availability verdict."""

    ref: ContentRef
    availability: AvailabilityStatus
    external_id: str | None = None

    def to_dict(self, *, include_provider: bool = True) -> dict[str, Any]:
        return {
            **self.ref.to_dict(),
            "external_id": self.external_id or self.ref.external_id,
            "availability": self.availability.to_dict(
                include_provider=include_provider
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnnotatedItem:
        return cls(
            ref=ContentRef.from_dict(data),
            availability=AvailabilityStatus.from_dict(data.get("availability", {})),
            external_id=data.get("external_id"),
        )


FeedSource = Literal["verified", "metadata_fallback"]


@dataclass(frozen=True)
class ReleaseFeed:
    """Result of a cached "just released" lookup."""

    items: list[AnnotatedItem]
    source: FeedSource
    generated_at: float

    def to_dict(self, *, include_provider: bool = True) -> dict[str, Any]:
        return {
            "items": [
                item.to_dict(include_provider=include_provider)
                for item in self.items
            ],
            "source": self.source,
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReleaseFeed:
        return cls(
            items=[AnnotatedItem.from_dict(i) for i in data.get("items", [])],
            source=data.get("source", "verified"),
            generated_at=float(data.get("generated_at", 0.0)),
        )


class ProviderError(Exception):
    """Base error for a failed provider call."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: str, status_code: int) -> None:
        super().__init__(provider, f"{provider} error: HTTP {status_code}")
        self.status_code = status_code


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within the per-request deadline."""


class ProviderResponseError(ProviderError):
    """Provider answered 2xx but the body is not a stream response."""
