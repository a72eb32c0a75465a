"""Strict stream classification.

Turns the free-text ``name``/``title`` of provider streams into resolution,
source, codec and HDR attributes and decides whether a set of streams
contains a release of acceptable quality.

The pipeline is deliberately biased towards false negatives: anything the
token tables do not recognise counts as "does not satisfy".
"""

from __future__ import annotations

import re
from typing import Iterable

from availarr.domain.entities.availability import (
    NO_PROVIDER,
    AvailabilityStatus,
    StreamQuality,
    StreamRecord,
)
from availarr.infrastructure.stremio.quality_tokens import (
    AUDIO_CODEC_PRIORITY,
    EXCLUDED_SOURCES,
    HDR_TOKENS,
    HIGH_QUALITY_AUDIO_PRIORITY,
    LOW_QUALITY_PATTERNS,
    MIN_QUALITY_PRIORITY,
    PREFERRED_AUDIO_CODECS,
    PREFERRED_VIDEO_CODECS,
    QUALITY_TOKENS,
    UHD_TOKENS,
    VALID_SOURCES,
)

# --- Pattern helpers ---

_LEFT = r"(?<![A-Z0-9])"
_RIGHT = r"(?![A-Z0-9])"
# Channel layouts are often glued to the codec (DDP5.1, AAC2.0).
_RIGHT_AUDIO = r"(?![A-Z])"

_SEPARATORS = re.compile(r"[.-]")


def _bounded(body: str, right: str = _RIGHT) -> re.Pattern[str]:
    return re.compile(f"{_LEFT}{body}{right}")


def _separators_optional(token: str) -> str:
    parts = _SEPARATORS.split(token.upper())
    return r"[.\- ]?".join(re.escape(p) for p in parts)


def _audio_variants(codec: str) -> list[str]:
    upper = codec.upper()
    variants: list[str] = []
    for variant in (upper, _SEPARATORS.sub("", upper), _SEPARATORS.sub(" ", upper)):
        if variant not in variants:
            variants.append(variant)
    return variants


_EXCLUDED_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    _bounded(re.escape(token.upper())) for token in EXCLUDED_SOURCES
)

_SOURCE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (source, _bounded(re.escape(source.upper()))) for source in VALID_SOURCES
)

# Highest priority first; sorted() is stable so ties keep table order.
_AUDIO_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (
        codec,
        tuple(
            _bounded(re.escape(v), right=_RIGHT_AUDIO) for v in _audio_variants(codec)
        ),
    )
    for codec in sorted(
        PREFERRED_AUDIO_CODECS,
        key=lambda c: AUDIO_CODEC_PRIORITY.get(c, 0),
        reverse=True,
    )
)

_VIDEO_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (codec, _bounded(_separators_optional(codec))) for codec in PREFERRED_VIDEO_CODECS
)

_HDR_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    _bounded(re.escape(token)) for token in HDR_TOKENS
)


def _text(stream: StreamRecord) -> str:
    return f"{stream.name} {stream.title}".upper()


# --- Extraction ---


def extract_quality(stream: StreamRecord) -> StreamQuality | None:
    """Resolution tier from plain substring tokens, or None."""
    text = _text(stream)
    for tokens, quality in QUALITY_TOKENS:
        if any(token in text for token in tokens):
            return quality
    return None


def is_4k(stream: StreamRecord) -> bool:
    text = _text(stream)
    return any(token in text for token in UHD_TOKENS)


def is_low_quality_source(stream: StreamRecord) -> bool:
    """True for cam/telesync/screener style releases."""
    text = _text(stream)
    if any(pattern.search(text) for pattern in _EXCLUDED_PATTERNS):
        return True
    return any(pattern in text for pattern in LOW_QUALITY_PATTERNS)


def extract_source(stream: StreamRecord) -> str | None:
    """First recognised release source, in table order."""
    text = _text(stream)
    for source, pattern in _SOURCE_PATTERNS:
        if pattern.search(text):
            return source
    return None


def has_valid_source(stream: StreamRecord) -> bool:
    return extract_source(stream) is not None


def extract_audio_codec(stream: StreamRecord) -> str | None:
    """Highest-priority audio codec named in the stream text."""
    text = _text(stream)
    for codec, patterns in _AUDIO_PATTERNS:
        if any(pattern.search(text) for pattern in patterns):
            return codec
    return None


def extract_video_codec(stream: StreamRecord) -> str | None:
    text = _text(stream)
    for codec, pattern in _VIDEO_PATTERNS:
        if pattern.search(text):
            return codec
    return None


def has_hdr(stream: StreamRecord) -> bool:
    text = _text(stream)
    return any(pattern.search(text) for pattern in _HDR_PATTERNS)


def has_high_quality_audio(stream: StreamRecord) -> bool:
    codec = extract_audio_codec(stream)
    if codec is None:
        return False
    return AUDIO_CODEC_PRIORITY.get(codec, 0) >= HIGH_QUALITY_AUDIO_PRIORITY


# --- Pipeline ---


def classify_streams(
    streams: Iterable[StreamRecord],
    provider: str = NO_PROVIDER,
) -> AvailabilityStatus:
    """Run the five-stage filter and aggregate the survivors.

    1. drop low-quality sources
    2. keep 2160p/4K/UHD only
    3. keep streams with a recognised release source
    4. prefer high-fidelity audio, else keep the stage-3 set
    5. aggregate and apply the minimum quality threshold

    Any stage that leaves nothing yields ``AvailabilityStatus.unavailable``.
    """
    unavailable = AvailabilityStatus.unavailable(provider)

    candidates = [s for s in streams if not is_low_quality_source(s)]
    if not candidates:
        return unavailable

    candidates = [s for s in candidates if is_4k(s)]
    if not candidates:
        return unavailable

    candidates = [s for s in candidates if has_valid_source(s)]
    if not candidates:
        return unavailable

    final = [s for s in candidates if has_high_quality_audio(s)] or candidates

    best_quality: StreamQuality | None = None
    sources: set[str] = set()
    audio_codec: str | None = None
    audio_priority = 0
    video_codec: str | None = None
    hdr = False

    for stream in final:
        quality = extract_quality(stream)
        if quality is not None and (best_quality is None or quality > best_quality):
            best_quality = quality

        source = extract_source(stream)
        if source is not None:
            sources.add(source)

        codec = extract_audio_codec(stream)
        if codec is not None:
            priority = AUDIO_CODEC_PRIORITY.get(codec, 0)
            if priority > audio_priority:
                audio_priority = priority
                audio_codec = codec

        if video_codec is None:
            video_codec = extract_video_codec(stream)

        hdr = hdr or has_hdr(stream)

    if not sources:
        return unavailable
    if best_quality is None or best_quality < MIN_QUALITY_PRIORITY:
        return unavailable

    return AvailabilityStatus(
        available=True,
        stream_count=len(final),
        best_quality=best_quality,
        sources=frozenset(sources),
        audio_codec=audio_codec,
        video_codec=video_codec,
        has_hdr=hdr,
        provider=provider,
    )
