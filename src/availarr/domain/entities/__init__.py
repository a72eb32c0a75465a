from .availability import (
    NO_PROVIDER,
    AnnotatedItem,
    AvailabilityStatus,
    ContentRef,
    ContentType,
    FallbackResult,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
    ReleaseFeed,
    StreamQuality,
    StreamRecord,
)

__all__ = [
    "NO_PROVIDER",
    "AnnotatedItem",
    "AvailabilityStatus",
    "ContentRef",
    "ContentType",
    "FallbackResult",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderResponseError",
    "ProviderTimeoutError",
    "ReleaseFeed",
    "StreamQuality",
    "StreamRecord",
]
