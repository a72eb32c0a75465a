from .cache import CachePort
from .metadata import MetadataClientPort
from .stream_provider import StreamProviderPort

__all__ = [
    "CachePort",
    "MetadataClientPort",
    "StreamProviderPort",
]
