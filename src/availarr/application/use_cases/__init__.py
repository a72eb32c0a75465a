from .availability import AvailabilityUseCase
from .batch_availability import BatchAvailabilityUseCase
from .just_released import JustReleasedUseCase
from .provider_fallback import ProviderFallbackChain

__all__ = [
    "AvailabilityUseCase",
    "BatchAvailabilityUseCase",
    "JustReleasedUseCase",
    "ProviderFallbackChain",
]
