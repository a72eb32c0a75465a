from .addon import StremioAddonProvider
from .registry import build_providers

__all__ = ["StremioAddonProvider", "build_providers"]
