# QuickSearch Services Package
"""
Runtime services for the overlay: asset caching, timers and the
show/hide state machine.
"""

from .assets import AssetCache, AssetHandle
from .scheduler import GLibScheduler, ScheduledTask
from .visibility import VisibilityController, VisibilityState

__all__ = [
    "AssetCache",
    "AssetHandle",
    "GLibScheduler",
    "ScheduledTask",
    "VisibilityController",
    "VisibilityState",
]
