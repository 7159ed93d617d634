# QuickSearch Utilities Package
"""
Shared helpers: settings loading and target launching.
"""

from .helpers import launch_target, load_settings

__all__ = ["launch_target", "load_settings"]
