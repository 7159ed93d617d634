# QuickSearch Panels Package
"""
Ignis panel implementations.

The panel renders OverlayState and forwards keyboard and focus events to
the OverlayController.
"""

from .overlay import OverlayPanel

__all__ = ["OverlayPanel"]
