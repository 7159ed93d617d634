# QuickSearch Overlay Package
"""
Quick-launcher overlay for Ignis/Wayland.

Components:
  - Catalog: entries and icon assets pushed by the host
  - Search: query matching and ranked search engine
  - Services: asset cache, timers, show/hide state machine
  - Panels: the floating search panel
"""

__version__ = "0.1.0-dev"
