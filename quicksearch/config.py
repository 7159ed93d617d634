"""
QuickSearch Overlay - Ignis configuration entry point.

Creates the host bridge, search engine, controller and panel, then pushes
the catalog from data/catalog.toml.

Usage:
  ignis init -c /path/to/quicksearch/config.py
  bind the hotkey to: ignis open-window quicksearch
"""

from pathlib import Path

from ignis.app import IgnisApp
from loguru import logger

from quicksearch.catalog import load_catalog_file
from quicksearch.controller import OverlayController
from quicksearch.host import InProcessHostBridge, ToggleCode
from quicksearch.panels import OverlayPanel
from quicksearch.search import CatalogSearchEngine
from quicksearch.utils.helpers import catalog_path, load_settings

app = IgnisApp.get_default()

styles_dir = Path(__file__).parent / "styles"
try:
    app.apply_css(str(styles_dir / "main.css"))
except Exception as e:
    logger.warning(f"Could not load main.css: {e}")

settings = load_settings()

engine = CatalogSearchEngine(max_results=settings["overlay"]["max_results"])
bridge = InProcessHostBridge()
controller = OverlayController.from_settings(bridge, settings, engine=engine)

panel = OverlayPanel(controller, settings)
window = panel.create_window()
window.panel = panel


def _on_toggle(code: ToggleCode):
    # RESTORE and HIDE both unmap; the compositor hands focus back
    window.set_visible(code is ToggleCode.SHOW)


def _on_window_visible(win, param):
    # Opened from outside (ignis open-window): treat it as the hotkey hook
    if win.get_visible() and not controller.state.visible:
        bridge.trigger()


bridge.on_toggle = _on_toggle
window.connect("notify::visible", _on_window_visible)

controller.attach()
bridge.push_catalog(load_catalog_file(catalog_path(settings)))

logger.info("QuickSearch overlay initialized")
