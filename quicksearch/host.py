"""
Host Bridge - Contract between the overlay and whatever hosts it.

The host fires the hook when the user presses the launcher hotkey, pushes
catalog snapshots, and receives toggle codes telling it what the overlay
is doing. Toggle notifications are fire-and-forget.
"""

from enum import IntEnum
from typing import Callable, Protocol

from loguru import logger


class ToggleCode(IntEnum):
    HIDE = 0      # Fully dismissed, nothing to restore
    SHOW = 1      # About to appear
    RESTORE = 2   # Dismissed, give focus back to the previous window


HookCallback = Callable[[], None]
CatalogCallback = Callable[..., None]


class HostBridge(Protocol):
    def hook(self, callback: HookCallback) -> None:
        ...

    def unhook(self, callback: HookCallback) -> None:
        ...

    def subscribe_catalog(self, callback: CatalogCallback) -> None:
        ...

    def unsubscribe_catalog(self, callback: CatalogCallback) -> None:
        ...

    def toggle(self, code: int) -> None:
        ...


def notify_host(host: HostBridge, code: ToggleCode) -> None:
    """Send a toggle code, logging (never raising) on failure."""
    try:
        host.toggle(int(code))
    except Exception:
        logger.exception(f"Host toggle({int(code)}) failed")


class InProcessHostBridge:
    """
    Host bridge for an overlay running inside the Ignis process.

    Args:
        on_toggle: Called with the ToggleCode on every toggle (e.g. to
                   show or hide the layer-shell window)
    """

    def __init__(self, on_toggle: Callable[[ToggleCode], None] | None = None):
        self.on_toggle = on_toggle
        self._hooks: list[HookCallback] = []
        self._catalog_listeners: list[CatalogCallback] = []
        self._last_catalog = None

    def hook(self, callback: HookCallback) -> None:
        self._hooks.append(callback)

    def unhook(self, callback: HookCallback) -> None:
        if callback in self._hooks:
            self._hooks.remove(callback)

    def subscribe_catalog(self, callback: CatalogCallback) -> None:
        """Register for catalog pushes. Replays the latest push, if any."""
        self._catalog_listeners.append(callback)
        if self._last_catalog is not None:
            callback(*self._last_catalog)

    def unsubscribe_catalog(self, callback: CatalogCallback) -> None:
        if callback in self._catalog_listeners:
            self._catalog_listeners.remove(callback)

    def trigger(self) -> None:
        """Fire the hotkey hook."""
        for callback in list(self._hooks):
            callback()

    def push_catalog(self, raw, links=None, assets=None) -> None:
        """Publish a new catalog snapshot to every listener."""
        self._last_catalog = (raw, links, assets)
        for callback in list(self._catalog_listeners):
            callback(raw, links, assets)

    def toggle(self, code: int) -> None:
        code = ToggleCode(code)
        logger.debug(f"Host toggle: {code.name}")
        if self.on_toggle:
            self.on_toggle(code)
