"""
Visibility Controller - Show/hide state machine for the overlay.

States:
  HIDDEN  -> SHOWING -> SHOWN     (host hook)
  SHOWN   -> HIDING  -> HIDDEN    (Escape, blur, hide())

Hiding flips `visible` off immediately so the panel can animate out, then
defers the host toggle, the input reset and the caller's callback until
the animation delay elapses. Showing again during that window cancels the
deferred cleanup.
"""

from enum import Enum
from typing import Callable, Optional

from loguru import logger

from ..host import HostBridge, ToggleCode, notify_host
from .scheduler import ScheduledTask, Scheduler

DEFAULT_HIDE_DELAY_MS = 200


class VisibilityState(Enum):
    HIDDEN = "hidden"
    SHOWING = "showing"
    SHOWN = "shown"
    HIDING = "hiding"


class VisibilityController:
    """
    Drives overlay visibility and notifies the host.

    Args:
        host: Receives toggle codes
        scheduler: Runs the deferred hide cleanup
        on_visible: Called with the new `visible` flag on every change
        on_reset: Called once per completed hide to clear input state
        hide_delay_ms: Dismissal animation length
    """

    def __init__(
        self,
        host: HostBridge,
        scheduler: Scheduler,
        on_visible: Callable[[bool], None],
        on_reset: Callable[[], None],
        hide_delay_ms: int = DEFAULT_HIDE_DELAY_MS,
    ):
        self.host = host
        self.scheduler = scheduler
        self.on_visible = on_visible
        self.on_reset = on_reset
        self.hide_delay_ms = hide_delay_ms

        self.state = VisibilityState.HIDDEN
        self._pending: Optional[ScheduledTask] = None

    @property
    def visible(self) -> bool:
        return self.state in (VisibilityState.SHOWING, VisibilityState.SHOWN)

    @property
    def hide_pending(self) -> bool:
        return self._pending is not None and self._pending.pending

    def show(self) -> bool:
        """
        Open the overlay.

        Returns:
            True if a transition happened, False if already shown
        """
        if self.visible:
            return False

        if self.state is VisibilityState.HIDING:
            # Reopened mid-animation: the close never completes
            self._cancel_pending()
            logger.debug("Show during hide animation, cancelled pending cleanup")

        self.state = VisibilityState.SHOWING
        notify_host(self.host, ToggleCode.SHOW)
        self.on_visible(True)

        # Focus handoff is external; treat it as acknowledged
        self.state = VisibilityState.SHOWN
        logger.debug("Overlay shown")
        return True

    def hide(self, restore: bool = True, callback: Optional[Callable[[], None]] = None) -> bool:
        """
        Start dismissing the overlay.

        Args:
            restore: Ask the host to give focus back to the previous window
            callback: Run once after the animation delay

        Returns:
            True if a hide started, False if already hidden or hiding
        """
        if self.state is not VisibilityState.SHOWN:
            return False

        self.state = VisibilityState.HIDING
        self.on_visible(False)

        code = ToggleCode.RESTORE if restore else ToggleCode.HIDE
        self._pending = self.scheduler.schedule(
            self.hide_delay_ms,
            lambda: self._finish_hide(code, callback),
        )
        logger.debug(f"Hiding overlay ({code.name}) in {self.hide_delay_ms}ms")
        return True

    def _finish_hide(self, code: ToggleCode, callback: Optional[Callable[[], None]]) -> None:
        self._pending = None
        self.state = VisibilityState.HIDDEN

        notify_host(self.host, code)

        try:
            self.on_reset()
        except Exception:
            logger.exception("Input reset after hide failed")

        if callback:
            try:
                callback()
            except Exception:
                logger.exception("Hide callback failed")

        logger.debug("Overlay hidden")

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def teardown(self) -> None:
        """Drop any pending cleanup and return to HIDDEN without notifying."""
        self._cancel_pending()
        self.state = VisibilityState.HIDDEN
