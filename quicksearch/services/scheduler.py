"""
Scheduler - Cancellable delayed callbacks on the GLib main loop.

Every deferred side effect goes through a ScheduledTask token so the
caller can cancel it explicitly (e.g. reopening the overlay while the
close animation is still running).
"""

from typing import Callable, Optional, Protocol

from loguru import logger


class ScheduledTask:
    """Token for one delayed callback. Runs at most once."""

    def __init__(self, callback: Callable[[], None], cancel_fn: Optional[Callable[[], None]] = None):
        self._callback = callback
        self._cancel_fn = cancel_fn
        self.cancelled = False
        self.done = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.done)

    def run(self) -> None:
        """Fire the callback unless already fired or cancelled."""
        if not self.pending:
            return
        self.done = True
        self._callback()

    def cancel(self) -> None:
        """Prevent the callback from running. No-op once fired."""
        if not self.pending:
            return
        self.cancelled = True
        if self._cancel_fn:
            self._cancel_fn()


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        ...


class GLibScheduler:
    """Scheduler backed by GLib.timeout_add on the default main context."""

    def __init__(self):
        from gi.repository import GLib
        self._glib = GLib

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        task = None

        def _fire() -> bool:
            task.run()
            return False  # Don't repeat

        source_id = self._glib.timeout_add(delay_ms, _fire)

        def _remove():
            self._glib.source_remove(source_id)
            logger.debug(f"Cancelled timeout source {source_id}")

        task = ScheduledTask(callback, _remove)
        return task
