"""
Overlay Controller - Owns the overlay state and wires host, keyboard and
focus events to the visibility state machine and the match pipeline.

Data flow:
  host hook -> show -> view focuses input -> set_query() -> matches
  Escape / blur -> hide -> (after delay) host toggle + input reset

The state object is observable: the panel subscribes to it and redraws
whatever changed.
"""

from typing import Any, Callable, Optional

from loguru import logger

from .catalog.entries import build_asset_table, ingest_catalog
from .host import HostBridge
from .search.matching import Match, MatchMode, MatchPipeline
from .services.visibility import DEFAULT_HIDE_DELAY_MS, VisibilityController
from .utils.helpers import launch_target

INPUT_FIELD = "input"

StateListener = Callable[["OverlayState", set], None]


class OverlayState:
    """
    Observable overlay state.

    Attributes:
        query: Current search text
        matches: Matches for `query` against the current catalog
        visible: Whether the overlay is (or is animating to be) on screen
        view: The active presentation, None before the first attach
        entries: Current catalog snapshot
        assets: Asset table that came with the catalog
    """

    FIELDS = ("query", "matches", "visible", "view", "entries", "assets")

    def __init__(self):
        self.query: str = ""
        self.matches: list[Match] = []
        self.visible: bool = False
        self.view: Any = None
        self.entries: list = []
        self.assets: list = []
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called as listener(state, changed_fields).

        Returns:
            A function that unsubscribes the listener
        """
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def update(self, **changes) -> None:
        """Set fields and notify listeners once."""
        for name, value in changes.items():
            if name not in self.FIELDS:
                raise AttributeError(f"OverlayState has no field '{name}'")
            setattr(self, name, value)

        changed = set(changes)
        for listener in list(self._listeners):
            try:
                listener(self, changed)
            except Exception:
                logger.exception(f"State listener failed on {sorted(changed)}")


class OverlayController:
    """
    Top-level orchestrator for the overlay.

    Args:
        host: Host bridge (hook, catalog pushes, toggle codes)
        engine: Optional ranked search engine; without one, matching runs
                locally over the pushed catalog
        scheduler: Timer source for the hide animation (GLib by default)
        pipeline: Match pipeline (prefix matching by default)
        hide_delay_ms: Dismissal animation length
    """

    def __init__(
        self,
        host: HostBridge,
        engine=None,
        scheduler=None,
        pipeline: Optional[MatchPipeline] = None,
        hide_delay_ms: int = DEFAULT_HIDE_DELAY_MS,
    ):
        if scheduler is None:
            from .services.scheduler import GLibScheduler
            scheduler = GLibScheduler()

        self.host = host
        self.engine = engine
        self.pipeline = pipeline if pipeline is not None else MatchPipeline()
        self.state = OverlayState()
        self.visibility = VisibilityController(
            host,
            scheduler,
            on_visible=self._set_visible,
            on_reset=self._reset_input,
            hide_delay_ms=hide_delay_ms,
        )
        self._attached = False

    @classmethod
    def from_settings(cls, host: HostBridge, settings: dict, engine=None, scheduler=None) -> "OverlayController":
        """Build a controller from the [overlay] settings section."""
        overlay = settings["overlay"]

        try:
            mode = MatchMode(overlay["match_mode"])
        except ValueError:
            logger.warning(f"Unknown match_mode '{overlay['match_mode']}', using prefix")
            mode = MatchMode.PREFIX

        pipeline = MatchPipeline(
            mode=mode,
            show_all_on_empty=overlay["empty_query"] != "none",
            max_results=overlay["local_max_results"] or None,
        )
        return cls(host, engine=engine, scheduler=scheduler, pipeline=pipeline,
                   hide_delay_ms=overlay["hide_delay_ms"])

    # Lifecycle

    def attach(self) -> None:
        """Register with the host. Undone by detach()."""
        if self._attached:
            return
        self.host.hook(self.on_hook)
        self.host.subscribe_catalog(self.on_catalog)
        self._attached = True
        self.recompute()

    def detach(self) -> None:
        """Unregister from the host, drop pending timers, release assets."""
        if self._attached:
            self.host.unhook(self.on_hook)
            self.host.unsubscribe_catalog(self.on_catalog)
            self._attached = False
        self.visibility.teardown()
        self.pipeline.cache.clear()

    def __enter__(self):
        self.attach()
        return self

    def __exit__(self, *exc):
        self.detach()
        return False

    def attach_view(self, view) -> None:
        """Set the presentation that receives focus/select/reset commands."""
        self.state.update(view=view)

    # Host events

    def on_hook(self) -> None:
        """Hotkey pressed: open the overlay and focus the input."""
        self.visibility.show()
        self._view_call("focus", INPUT_FIELD)

    def on_catalog(self, raw, links=None, assets=None) -> None:
        """Replace the catalog, drop cached assets, rematch the current query."""
        entries = ingest_catalog(raw, links)
        table = build_asset_table(assets)

        self.pipeline.cache.clear()
        if self.engine is not None and hasattr(self.engine, "replace"):
            self.engine.replace(entries, table)

        self.state.update(entries=entries, assets=table)
        self.recompute()

    # Input

    def set_query(self, query: str) -> None:
        self.state.update(query=query)
        self.recompute()

    def recompute(self) -> None:
        """Recompute matches for the current query."""
        self.state.update(matches=self._compute_matches(self.state.query))

    def _compute_matches(self, query: str) -> list[Match]:
        if self.engine is not None:
            return self.pipeline.search(query, self.engine)
        return self.pipeline.match(query, self.state.entries, self.state.assets)

    def handle_key(self, key: str) -> bool:
        """
        Handle a key press from the window.

        Returns:
            True if the key was consumed (default action suppressed)
        """
        if key == "Escape":
            self.hide(True)
            return True

        if key == "ArrowUp":
            self._view_call("select", -1)
            return True

        if key == "ArrowDown":
            self._view_call("select", 1)
            return True

        return False

    def on_blur(self) -> None:
        self.hide(True)

    def on_focus(self) -> None:
        self._view_call("focus", INPUT_FIELD)

    def hide(self, restore: bool = True, callback: Optional[Callable[[], None]] = None) -> bool:
        return self.visibility.hide(restore, callback)

    def activate(self, index: int) -> bool:
        """
        Launch the match at `index` once the overlay has closed.

        Focus is not restored, since the launched program takes it.
        """
        matches = self.state.matches
        if not 0 <= index < len(matches):
            return False

        entry = matches[index].target
        return self.hide(False, callback=lambda: launch_target(entry))

    # Visibility callbacks

    def _set_visible(self, visible: bool) -> None:
        self.state.update(visible=visible)

    def _reset_input(self) -> None:
        self.state.update(query="", matches=self._compute_matches(""))
        self._view_call("reset")

    def _view_call(self, method: str, *args) -> None:
        view = self.state.view
        if view is None:
            return
        try:
            getattr(view, method)(*args)
        except Exception:
            logger.exception(f"View {method}{args} failed")
