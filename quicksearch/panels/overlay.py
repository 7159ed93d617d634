"""
Overlay Panel - Floating search entry with highlighted results.

Features:
- Search entry feeding the controller's query
- Results with icon, highlighted name and details
- Arrow keys move the selection, Enter launches, Escape dismisses
- Fades out while the controller's hide delay runs
- Focus loss dismisses the overlay
"""

from gi.repository import Gdk, GdkPixbuf, GLib, Gtk
from ignis import widgets
from loguru import logger

from ..controller import INPUT_FIELD
from ..services.assets import AssetHandle

_KEY_NAMES = {
    Gdk.KEY_Escape: "Escape",
    Gdk.KEY_Up: "ArrowUp",
    Gdk.KEY_Down: "ArrowDown",
}


def _highlight_markup(text: str, span: tuple[int, int]) -> str:
    """Pango markup for `text` with the span in bold."""
    start, length = span
    start = max(0, min(start, len(text)))
    end = max(start, min(start + length, len(text)))
    return (
        GLib.markup_escape_text(text[:start])
        + "<b>" + GLib.markup_escape_text(text[start:end]) + "</b>"
        + GLib.markup_escape_text(text[end:])
    )


def _handle_to_texture(handle: AssetHandle) -> Gdk.Texture | None:
    """Convert a decoded asset to a Gdk.Texture."""
    img = handle.image
    if img is None:
        return None
    rgba = img.convert("RGBA")
    width, height = rgba.size
    pixbuf = GdkPixbuf.Pixbuf.new_from_data(
        rgba.tobytes(),
        GdkPixbuf.Colorspace.RGB,
        True,
        8,
        width,
        height,
        width * 4,
    )
    return Gdk.Texture.new_for_pixbuf(pixbuf)


class OverlayPanel:
    """
    View for the overlay controller.

    Implements the view commands the controller issues:
    focus(field), select(direction), reset().
    """

    def __init__(self, controller, settings: dict):
        self.controller = controller
        self.panel_settings = settings["panel"]

        # Widgets (created in create_window)
        self.window = None
        self.search_entry = None
        self.results_box = None

        # Keyboard navigation
        self.selected_index = -1
        self.result_buttons = []

        # Textures keyed by handle uri; dropped when the catalog changes
        self._textures: dict[str, Gdk.Texture | None] = {}
        self._unsubscribe = None

    def create_window(self):
        """
        Create the overlay window.

        Returns:
            widgets.Window anchored at the top, hidden until the hook fires
        """
        self.search_entry = widgets.Entry(
            placeholder_text="Search...",
            css_classes=["search-entry"],
            on_change=lambda x: self._on_search_changed(),
            on_accept=lambda x: self._on_accept(),
        )

        self.results_box = widgets.Box(
            vertical=True,
            spacing=2,
            css_classes=["search-results"],
        )

        self.window = widgets.Window(
            namespace="quicksearch",
            anchor=["top"],
            exclusivity="ignore",
            kb_mode="exclusive",
            layer="overlay",
            visible=False,
            default_width=self.panel_settings["width"],
            default_height=self.panel_settings["height"],
            child=widgets.Box(
                vertical=True,
                css_classes=["panel", "quicksearch-panel"],
                child=[
                    self.search_entry,
                    widgets.Scroll(vexpand=True, hexpand=True, child=self.results_box),
                ],
            ),
        )

        key_controller = Gtk.EventControllerKey()
        key_controller.connect("key-pressed", self._on_key_press)
        self.window.add_controller(key_controller)

        self.window.connect("notify::is-active", self._on_active_changed)

        self._unsubscribe = self.controller.state.subscribe(self._on_state_changed)
        self.controller.attach_view(self)
        self._update_results(self.controller.state.matches)

        return self.window

    def destroy(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self._textures.clear()

    # View commands

    def focus(self, field: str) -> None:
        if field == INPUT_FIELD and self.search_entry:
            self.search_entry.grab_focus()

    def select(self, direction: int) -> None:
        if not self.result_buttons:
            return
        last = len(self.result_buttons) - 1
        self.selected_index = max(0, min(self.selected_index + direction, last))
        self._update_selection_highlight()

    def reset(self) -> None:
        self.selected_index = -1
        if self.search_entry and self.search_entry.text:
            self.search_entry.set_text("")

    # Controller state

    def _on_state_changed(self, state, changed):
        if "entries" in changed:
            self._textures.clear()
        if "matches" in changed:
            self.selected_index = -1
            self._update_results(state.matches)
        if "visible" in changed and self.window:
            if state.visible:
                self.window.remove_css_class("hiding")
            else:
                # Window stays mapped until the host toggle after the delay
                self.window.add_css_class("hiding")

    def _update_results(self, matches):
        """Rebuild the results list."""
        child = self.results_box.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self.results_box.remove(child)
            child = next_child

        self.result_buttons = []
        for i, match in enumerate(matches):
            button = self._create_result_button(match, i)
            self.results_box.append(button)
            self.result_buttons.append(button)

        self._update_selection_highlight()

    def _create_result_button(self, match, index: int):
        entry = match.target
        display = match.display

        if match.key == display:
            markup = _highlight_markup(display, match.span)
        else:
            # Matched an alias: show it next to the display name
            markup = (
                GLib.markup_escape_text(display)
                + "  <small>" + _highlight_markup(match.key, match.span) + "</small>"
            )

        button = widgets.Button(
            css_classes=["result-item"],
            on_click=lambda x, i=index: self.controller.activate(i),
            child=widgets.Box(
                spacing=10,
                child=[
                    self._icon_widget(entry.display_icon),
                    widgets.Box(
                        vertical=True,
                        child=[
                            widgets.Label(
                                label=markup,
                                use_markup=True,
                                css_classes=["result-name"],
                                halign="start",
                                ellipsize="end",
                                max_width_chars=40,
                            ),
                            widgets.Label(
                                label=entry.details,
                                css_classes=["result-details"],
                                halign="start",
                                ellipsize="middle",
                                max_width_chars=55,
                            ),
                        ],
                    ),
                ],
            ),
        )
        return button

    def _icon_widget(self, icon):
        size = self.panel_settings["icon_size"]

        if isinstance(icon, AssetHandle):
            if icon.uri not in self._textures:
                try:
                    self._textures[icon.uri] = _handle_to_texture(icon)
                except GLib.Error as e:
                    logger.warning(f"Could not build texture for {icon!r}: {e}")
                    self._textures[icon.uri] = None
            texture = self._textures[icon.uri]
            if texture is not None:
                image = Gtk.Image.new_from_paintable(texture)
                image.set_pixel_size(size)
                image.add_css_class("result-icon")
                return image
            icon = "image-missing"

        return widgets.Icon(
            image=icon if isinstance(icon, str) and icon else "application-x-executable",
            pixel_size=size,
            css_classes=["result-icon"],
        )

    def _update_selection_highlight(self):
        for i, button in enumerate(self.result_buttons):
            if i == self.selected_index:
                button.add_css_class("keyboard-selected")
            else:
                button.remove_css_class("keyboard-selected")

    # Window events

    def _on_search_changed(self):
        query = self.search_entry.text
        if query != self.controller.state.query:
            self.controller.set_query(query)

    def _on_accept(self):
        index = self.selected_index if self.selected_index >= 0 else 0
        self.controller.activate(index)

    def _on_key_press(self, controller, keyval, keycode, state):
        name = _KEY_NAMES.get(keyval)
        if name is None:
            return False
        return self.controller.handle_key(name)

    def _on_active_changed(self, window, param):
        if not window.get_visible():
            return
        if window.is_active():
            self.controller.on_focus()
        else:
            self.controller.on_blur()
