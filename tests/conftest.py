"""
Shared test fixtures for the QuickSearch overlay test suite.

Provides real TOML files, a manually advanced scheduler standing in for
the GLib main loop, an in-process host that records toggle codes, and a
view that records the commands it receives.
"""

import pytest
import toml

from quicksearch.host import InProcessHostBridge
from quicksearch.services.scheduler import ScheduledTask


class ManualScheduler:
    """Scheduler whose clock only moves when the test advances it."""

    def __init__(self):
        self.now = 0
        self._tasks: list[tuple[int, ScheduledTask]] = []

    def schedule(self, delay_ms, callback):
        task = ScheduledTask(callback)
        self._tasks.append((self.now + delay_ms, task))
        return task

    def advance(self, ms):
        self.now += ms
        due = [task for when, task in self._tasks if when <= self.now]
        self._tasks = [(when, task) for when, task in self._tasks if when > self.now]
        for task in due:
            task.run()

    @property
    def pending(self):
        return [task for _when, task in self._tasks if task.pending]


class RecordingView:
    """View that records focus/select/reset commands."""

    def __init__(self):
        self.calls = []

    def focus(self, field):
        self.calls.append(("focus", field))

    def select(self, direction):
        self.calls.append(("select", direction))

    def reset(self):
        self.calls.append(("reset",))

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def toggles():
    """Toggle codes received by the host, in order."""
    return []


@pytest.fixture
def host(toggles):
    return InProcessHostBridge(on_toggle=lambda code: toggles.append(int(code)))


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "overlay": {"hide_delay_ms": 250, "match_mode": "prefix", "empty_query": "all", "max_results": 7},
        "panel": {"width": 640, "height": 420, "icon_size": 32},
        "catalog": {"path": ""},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def tmp_catalog(tmp_path):
    """Create a real catalog TOML file with test entries."""
    catalog_path = tmp_path / "catalog.toml"
    data = {
        "entries": [
            {"names": ["Terminal", "term"], "target": ["foot"], "icon": "utilities-terminal"},
            {"name": "Firefox", "target": ["firefox", "--new-window"]},
            {"names": ["Broken"]},
        ]
    }
    catalog_path.write_text(toml.dumps(data))
    return catalog_path
