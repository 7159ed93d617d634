"""
Tests for launching catalog targets.
"""

import subprocess
from unittest.mock import patch

from quicksearch.catalog.entries import Entry
from quicksearch.utils.helpers import launch_target


class TestLaunchTarget:
    def test_spawns_target_argv(self):
        entry = Entry(names=("Files",), target=("nautilus", "--new-window"))
        with patch("quicksearch.utils.helpers.subprocess.Popen") as popen:
            assert launch_target(entry) is True
        args, kwargs = popen.call_args
        assert args[0] == ["nautilus", "--new-window"]
        assert kwargs["stdout"] is subprocess.DEVNULL
        assert kwargs["start_new_session"] is True

    def test_no_target(self):
        with patch("quicksearch.utils.helpers.subprocess.Popen") as popen:
            assert launch_target(Entry(names=("Docs",))) is False
        popen.assert_not_called()

    def test_spawn_failure_is_reported(self):
        entry = Entry(names=("Ghost",), target=("does-not-exist",))
        with patch("quicksearch.utils.helpers.subprocess.Popen", side_effect=FileNotFoundError):
            assert launch_target(entry) is False
