"""Tests for the event-loop driver: key handling, persistence, and the run loop."""

from __future__ import annotations

import contextlib
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tabfm.app import FileBrowserApp
from tabfm.input import BindingsLoader
from tabfm.model.fs import DirectoryCache
from tabfm.navigation import NavigationState
from tabfm.settings import SettingsStore


class _FakeTerminal:
    stdin_fd = 0

    def __init__(self) -> None:
        self.writes: list[str] = []

    @contextlib.contextmanager
    def raw_mode(self):
        yield

    def size(self) -> tuple[int, int]:
        return 60, 12

    def write(self, text: str) -> None:
        self.writes.append(text)


class FileBrowserAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        base = Path(self._tmp.name)
        self.root = base / "browse"
        self.root.mkdir()
        (self.root / "sub").mkdir()
        (self.root / "sub" / "inner.txt").write_text("x", encoding="utf-8")
        (self.root / "file.txt").write_text("hello", encoding="utf-8")
        self.settings_path = base / "state" / "settings.json"
        self.launcher = mock.Mock()
        self.app = FileBrowserApp(
            state=NavigationState.default(self.root),
            store=SettingsStore(self.settings_path),
            cache=DirectoryCache(),
            launcher=self.launcher,
            bindings=BindingsLoader(base / "keys.json"),
        )

    def _saved(self) -> dict:
        return json.loads(self.settings_path.read_text(encoding="utf-8"))

    def _index_of(self, name: str) -> int:
        children = self.app.state.current.cwd.children
        return [entry.path.name for entry in children].index(name)

    def _select(self, name: str) -> None:
        self.app.view()
        target = self._index_of(name)
        while self.app.state.current.cwd.cursor < target:
            self.app.handle_key("j")
        while self.app.state.current.cwd.cursor > target:
            self.app.handle_key("k")

    def test_first_view_lists_and_persists(self) -> None:
        self.app.view()
        self.app.update()
        self.assertEqual(len(self.app.state.current.cwd.children), 2)
        self.assertEqual(len(self._saved()["tabs"][0]["cwd"]["children"]), 2)

    def test_enter_on_directory_descends_after_update(self) -> None:
        self._select("sub")
        self.app.handle_key("ENTER")
        self.assertEqual(self.app.state.current.cwd.path, self.root)
        self.app.update()
        self.assertEqual(self.app.state.current.cwd.path, self.root / "sub")
        self.assertEqual(self._saved()["tabs"][0]["cwd"]["path"], str(self.root / "sub"))

        frame = self.app.frame(60, 12)
        self.assertTrue(any("inner.txt" in line for line in frame))

    def test_enter_on_file_uses_launcher(self) -> None:
        self._select("file.txt")
        self.app.handle_key("ENTER")
        self.app.update()
        self.launcher.launch_path.assert_called_once_with(self.root / "file.txt")
        self.assertEqual(self.app.state.current.cwd.path, self.root)

    def test_history_keys_round_trip(self) -> None:
        self._select("sub")
        self.app.handle_key("ENTER")
        self.app.update()
        self.app.view()
        self.app.handle_key("ALT_LEFT")
        self.assertEqual(self.app.state.current.cwd.path, self.root)
        self.app.handle_key("ALT_RIGHT")
        self.assertEqual(self.app.state.current.cwd.path, self.root / "sub")

    def test_help_and_quit_do_not_touch_state(self) -> None:
        self.assertFalse(self.app.handle_key("?"))
        self.assertTrue(self.app.show_help)
        self.assertTrue(self.app.handle_key("q"))
        self.assertFalse(self.app.store.dirty)

    def test_unbound_key_is_ignored(self) -> None:
        self.assertFalse(self.app.handle_key("Z"))
        self.assertEqual(len(self.app.state.tabs), 1)

    def test_run_loop_applies_keys_and_saves_on_exit(self) -> None:
        keys = iter(["t", "", "RIGHT", "q"])
        terminal = _FakeTerminal()

        self.app.run(terminal, read_key_fn=lambda fd, timeout_ms=None: next(keys))

        self.assertTrue(terminal.writes)
        saved = self._saved()
        self.assertEqual(len(saved["tabs"]), 2)
        self.assertEqual(saved["active_tab"], 1)

    def test_run_loop_saves_when_interrupted(self) -> None:
        def interrupt(fd, timeout_ms=None):
            raise KeyboardInterrupt

        self.app.run(_FakeTerminal(), read_key_fn=interrupt)
        self.assertEqual(self._saved()["tabs"][0]["cwd"]["path"], str(self.root))


if __name__ == "__main__":
    unittest.main()
