"""Tests for the view projection and the ANSI frame painter."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from tabfm.actions import Action
from tabfm.errors import DirectoryError, DirectoryErrorKind
from tabfm.model.fs import DirectoryCache
from tabfm.model.types import DirEntry, Listed, ListingFailed, Loading, WorkingDirectory
from tabfm.navigation import NavigationState, Tab
from tabfm.render import build_frame, clip_text, visible_window
from tabfm.view import Row, TabLabel, ViewModel, entry_icon, render


def _cache(*entries: DirEntry) -> DirectoryCache:
    return DirectoryCache(mock.Mock(return_value=entries))


class RenderTests(unittest.TestCase):
    def test_render_populates_unlisted_active_directory(self) -> None:
        state = NavigationState.default(Path("/"))
        cache = _cache(DirEntry(Path("/a"), is_dir=True), DirEntry(Path("/b.png"), is_dir=False))

        view = render(state, cache)

        self.assertEqual(view.path_text, str(Path("/")))
        self.assertEqual(view.rows, (Row("📂 a", is_highlighted=True), Row("🖼 b.png")))
        self.assertIsInstance(state.current.cwd.listing, Listed)

    def test_render_without_cache_does_not_mutate_state(self) -> None:
        state = NavigationState.default(Path("/"))
        view = render(state)
        self.assertEqual(view.rows, (Row("loading…"),))
        self.assertFalse(isinstance(state.current.cwd.listing, Listed))

    def test_tab_labels_use_final_path_segment(self) -> None:
        state = NavigationState(
            [Tab.at(Path("/home/user/projects")), Tab.at(Path("/"))],
            active_tab=1,
        )
        view = render(state)
        self.assertEqual(
            view.tabs,
            (TabLabel("projects", is_active=False), TabLabel(str(Path("/")), is_active=True)),
        )

    def test_highlight_follows_cursor(self) -> None:
        state = NavigationState.default(Path("/"))
        cache = _cache(DirEntry(Path("/x"), is_dir=False), DirEntry(Path("/y"), is_dir=False))
        render(state, cache)
        state.apply(Action.MOVE_DOWN, mock.Mock())
        view = render(state, cache)
        self.assertEqual([row.is_highlighted for row in view.rows], [False, True])

    def test_failed_listing_renders_error_row(self) -> None:
        error = DirectoryError(DirectoryErrorKind.PERMISSION_DENIED, Path("/root"), "Permission denied")
        state = NavigationState([Tab(cwd=WorkingDirectory(path=Path("/root"), listing=ListingFailed(error)))])
        view = render(state, _cache())
        self.assertEqual(len(view.rows), 1)
        self.assertTrue(view.rows[0].is_error)
        self.assertIn("permission_denied", view.rows[0].text)

    def test_directory_path_with_nul_byte_renders_error_row(self) -> None:
        state = NavigationState.default(Path("/tmp/a\x00b"))
        view = render(state, DirectoryCache())
        self.assertEqual(len(view.rows), 1)
        self.assertTrue(view.rows[0].is_error)
        self.assertIsInstance(state.current.cwd.listing, ListingFailed)

    def test_empty_and_loading_directories_are_distinguished(self) -> None:
        empty = NavigationState([Tab(cwd=WorkingDirectory(path=Path("/e"), listing=Listed(())))])
        loading = NavigationState([Tab(cwd=WorkingDirectory(path=Path("/l"), listing=Loading(1)))])
        self.assertEqual(render(empty).rows, (Row("(empty)"),))
        self.assertEqual(render(loading).rows, (Row("loading…"),))

    def test_status_reports_tab_and_history_depth(self) -> None:
        state = NavigationState.default(Path("/"))
        state.new_tab()
        self.assertEqual(render(state).status, "tab 1/2  back 0  forward 0")


class EntryIconTests(unittest.TestCase):
    def test_icons(self) -> None:
        self.assertEqual(entry_icon(DirEntry(Path("/d"), is_dir=True)), "📂")
        self.assertEqual(entry_icon(DirEntry(Path("/song.MP3"), is_dir=False)), "🎹")
        self.assertEqual(entry_icon(DirEntry(Path("/.bashrc"), is_dir=False)), "⚙")
        self.assertEqual(entry_icon(DirEntry(Path("/readme"), is_dir=False)), "📃")

    def test_mp3_rule_wins_over_hidden_and_hidden_over_extensions(self) -> None:
        self.assertEqual(entry_icon(DirEntry(Path("/.mp3"), is_dir=False)), "🎹")
        self.assertEqual(entry_icon(DirEntry(Path("/.foo.exe"), is_dir=False)), "⚙")
        self.assertEqual(entry_icon(DirEntry(Path("/setup.exe"), is_dir=False)), "💾")
        self.assertEqual(entry_icon(DirEntry(Path("/bundle.zip"), is_dir=False)), "🗜")


class FrameTests(unittest.TestCase):
    def _view(self, count: int, highlighted: int) -> ViewModel:
        rows = tuple(Row(f"row{idx}", is_highlighted=idx == highlighted) for idx in range(count))
        return ViewModel(tabs=(TabLabel("t", True),), path_text="/p", rows=rows, status="s")

    def test_frame_has_exact_line_count(self) -> None:
        frame = build_frame(self._view(3, 0), columns=40, lines=10)
        self.assertEqual(len(frame), 10)

    def test_frame_scrolls_to_keep_highlight_visible(self) -> None:
        frame = build_frame(self._view(50, 40), columns=40, lines=10)
        self.assertTrue(any("row40" in line for line in frame))
        self.assertFalse(any("row0\033" in line or line == "row0" for line in frame))

    def test_help_overlay_adds_lines(self) -> None:
        frame = build_frame(self._view(1, 0), columns=80, lines=20, show_help=True)
        self.assertTrue(any("KEYS" in line for line in frame))

    def test_visible_window(self) -> None:
        self.assertEqual(visible_window(5, 4, 10), (0, 5))
        self.assertEqual(visible_window(100, 0, 10), (0, 10))
        self.assertEqual(visible_window(100, 99, 10), (90, 100))
        self.assertEqual(visible_window(100, 50, 10), (45, 55))

    def test_clip_text_respects_wide_characters(self) -> None:
        self.assertEqual(clip_text("abcdef", 4), "abc…")
        self.assertEqual(clip_text("📂 folder", 2), "📂")
        self.assertEqual(clip_text("abc", 0), "")


if __name__ == "__main__":
    unittest.main()
