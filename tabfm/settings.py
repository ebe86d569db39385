"""Persistent JSON settings holding the whole navigation state.

Loading never fails the caller: a missing or malformed file yields the
default single-tab state. Saving rewrites the whole file through a temporary
file and ``os.replace`` so a crash mid-write cannot truncate it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from platformdirs import user_state_dir

from .errors import DirectoryError, DirectoryErrorKind, SettingsError, SettingsErrorKind
from .model.types import DirEntry, Listed, ListingFailed, NotListed, WorkingDirectory
from .navigation import NavigationState, Tab

logger = logging.getLogger(__name__)

APP_NAME = "tabfm"
SETTINGS_FILENAME = "settings.json"
SETTINGS_VERSION = 1
SETTINGS_ENV_VAR = "TABFM_SETTINGS"
DEFAULT_SETTINGS_PATH = Path(user_state_dir(APP_NAME, appauthor=False)) / SETTINGS_FILENAME


def default_settings_path() -> Path:
    """Settings path from ``$TABFM_SETTINGS`` or the per-user state dir."""
    override = os.environ.get(SETTINGS_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return DEFAULT_SETTINGS_PATH


def _coerce_nonnegative_int(value: object) -> int:
    """Booleans and non-integers are invalid and coerce to ``0``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def _entry_to_json(entry: DirEntry) -> dict[str, object]:
    data: dict[str, object] = {"path": str(entry.path), "is_dir": entry.is_dir}
    if entry.size is not None:
        data["size"] = entry.size
    return data


def _entry_from_json(raw: object) -> DirEntry | None:
    if not isinstance(raw, dict):
        return None
    path = raw.get("path")
    if not isinstance(path, str) or not path:
        return None
    size = raw.get("size")
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        size = None
    return DirEntry(path=Path(path), is_dir=raw.get("is_dir") is True, size=size)


def working_directory_to_json(directory: WorkingDirectory) -> dict[str, object]:
    """Serialize one working directory. ``Loading`` is stored as not listed."""
    listing = directory.listing
    error: dict[str, str] | None = None
    if isinstance(listing, ListingFailed):
        error = {"kind": listing.error.kind.value, "message": listing.error.message}
    return {
        "path": str(directory.path),
        "children": [_entry_to_json(entry) for entry in directory.children],
        "cursor": max(0, directory.cursor),
        "listed": isinstance(listing, (Listed, ListingFailed)),
        "error": error,
    }


def working_directory_from_json(raw: object) -> WorkingDirectory | None:
    """Parse one working directory, or ``None`` when it is unusable."""
    if not isinstance(raw, dict):
        return None
    raw_path = raw.get("path")
    if not isinstance(raw_path, str) or not raw_path or "\x00" in raw_path:
        return None
    path = Path(raw_path)

    raw_children = raw.get("children", [])
    if not isinstance(raw_children, list):
        raw_children = []
    entries = tuple(entry for entry in map(_entry_from_json, raw_children) if entry is not None)

    raw_error = raw.get("error")
    raw_listed = raw.get("listed")
    if isinstance(raw_error, dict):
        try:
            kind = DirectoryErrorKind(raw_error.get("kind"))
        except ValueError:
            kind = DirectoryErrorKind.OTHER
        message = raw_error.get("message")
        listing = ListingFailed(DirectoryError(kind, path, message if isinstance(message, str) else ""))
    elif raw_listed is True or (raw_listed is None and entries):
        listing = Listed(entries)
    else:
        listing = NotListed()

    directory = WorkingDirectory(path=path, listing=NotListed(), cursor=_coerce_nonnegative_int(raw.get("cursor")))
    directory.set_listing(listing)
    return directory


def _history_from_json(raw: object) -> list[WorkingDirectory]:
    if not isinstance(raw, list):
        return []
    history = [working_directory_from_json(item) for item in raw]
    return [item for item in history if item is not None]


def tab_to_json(tab: Tab) -> dict[str, object]:
    return {
        "cwd": working_directory_to_json(tab.cwd),
        "history_backward": [working_directory_to_json(item) for item in tab.history_backward],
        "history_forward": [working_directory_to_json(item) for item in tab.history_forward],
    }


def tab_from_json(raw: object) -> Tab | None:
    if not isinstance(raw, dict):
        return None
    cwd = working_directory_from_json(raw.get("cwd"))
    if cwd is None:
        return None
    return Tab(
        cwd=cwd,
        history_backward=_history_from_json(raw.get("history_backward")),
        history_forward=_history_from_json(raw.get("history_forward")),
    )


def state_to_json(state: NavigationState) -> dict[str, object]:
    return {
        "version": SETTINGS_VERSION,
        "active_tab": state.active_tab,
        "tabs": [tab_to_json(tab) for tab in state.tabs],
    }


def state_from_json(data: object) -> NavigationState:
    """Build a navigation state from decoded JSON.

    Raises ``ValueError`` when no usable tab can be recovered.
    """
    if not isinstance(data, dict):
        raise ValueError("settings root is not a JSON object")
    raw_tabs = data.get("tabs")
    if not isinstance(raw_tabs, list):
        raise ValueError("settings have no tab list")
    tabs = [tab for tab in map(tab_from_json, raw_tabs) if tab is not None]
    if not tabs:
        raise ValueError("settings contain no valid tab")
    return NavigationState(tabs, active_tab=_coerce_nonnegative_int(data.get("active_tab")))


class SettingsStore:
    """Reads and writes the settings file; tracks unsaved changes."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()
        self.dirty = False
        self.last_error: SettingsError | None = None

    def load(self) -> NavigationState:
        """Load saved state, falling back to the default state on any failure."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.last_error = SettingsError(SettingsErrorKind.NOT_FOUND, self.path)
            logger.debug("no settings at %s, using default state", self.path)
            return NavigationState.default()
        except (OSError, UnicodeDecodeError) as exc:
            return self._parse_failure(exc)

        try:
            state = state_from_json(json.loads(text))
        except (ValueError, RecursionError) as exc:
            # json.JSONDecodeError is a ValueError; deep nesting overflows the decoder.
            return self._parse_failure(exc)
        self.last_error = None
        return state

    def _parse_failure(self, exc: Exception) -> NavigationState:
        self.last_error = SettingsError(SettingsErrorKind.PARSE_FAILURE, self.path, str(exc))
        logger.warning("ignoring unreadable settings %s: %s", self.path, exc)
        return NavigationState.default()

    def save(self, state: NavigationState) -> SettingsError | None:
        """Rewrite the settings file with ``state``.

        Returns the ``SettingsError`` on failure instead of raising; the error
        is also logged and kept in ``last_error``.
        """
        payload = json.dumps(state_to_json(state), indent=2) + "\n"
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            error = SettingsError(SettingsErrorKind.WRITE_FAILURE, self.path, str(exc))
            self.last_error = error
            logger.error("failed to save settings to %s: %s", self.path, exc)
            return error
        self.dirty = False
        self.last_error = None
        return None

    def mark_dirty(self) -> None:
        self.dirty = True

    def flush(self, state: NavigationState) -> SettingsError | None:
        """Save only when something changed since the last successful save."""
        if not self.dirty:
            return None
        return self.save(state)


__all__ = [
    "APP_NAME",
    "DEFAULT_SETTINGS_PATH",
    "SETTINGS_ENV_VAR",
    "default_settings_path",
    "working_directory_to_json",
    "working_directory_from_json",
    "tab_to_json",
    "tab_from_json",
    "state_to_json",
    "state_from_json",
    "SettingsStore",
]
