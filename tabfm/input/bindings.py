"""Key-binding table: key tokens to logical actions.

Lookups are exact, so a modifier-qualified token (``ALT_LEFT``) never falls
back to its plain counterpart (``LEFT``). The table can be overridden per
action from a JSON file that is re-read whenever it changes on disk.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..actions import Action

logger = logging.getLogger(__name__)

APP_NAME = "tabfm"
KEYS_FILENAME = "keys.json"
KEYS_ENV_VAR = "TABFM_KEYS"
DEFAULT_KEYS_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / KEYS_FILENAME


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action."""

    combos: tuple[str, ...]
    action: Action


DEFAULT_BINDINGS: tuple[KeyComboBinding, ...] = (
    KeyComboBinding(("DOWN", "j"), Action.MOVE_DOWN),
    KeyComboBinding(("UP", "k"), Action.MOVE_UP),
    KeyComboBinding(("ENTER",), Action.ACTIVATE),
    KeyComboBinding(("ALT_LEFT", "ALT_h"), Action.NAVIGATE_BACK),
    KeyComboBinding(("ALT_RIGHT", "ALT_l"), Action.NAVIGATE_FORWARD),
    KeyComboBinding(("ALT_UP", "ALT_k", "BACKSPACE"), Action.PARENT_DIRECTORY),
    KeyComboBinding(("LEFT", "h"), Action.TAB_PREV),
    KeyComboBinding(("RIGHT", "l"), Action.TAB_NEXT),
    KeyComboBinding(("t",), Action.TAB_NEW),
    KeyComboBinding(("w",), Action.TAB_CLOSE),
    KeyComboBinding(("e",), Action.OPEN_IN_SYSTEM_EXPLORER),
    KeyComboBinding(("s",), Action.OPEN_SHELL_HERE),
    KeyComboBinding(("?",), Action.HELP),
    KeyComboBinding(("q", "CTRL_C"), Action.QUIT),
)


class KeyBindings:
    """Small key-dispatch table from key tokens to actions."""

    def __init__(self, bindings: Iterable[KeyComboBinding] = ()) -> None:
        self._actions: dict[str, Action] = {}
        self.register_bindings(*bindings)

    @classmethod
    def defaults(cls) -> KeyBindings:
        return cls(DEFAULT_BINDINGS)

    def register_binding(self, binding: KeyComboBinding) -> KeyBindings:
        """Register one binding, overwriting existing actions for the same combos."""
        for combo in binding.combos:
            self._actions[combo] = binding.action
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyBindings:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def unbind_action(self, action: Action) -> None:
        for combo in [combo for combo, bound in self._actions.items() if bound is action]:
            del self._actions[combo]

    def lookup(self, key: str) -> Action | None:
        return self._actions.get(key)

    def combos_for(self, action: Action) -> tuple[str, ...]:
        return tuple(combo for combo, bound in self._actions.items() if bound is action)


def bindings_from_config(data: object) -> KeyBindings:
    """Defaults overridden per action by a ``{"keybindings": {...}}`` object.

    Each listed action replaces all of its default combos. Unknown action
    names and non-string keys are skipped with a warning.
    """
    bindings = KeyBindings.defaults()
    if not isinstance(data, Mapping):
        return bindings
    overrides = data.get("keybindings")
    if not isinstance(overrides, Mapping):
        return bindings

    for name, raw_keys in overrides.items():
        action = Action.from_name(name) if isinstance(name, str) else None
        if action is None:
            logger.warning("ignoring binding for unknown action %r", name)
            continue
        if isinstance(raw_keys, str):
            raw_keys = [raw_keys]
        if not isinstance(raw_keys, list):
            logger.warning("ignoring malformed binding for %s", action.value)
            continue
        combos = tuple(key for key in raw_keys if isinstance(key, str) and key)
        if len(combos) != len(raw_keys):
            logger.warning("dropping non-string keys bound to %s", action.value)
        bindings.unbind_action(action)
        bindings.register_binding(KeyComboBinding(combos, action))
    return bindings


def default_keys_path() -> Path:
    override = os.environ.get(KEYS_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return DEFAULT_KEYS_PATH


def _safe_mtime_ns(path: Path) -> int | None:
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


class BindingsLoader:
    """Serves the current binding table, reloading when the file changes."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_keys_path()
        self._mtime_ns: int | None = None
        self._bindings = KeyBindings.defaults()
        self._loaded = False

    def _read(self) -> KeyBindings:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return KeyBindings.defaults()
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable key bindings %s: %s", self.path, exc)
            return KeyBindings.defaults()
        return bindings_from_config(data)

    def current(self) -> KeyBindings:
        mtime_ns = _safe_mtime_ns(self.path)
        if not self._loaded or mtime_ns != self._mtime_ns:
            if self._loaded:
                logger.info("reloading key bindings from %s", self.path)
            self._bindings = self._read()
            self._mtime_ns = mtime_ns
            self._loaded = True
        return self._bindings


__all__ = [
    "DEFAULT_BINDINGS",
    "DEFAULT_KEYS_PATH",
    "KeyComboBinding",
    "KeyBindings",
    "bindings_from_config",
    "default_keys_path",
    "BindingsLoader",
]
