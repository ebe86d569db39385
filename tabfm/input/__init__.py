"""Input-layer public API: key decoding and key-to-action resolution."""

from __future__ import annotations

from ..actions import Action
from .bindings import BindingsLoader, KeyBindings, KeyComboBinding, bindings_from_config
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key


def resolve(key: str, bindings: KeyBindings) -> Action | None:
    """Map one key token to its bound action; unknown keys give ``None``."""
    if not key:
        return None
    return bindings.lookup(key)


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "read_key",
    "resolve",
    "KeyComboBinding",
    "KeyBindings",
    "BindingsLoader",
    "bindings_from_config",
]
