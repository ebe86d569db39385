"""Closed set of logical actions consumed by the navigation engine."""

from __future__ import annotations

from enum import Enum


class Action(Enum):
    TICK = "tick"
    HELP = "help"
    QUIT = "quit"
    MOVE_DOWN = "move_down"
    MOVE_UP = "move_up"
    ACTIVATE = "activate"
    NAVIGATE_BACK = "navigate_back"
    NAVIGATE_FORWARD = "navigate_forward"
    PARENT_DIRECTORY = "parent_directory"
    TAB_PREV = "tab_prev"
    TAB_NEXT = "tab_next"
    TAB_NEW = "tab_new"
    TAB_CLOSE = "tab_close"
    OPEN_IN_SYSTEM_EXPLORER = "open_in_system_explorer"
    OPEN_SHELL_HERE = "open_shell_here"

    @classmethod
    def from_name(cls, name: str) -> Action | None:
        """Look up an action by its config name (``"move_down"``), or ``None``."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


__all__ = ["Action"]
