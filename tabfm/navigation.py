"""Tabs, per-tab history stacks, and every navigation transition rule.

``NavigationState`` is owned by the event-loop driver and only changes
through ``apply`` (actions) and ``resolve_pending_activation`` (the deferred
half of ``Activate``). Directory listing is the one other writer, through
``DirectoryCache.populate`` on the active working directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .actions import Action
from .launcher import Launcher
from .model.types import NotListed, WorkingDirectory

logger = logging.getLogger(__name__)


def default_root() -> Path:
    """Filesystem root of the drive holding the current directory."""
    try:
        return Path(Path.cwd().anchor)
    except OSError:
        return Path(Path.home().anchor)


@dataclass
class Tab:
    """One independent browsing context."""

    cwd: WorkingDirectory
    history_backward: list[WorkingDirectory] = field(default_factory=list)
    history_forward: list[WorkingDirectory] = field(default_factory=list)
    activation_pending: bool = field(default=False, compare=False)

    @classmethod
    def at(cls, path: Path) -> Tab:
        return cls(cwd=WorkingDirectory(path=Path(path)))

    def copy(self) -> Tab:
        return Tab(
            cwd=self.cwd.copy(),
            history_backward=[entry.copy() for entry in self.history_backward],
            history_forward=[entry.copy() for entry in self.history_forward],
        )

    @property
    def label(self) -> str:
        return self.cwd.path.name or str(self.cwd.path)

    def move_cursor(self, delta: int) -> bool:
        cwd = self.cwd
        if delta > 0:
            last = len(cwd.children) - 1
            if cwd.cursor >= last:
                return False
            cwd.cursor = min(cwd.cursor + delta, last)
            return True
        if cwd.cursor <= 0:
            return False
        cwd.cursor = max(0, cwd.cursor + delta)
        return True

    def enter(self, directory: WorkingDirectory) -> None:
        """Push the current directory onto the back stack and switch to ``directory``.

        Forward history is left untouched.
        """
        self.history_backward.append(self.cwd)
        self.cwd = directory

    def go_back(self) -> bool:
        if not self.history_backward:
            return False
        target = self.history_backward.pop()
        self.history_forward.append(self.cwd)
        self.cwd = target
        return True

    def go_forward(self) -> bool:
        if not self.history_forward:
            return False
        target = self.history_forward.pop()
        self.history_backward.append(self.cwd)
        self.cwd = target
        return True

    def go_to_parent(self) -> bool:
        path = self.cwd.path
        parent = path.parent
        if parent == path:
            return False
        self.enter(WorkingDirectory(path=parent, listing=NotListed(), cursor=0))
        return True

    def open_path(self, path: Path) -> bool:
        """Navigate to an arbitrary directory as a fresh visit."""
        path = Path(path)
        if path == self.cwd.path:
            return False
        self.enter(WorkingDirectory(path=path))
        return True


class NavigationState:
    """Ordered, never-empty collection of tabs plus the active-tab index."""

    def __init__(self, tabs: list[Tab], active_tab: int = 0) -> None:
        if not tabs:
            raise ValueError("NavigationState requires at least one tab")
        self._tabs = list(tabs)
        self._active_tab = min(max(0, active_tab), len(self._tabs) - 1)

    @classmethod
    def default(cls, root: Path | None = None) -> NavigationState:
        return cls([Tab.at(root if root is not None else default_root())])

    @property
    def tabs(self) -> tuple[Tab, ...]:
        return tuple(self._tabs)

    @property
    def active_tab(self) -> int:
        return self._active_tab

    @property
    def current(self) -> Tab:
        return self._tabs[self._active_tab]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavigationState):
            return NotImplemented
        return self._active_tab == other._active_tab and self._tabs == other._tabs

    def __repr__(self) -> str:
        return f"NavigationState(tabs={self._tabs!r}, active_tab={self._active_tab})"

    def working_directories(self) -> Iterator[WorkingDirectory]:
        """Current directory of every tab."""
        for tab in self._tabs:
            yield tab.cwd

    def select_tab(self, index: int) -> bool:
        if not 0 <= index < len(self._tabs) or index == self._active_tab:
            return False
        # A pending activation belongs to the frame of the tab being left.
        self.current.activation_pending = False
        self._active_tab = index
        return True

    def new_tab(self) -> None:
        """Append a copy of the active tab; the active index does not move."""
        self._tabs.append(self.current.copy())

    def close_tab(self) -> bool:
        """Close the active tab. The last remaining tab is never closed."""
        if len(self._tabs) <= 1:
            return False
        del self._tabs[self._active_tab]
        if self._active_tab >= len(self._tabs):
            self._active_tab = len(self._tabs) - 1
        return True

    def apply(self, action: Action, launcher: Launcher) -> bool:
        """Apply one action and return whether persisted state changed."""
        tab = self.current
        if action is Action.MOVE_DOWN:
            return tab.move_cursor(1)
        if action is Action.MOVE_UP:
            return tab.move_cursor(-1)
        if action is Action.ACTIVATE:
            tab.activation_pending = True
            return False
        if action is Action.NAVIGATE_BACK:
            return tab.go_back()
        if action is Action.NAVIGATE_FORWARD:
            return tab.go_forward()
        if action is Action.PARENT_DIRECTORY:
            return tab.go_to_parent()
        if action is Action.TAB_PREV:
            return self.select_tab(self._active_tab - 1)
        if action is Action.TAB_NEXT:
            return self.select_tab(self._active_tab + 1)
        if action is Action.TAB_NEW:
            self.new_tab()
            return True
        if action is Action.TAB_CLOSE:
            return self.close_tab()
        if action is Action.OPEN_IN_SYSTEM_EXPLORER:
            launcher.open_containing_folder(tab.cwd.path)
            return False
        if action is Action.OPEN_SHELL_HERE:
            launcher.open_shell_at(tab.cwd.path)
            return False
        # Tick, Help and Quit belong to the surrounding UI.
        return False

    def resolve_pending_activation(self, launcher: Launcher) -> bool:
        """Resolve a pending ``Activate`` on the active tab.

        Directories are entered with an unlisted listing and the outgoing
        cursor; files go to the launcher and leave state untouched. Returns
        whether persisted state changed.
        """
        tab = self.current
        if not tab.activation_pending:
            return False
        tab.activation_pending = False
        entry = tab.cwd.selected_entry()
        if entry is None:
            return False
        logger.debug("activating %s", entry.path)
        if entry.is_dir:
            tab.enter(WorkingDirectory(path=entry.path, listing=NotListed(), cursor=tab.cwd.cursor))
            return True
        launcher.launch_path(entry.path)
        return False


__all__ = ["default_root", "Tab", "NavigationState"]
