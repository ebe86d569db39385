"""Event-loop driver that owns the navigation state.

One key at a time: resolve it to an action, apply it, persist when the state
changed, then project and paint the next frame.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .actions import Action
from .input import BindingsLoader, read_key, resolve
from .launcher import Launcher
from .model.fs import DirectoryCache
from .navigation import NavigationState
from .render import build_frame, frame_to_ansi
from .settings import SettingsStore
from .terminal import TerminalController
from .view import ViewModel, render

logger = logging.getLogger(__name__)

KEY_POLL_MS = 120


class FileBrowserApp:
    """Single writer of ``NavigationState``; every mutation goes through here."""

    def __init__(
        self,
        state: NavigationState,
        store: SettingsStore,
        cache: DirectoryCache,
        launcher: Launcher,
        bindings: BindingsLoader,
    ) -> None:
        self.state = state
        self.store = store
        self.cache = cache
        self.launcher = launcher
        self.bindings = bindings
        self.show_help = False
        self.dirty = True

    def handle_key(self, key: str) -> bool:
        """Handle one key token and return ``True`` when the app should quit."""
        action = resolve(key, self.bindings.current())
        if action is None:
            if key:
                logger.debug("unbound key %r", key)
            return False
        return self.dispatch(action)

    def dispatch(self, action: Action) -> bool:
        if action is Action.QUIT:
            return True
        if action is Action.TICK:
            return False
        if action is Action.HELP:
            self.show_help = not self.show_help
            self.dirty = True
            return False
        if self.state.apply(action, self.launcher):
            self.store.mark_dirty()
        self.dirty = True
        return False

    def update(self) -> None:
        """Resolve deferred work before painting: activation and listings."""
        if self.state.resolve_pending_activation(self.launcher):
            self.store.mark_dirty()
            self.dirty = True
        if self.cache.apply_completed(self.state.working_directories()):
            self.store.mark_dirty()
            self.dirty = True
        self.store.flush(self.state)

    def view(self) -> ViewModel:
        """Project the state, listing the active directory if needed."""
        cwd = self.state.current.cwd
        before = cwd.listing
        model = render(self.state, self.cache)
        if cwd.listing != before:
            self.store.mark_dirty()
        return model

    def frame(self, columns: int, lines: int) -> list[str]:
        return build_frame(self.view(), columns, lines, show_help=self.show_help)

    def shutdown(self) -> None:
        self.store.mark_dirty()
        self.store.flush(self.state)

    def run(
        self,
        terminal: TerminalController,
        read_key_fn: Callable[..., str] = read_key,
    ) -> None:
        last_size: tuple[int, int] | None = None
        try:
            with terminal.raw_mode():
                while True:
                    self.update()
                    size = terminal.size()
                    if self.dirty or size != last_size:
                        terminal.write(frame_to_ansi(self.frame(*size)))
                        last_size = size
                        self.dirty = False
                        # Listing during the frame may have changed state.
                        self.store.flush(self.state)
                    try:
                        key = read_key_fn(terminal.stdin_fd, timeout_ms=KEY_POLL_MS)
                    except KeyboardInterrupt:
                        break
                    if not key:
                        self.dispatch(Action.TICK)
                        continue
                    if self.handle_key(key):
                        break
        finally:
            self.shutdown()


__all__ = ["FileBrowserApp"]
