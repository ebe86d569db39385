"""Per-platform process launchers for opening files, folders, and shells.

Every launch is fire-and-forget and best-effort: a failure is logged and
reported as ``False`` but never raised into the navigation engine.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class Launcher(Protocol):
    def launch_path(self, path: Path) -> bool: ...

    def open_containing_folder(self, path: Path) -> bool: ...

    def open_shell_at(self, path: Path) -> bool: ...


def _spawn(command: list[str], cwd: Path | None = None) -> bool:
    """Start ``command`` detached from the TUI and return whether it started."""
    if shutil.which(command[0]) is None:
        logger.warning("launcher command not found in PATH: %s", command[0])
        return False
    try:
        subprocess.Popen(
            command,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=os.name != "nt",
        )
    except OSError as exc:
        logger.error("failed to launch %s: %s", command, exc)
        return False
    logger.info("launched %s", command)
    return True


class NullLauncher:
    """Launcher for platforms without a known opener; every call is a no-op."""

    def launch_path(self, path: Path) -> bool:
        logger.info("no launcher available to open %s", path)
        return False

    def open_containing_folder(self, path: Path) -> bool:
        logger.info("no launcher available to open folder %s", path)
        return False

    def open_shell_at(self, path: Path) -> bool:
        logger.info("no launcher available to open shell at %s", path)
        return False


class WindowsLauncher:
    def launch_path(self, path: Path) -> bool:
        # ``start`` treats its first quoted argument as a window title.
        return _spawn(["cmd", "/C", "start", "", str(path)])

    def open_containing_folder(self, path: Path) -> bool:
        return _spawn(["explorer", str(path)])

    def open_shell_at(self, path: Path) -> bool:
        return _spawn(["cmd", "/C", "start", "powershell"], cwd=path)


class MacLauncher:
    def launch_path(self, path: Path) -> bool:
        return _spawn(["open", str(path)])

    def open_containing_folder(self, path: Path) -> bool:
        return _spawn(["open", str(path)])

    def open_shell_at(self, path: Path) -> bool:
        return _spawn(["open", "-a", "Terminal", str(path)])


class XdgLauncher:
    """Launcher for Linux and BSD desktops following freedesktop conventions."""

    def __init__(self, terminal: str | None = None) -> None:
        self.terminal = terminal or os.environ.get("TERMINAL") or "x-terminal-emulator"

    def launch_path(self, path: Path) -> bool:
        return _spawn(["xdg-open", str(path)])

    def open_containing_folder(self, path: Path) -> bool:
        return _spawn(["xdg-open", str(path)])

    def open_shell_at(self, path: Path) -> bool:
        return _spawn([self.terminal], cwd=path)


def select_launcher(platform: str | None = None) -> Launcher:
    """Pick the launcher implementation for ``platform`` (default: this one)."""
    platform = sys.platform if platform is None else platform
    if platform.startswith("win"):
        return WindowsLauncher()
    if platform == "darwin":
        return MacLauncher()
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd")):
        return XdgLauncher()
    return NullLauncher()


__all__ = [
    "Launcher",
    "NullLauncher",
    "WindowsLauncher",
    "MacLauncher",
    "XdgLauncher",
    "select_launcher",
]
