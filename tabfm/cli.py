"""Command-line front door for tabfm.

Parses CLI options, configures file logging, restores the saved navigation
state, and dispatches into the interactive browser loop.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from platformdirs import user_log_dir

from .app import FileBrowserApp
from .input import BindingsLoader
from .launcher import select_launcher
from .model.fs import DirectoryCache
from .navigation import NavigationState
from .settings import APP_NAME, SettingsStore, state_to_json
from .terminal import TerminalController

logger = logging.getLogger(__name__)

LOG_FILENAME = "tabfm.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str, log_path: Path | None = None) -> Path | None:
    """Send log records to a file; the terminal belongs to the TUI.

    Returns the log path in use, or ``None`` when the file cannot be opened.
    """
    log_path = log_path if log_path is not None else default_log_path()
    root = logging.getLogger(APP_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:
        print(f"tabfm: cannot open log file {log_path}: {exc}", file=sys.stderr)
        root.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return log_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabfm",
        description="Browse the filesystem in a terminal with tabs and back/forward history.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to open in the active tab.")
    parser.add_argument("--settings", type=Path, default=None, help="Settings file (default: per-user state dir).")
    parser.add_argument("--keys", type=Path, default=None, help="Key-binding JSON file (default: per-user config dir).")
    parser.add_argument("--reset", action="store_true", help="Ignore saved settings and start with one tab.")
    parser.add_argument(
        "--async-listing",
        action="store_true",
        help="List directories on a background thread so slow mounts do not block input.",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Log level for the log file.")
    parser.add_argument("--log-file", type=Path, default=None, help="Log file path (default: per-user log dir).")
    parser.add_argument("--print-state", action="store_true", help="Print the saved navigation state as JSON and exit.")
    return parser


def initial_state(store: SettingsStore, path: Path | None, reset: bool) -> NavigationState:
    state = NavigationState.default() if reset else store.load()
    if path is not None:
        target = path.expanduser().resolve()
        if state.current.open_path(target):
            store.mark_dirty()
    return state


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    path: Path | None = None
    if args.path is not None:
        path = Path(args.path)
        if not path.is_dir():
            raise SystemExit(f"Not a directory: {path}")

    configure_logging(args.log_level, args.log_file)
    store = SettingsStore(args.settings)

    if args.print_state:
        state = initial_state(store, path, args.reset)
        sys.stdout.write(json.dumps(state_to_json(state), indent=2) + "\n")
        return 0

    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise SystemExit("tabfm needs an interactive terminal.")

    state = initial_state(store, path, args.reset)
    app = FileBrowserApp(
        state=state,
        store=store,
        cache=DirectoryCache(background=args.async_listing),
        launcher=select_launcher(),
        bindings=BindingsLoader(args.keys),
    )
    logger.info("starting with %d tab(s), settings at %s", len(state.tabs), store.path)
    app.run(TerminalController(sys.stdin.fileno(), sys.stdout.fileno()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
