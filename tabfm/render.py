"""ANSI painter for the view model.

Presentation-only and side-effect free: ``build_frame`` returns the text of
one full-screen frame and never touches navigation state.
"""

from __future__ import annotations

import unicodedata

from .view import ViewModel

RESET = "\033[0m"
TAB_ACTIVE_STYLE = "\033[1;30;105m"
TAB_INACTIVE_STYLE = "\033[38;5;245m"
PATH_STYLE = "\033[1;95m"
HIGHLIGHT_STYLE = "\033[30;105m"
ERROR_STYLE = "\033[1;31m"
STATUS_STYLE = "\033[2m"

HELP_LINES: tuple[str, ...] = (
    "\033[1;38;5;81mKEYS\033[0m",
    "\033[38;5;229mj/k Up/Down\033[0m move  \033[38;5;229mEnter\033[0m open",
    "\033[38;5;229mAlt+Left/Right\033[0m history  \033[38;5;229mAlt+Up/Backspace\033[0m parent",
    "\033[38;5;229mh/l Left/Right\033[0m switch tab  \033[38;5;229mt\033[0m new tab  \033[38;5;229mw\033[0m close tab",
    "\033[38;5;229me\033[0m file manager  \033[38;5;229ms\033[0m shell here",
    "\033[38;5;229m?\033[0m help  \033[38;5;229mq\033[0m quit",
)


def char_display_width(ch: str) -> int:
    """Terminal column width of one character; wide glyphs take two."""
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_text(text: str, max_cols: int) -> str:
    """Trim plain ``text`` to at most ``max_cols`` display columns."""
    if max_cols <= 0:
        return ""
    out: list[str] = []
    used = 0
    for ch in text:
        width = char_display_width(ch)
        if used + width > max_cols:
            if out and char_display_width(out[-1]) == 1:
                out[-1] = "…"
            break
        out.append(ch)
        used += width
    return "".join(out)


def _pad(text: str, max_cols: int) -> str:
    clipped = clip_text(text, max_cols)
    used = sum(char_display_width(ch) for ch in clipped)
    return clipped + " " * max(0, max_cols - used)


def visible_window(rows: int, highlighted: int | None, height: int) -> tuple[int, int]:
    """Return ``(start, stop)`` so the highlighted row stays on screen."""
    if height <= 0:
        return 0, 0
    if rows <= height or highlighted is None:
        return 0, min(rows, height)
    start = max(0, min(highlighted - height // 2, rows - height))
    return start, start + height


def build_frame(view: ViewModel, columns: int, lines: int, show_help: bool = False) -> list[str]:
    """Render ``view`` into exactly ``lines`` styled rows of ``columns`` cells."""
    columns = max(1, columns)
    lines = max(3, lines)

    tab_cells: list[str] = []
    for tab in view.tabs:
        style = TAB_ACTIVE_STYLE if tab.is_active else TAB_INACTIVE_STYLE
        tab_cells.append(f"{style} {clip_text(tab.label, 24)} {RESET}")
    header = [" ".join(tab_cells), f"{PATH_STYLE}{clip_text(view.path_text, columns)}{RESET}"]

    footer = list(HELP_LINES) if show_help else []
    footer.append(f"{STATUS_STYLE}{clip_text(view.status, columns)}{RESET}")

    body_height = max(0, lines - len(header) - len(footer))
    highlighted = next((idx for idx, row in enumerate(view.rows) if row.is_highlighted), None)
    start, stop = visible_window(len(view.rows), highlighted, body_height)

    body: list[str] = []
    for row in view.rows[start:stop]:
        if row.is_error:
            body.append(f"{ERROR_STYLE}{clip_text(row.text, columns)}{RESET}")
        elif row.is_highlighted:
            body.append(f"{HIGHLIGHT_STYLE}{_pad(row.text, columns)}{RESET}")
        else:
            body.append(clip_text(row.text, columns))
    body.extend([""] * (body_height - len(body)))
    return (header + body + footer)[:lines]


def frame_to_ansi(frame: list[str]) -> str:
    """Join frame rows into one write: cursor home, clear each line."""
    return "\033[H" + "\r\n".join(f"{row}\033[K" for row in frame)


__all__ = [
    "HELP_LINES",
    "char_display_width",
    "clip_text",
    "visible_window",
    "build_frame",
    "frame_to_ansi",
]
