"""Read-only render model derived from the navigation state.

Cosmetic concerns (icons, row text) live here. The only state this module
touches is the active directory's listing, populated lazily via the cache.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model.fs import DirectoryCache
from .model.types import DirEntry, ListingFailed, Loading, NotListed
from .navigation import NavigationState

DIRECTORY_ICON = "📂"
DEFAULT_FILE_ICON = "📃"
MUSIC_ICON = "🎹"
HIDDEN_FILE_ICON = "⚙"
# Checked in order, after the .mp3 and hidden-file rules.
EXTENSION_ICONS: dict[str, str] = {
    ".exe": "💾",
    ".zip": "🗜",
    ".png": "🖼",
    ".jpg": "🖼",
    ".jpeg": "🖼",
    ".bmp": "🖼",
}


@dataclass(frozen=True)
class TabLabel:
    label: str
    is_active: bool


@dataclass(frozen=True)
class Row:
    text: str
    is_highlighted: bool = False
    is_error: bool = False


@dataclass(frozen=True)
class ViewModel:
    tabs: tuple[TabLabel, ...]
    path_text: str
    rows: tuple[Row, ...]
    status: str = ""


def entry_icon(entry: DirEntry) -> str:
    if entry.is_dir:
        return DIRECTORY_ICON
    name = entry.name.lower()
    if name.endswith(".mp3"):
        return MUSIC_ICON
    if name.startswith("."):
        return HIDDEN_FILE_ICON
    for suffix, icon in EXTENSION_ICONS.items():
        if name.endswith(suffix):
            return icon
    return DEFAULT_FILE_ICON


def entry_text(entry: DirEntry) -> str:
    return f"{entry_icon(entry)} {entry.name}"


def render(state: NavigationState, cache: DirectoryCache | None = None) -> ViewModel:
    """Project ``state`` into a ``ViewModel`` for the painter."""
    tab = state.current
    cwd = tab.cwd
    if cache is not None:
        cache.populate(cwd)

    labels = tuple(
        TabLabel(label=item.label, is_active=index == state.active_tab)
        for index, item in enumerate(state.tabs)
    )

    listing = cwd.listing
    if isinstance(listing, ListingFailed):
        error = listing.error
        rows: tuple[Row, ...] = (Row(text=f"⚠ cannot read directory ({error.kind.value}): {error.message}", is_error=True),)
    elif isinstance(listing, (Loading, NotListed)):
        rows = (Row(text="loading…"),)
    elif not cwd.children:
        rows = (Row(text="(empty)"),)
    else:
        rows = tuple(
            Row(text=entry_text(entry), is_highlighted=index == cwd.cursor)
            for index, entry in enumerate(cwd.children)
        )

    status = (
        f"tab {state.active_tab + 1}/{len(state.tabs)}"
        f"  back {len(tab.history_backward)}  forward {len(tab.history_forward)}"
    )
    return ViewModel(tabs=labels, path_text=str(cwd.path), rows=rows, status=status)


__all__ = [
    "TabLabel",
    "Row",
    "ViewModel",
    "entry_icon",
    "entry_text",
    "render",
]
