"""Domain datatypes for directory entries and per-directory listing state."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..errors import DirectoryError


@dataclass(frozen=True)
class DirEntry:
    """One immediate child of a directory."""

    path: Path
    is_dir: bool
    size: int | None = None

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)


@dataclass(frozen=True)
class NotListed:
    """Directory has not been enumerated during this visit."""


@dataclass(frozen=True)
class Loading:
    """A background listing for this directory is in flight."""

    request_id: int


@dataclass(frozen=True)
class Listed:
    """Directory was enumerated; ``entries`` may be empty."""

    entries: tuple[DirEntry, ...] = ()


@dataclass(frozen=True)
class ListingFailed:
    """Directory could not be enumerated."""

    error: DirectoryError


ListingState = NotListed | Loading | Listed | ListingFailed


@dataclass
class WorkingDirectory:
    """A directory path, its listing state, and the selection cursor."""

    path: Path
    listing: ListingState = field(default_factory=NotListed)
    cursor: int = 0

    @property
    def children(self) -> tuple[DirEntry, ...]:
        """Listed entries, or an empty tuple for any other listing state."""
        if isinstance(self.listing, Listed):
            return self.listing.entries
        return ()

    @property
    def needs_listing(self) -> bool:
        return isinstance(self.listing, NotListed)

    def selected_entry(self) -> DirEntry | None:
        children = self.children
        if 0 <= self.cursor < len(children):
            return children[self.cursor]
        return None

    def set_listing(self, listing: ListingState) -> None:
        """Install ``listing`` and clamp the cursor against the new entries.

        Clamping only happens for a non-empty listing so a zero-length
        sequence is never used as an upper bound.
        """
        self.listing = listing
        self.cursor = max(0, self.cursor)
        children = self.children
        if children:
            self.cursor = min(self.cursor, len(children) - 1)

    def copy(self) -> WorkingDirectory:
        # Listing states and entries are immutable, so sharing them is safe.
        return WorkingDirectory(path=self.path, listing=self.listing, cursor=self.cursor)


__all__ = [
    "DirEntry",
    "NotListed",
    "Loading",
    "Listed",
    "ListingFailed",
    "ListingState",
    "WorkingDirectory",
]
