"""Directory-entry model and filesystem listing."""

from .fs import DirectoryCache, DirectoryListingScheduler, list_directory_children
from .types import (
    DirEntry,
    Listed,
    ListingFailed,
    ListingState,
    Loading,
    NotListed,
    WorkingDirectory,
)

__all__ = [
    "DirEntry",
    "NotListed",
    "Loading",
    "Listed",
    "ListingFailed",
    "ListingState",
    "WorkingDirectory",
    "DirectoryCache",
    "DirectoryListingScheduler",
    "list_directory_children",
]
