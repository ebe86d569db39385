"""Filesystem listing and the per-visit directory cache."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from ..errors import DirectoryError, DirectoryErrorKind
from .types import DirEntry, Listed, ListingFailed, Loading, WorkingDirectory

logger = logging.getLogger(__name__)


def _entry_is_dir(child: os.DirEntry) -> bool:
    try:
        if child.is_dir(follow_symlinks=False):
            return True
        # Symlinks to directories open like directories.
        return child.is_symlink() and child.is_dir()
    except OSError:
        return False


def _entry_size(child: os.DirEntry, is_dir: bool) -> int | None:
    if is_dir:
        return None
    try:
        return int(child.stat(follow_symlinks=False).st_size)
    except OSError:
        return None


def list_directory_children(directory: Path) -> tuple[DirEntry, ...]:
    """Enumerate immediate children of ``directory`` in filesystem order.

    Raises ``DirectoryError`` when the directory cannot be scanned. Per-entry
    stat failures only drop the size, never the entry.
    """
    children: list[DirEntry] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                if not child.name:
                    continue
                is_dir = _entry_is_dir(child)
                children.append(
                    DirEntry(
                        path=Path(child.path),
                        is_dir=is_dir,
                        size=_entry_size(child, is_dir),
                    )
                )
    except OSError as exc:
        raise DirectoryError.from_os_error(directory, exc) from exc
    except ValueError as exc:
        # Paths with an embedded NUL byte never reach the OS.
        raise DirectoryError(DirectoryErrorKind.OTHER, directory, str(exc)) from exc
    return tuple(children)


@dataclass(frozen=True)
class DirectoryListingRequest:
    """One background listing job."""

    request_id: int
    target: Path


@dataclass(frozen=True)
class DirectoryListingResult:
    """Completed background listing."""

    request: DirectoryListingRequest
    listing: Listed | ListingFailed


class DirectoryListingScheduler:
    """Single-threaded latest-request-wins listing scheduler.

    Scheduling a new path while another is pending replaces the pending one,
    so only the directory the user is currently looking at gets listed.
    """

    def __init__(self, list_path: Callable[[Path], Listed | ListingFailed]) -> None:
        self._list_path = list_path
        self._lock = threading.Lock()
        self._pending: DirectoryListingRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._results: Queue[DirectoryListingResult] = Queue()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return
            try:
                listing = self._list_path(request.target)
            except Exception as exc:
                logger.exception("background listing of %s failed", request.target)
                listing = ListingFailed(DirectoryError(DirectoryErrorKind.OTHER, request.target, str(exc)))
            self._results.put(DirectoryListingResult(request=request, listing=listing))

    def schedule(self, target: Path) -> int:
        """Queue or replace pending listing work and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending = DirectoryListingRequest(request_id=request_id, target=target)
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="tabfm-directory-listing",
            daemon=True,
        )
        worker.start()
        return request_id

    def drain_results(self) -> list[DirectoryListingResult]:
        """Drain all completed listings."""
        out: list[DirectoryListingResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


class DirectoryCache:
    """Lists a working directory at most once per visit.

    With ``background=True`` listings run on a worker thread: ``populate``
    marks the directory ``Loading`` and ``apply_completed`` installs results
    on the loop thread, dropping any whose directory was navigated away from.
    """

    def __init__(
        self,
        list_children: Callable[[Path], tuple[DirEntry, ...]] = list_directory_children,
        *,
        background: bool = False,
    ) -> None:
        self._list_children = list_children
        self._scheduler = DirectoryListingScheduler(self.list) if background else None
        self._inflight_id: int | None = None

    @property
    def background(self) -> bool:
        return self._scheduler is not None

    def list(self, path: Path) -> Listed | ListingFailed:
        """Return the listing of ``path``; failures come back as ``ListingFailed``."""
        try:
            return Listed(self._list_children(path))
        except DirectoryError as exc:
            logger.warning("cannot list %s: %s", path, exc.kind.value)
            return ListingFailed(exc)

    def _is_stale_loading(self, directory: WorkingDirectory) -> bool:
        listing = directory.listing
        return isinstance(listing, Loading) and listing.request_id != self._inflight_id

    def populate(self, directory: WorkingDirectory) -> bool:
        """List ``directory`` if it has not been listed this visit.

        Returns whether the directory's listing state changed.
        """
        if not (directory.needs_listing or self._is_stale_loading(directory)):
            return False
        if self._scheduler is None:
            directory.set_listing(self.list(directory.path))
            return True
        request_id = self._scheduler.schedule(directory.path)
        self._inflight_id = request_id
        directory.set_listing(Loading(request_id))
        return True

    def apply_completed(self, directories: Iterable[WorkingDirectory]) -> bool:
        """Install finished background listings into matching directories."""
        if self._scheduler is None:
            return False
        results = self._scheduler.drain_results()
        if not results:
            return False
        candidates = list(directories)
        changed = False
        for result in results:
            if result.request.request_id == self._inflight_id:
                self._inflight_id = None
            for directory in candidates:
                listing = directory.listing
                if (
                    isinstance(listing, Loading)
                    and listing.request_id == result.request.request_id
                    and directory.path == result.request.target
                ):
                    directory.set_listing(result.listing)
                    changed = True
        return changed


__all__ = [
    "list_directory_children",
    "DirectoryListingRequest",
    "DirectoryListingResult",
    "DirectoryListingScheduler",
    "DirectoryCache",
]
