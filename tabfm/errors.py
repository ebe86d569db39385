"""Error taxonomy for listing and persistence failures.

Neither family is fatal: callers turn them into an error row or a log record
and keep running on a valid in-memory state.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class TabfmError(Exception):
    """Base class for all tabfm errors."""


class DirectoryErrorKind(Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class SettingsErrorKind(Enum):
    NOT_FOUND = "not_found"
    PARSE_FAILURE = "parse_failure"
    WRITE_FAILURE = "write_failure"


class DirectoryError(TabfmError):
    """Enumerating a directory failed."""

    def __init__(self, kind: DirectoryErrorKind, path: Path, message: str = "") -> None:
        self.kind = kind
        self.path = Path(path)
        self.message = message or kind.value.replace("_", " ")
        super().__init__(f"{self.message}: {self.path}")

    @classmethod
    def from_os_error(cls, path: Path, exc: OSError) -> DirectoryError:
        """Classify an ``OSError`` raised while scanning ``path``."""
        if isinstance(exc, (FileNotFoundError, NotADirectoryError)):
            kind = DirectoryErrorKind.NOT_FOUND
        elif isinstance(exc, PermissionError):
            kind = DirectoryErrorKind.PERMISSION_DENIED
        else:
            kind = DirectoryErrorKind.OTHER
        return cls(kind, path, exc.strerror or str(exc))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectoryError):
            return NotImplemented
        return (self.kind, self.path, self.message) == (other.kind, other.path, other.message)

    def __hash__(self) -> int:
        return hash((self.kind, self.path, self.message))


class SettingsError(TabfmError):
    """Reading or writing the settings file failed."""

    def __init__(self, kind: SettingsErrorKind, path: Path, message: str = "") -> None:
        self.kind = kind
        self.path = Path(path)
        self.message = message or kind.value.replace("_", " ")
        super().__init__(f"{self.message}: {self.path}")


__all__ = [
    "TabfmError",
    "DirectoryErrorKind",
    "DirectoryError",
    "SettingsErrorKind",
    "SettingsError",
]
