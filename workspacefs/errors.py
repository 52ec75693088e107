"""Typed error kinds surfaced by workspace file-system operations.

Every failure that crosses the operations/scanner boundary is one of the
``WorkspaceError`` subclasses below. ``error_from_os`` maps ``OSError``
instances onto them so callers never have to inspect errno values.
"""

from __future__ import annotations

import errno
from pathlib import Path


class WorkspaceError(Exception):
    """Base class for all errors returned to the dispatch layer."""

    kind = "IoError"
    label = "I/O error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def to_payload(self) -> dict[str, str]:
        """Return the ``{"type", "message"}`` shape sent back to callers."""
        return {"type": self.kind, "message": self.message}


class PermissionDenied(WorkspaceError):
    kind = "PermissionDenied"
    label = "Permission denied"


class InvalidPath(WorkspaceError):
    """Malformed input, missing parent, or no open workspace."""

    kind = "InvalidPath"
    label = "Invalid path"


class FileNotFound(WorkspaceError):
    kind = "FileNotFound"
    label = "File not found"


class PathTraversal(WorkspaceError):
    """A path resolved (or tried to resolve) outside the workspace root."""

    kind = "PathTraversal"
    label = "Path traversal detected"


class IoError(WorkspaceError):
    kind = "IoError"
    label = "I/O error"


class FileTooLarge(WorkspaceError):
    kind = "FileTooLarge"
    label = "File too large"


class NotText(IoError):
    """File contents are not valid UTF-8 text."""

    label = "Not a text file"


class AlreadyExists(IoError):
    label = "Already exists"


_INVALID_PATH_ERRNOS = frozenset({errno.EINVAL, errno.ENAMETOOLONG, errno.ENOTDIR, errno.EISDIR})


def error_from_os(exc: OSError, path: Path | str | None = None) -> WorkspaceError:
    """Map an ``OSError`` to the matching ``WorkspaceError`` kind.

    ``path`` is used for the message when given; otherwise the exception's own
    filename (if any) is used.
    """
    subject = str(path) if path is not None else (exc.filename or "")
    reason = exc.strerror or str(exc)
    message = f"{subject}: {reason}" if subject else reason

    if isinstance(exc, FileNotFoundError):
        return FileNotFound(message)
    if isinstance(exc, PermissionError):
        return PermissionDenied(message)
    if isinstance(exc, FileExistsError):
        return AlreadyExists(message)
    if isinstance(exc, (IsADirectoryError, NotADirectoryError)) or exc.errno in _INVALID_PATH_ERRNOS:
        return InvalidPath(message)
    return IoError(message)


__all__ = [
    "WorkspaceError",
    "PermissionDenied",
    "InvalidPath",
    "FileNotFound",
    "PathTraversal",
    "IoError",
    "FileTooLarge",
    "NotText",
    "AlreadyExists",
    "error_from_os",
]
