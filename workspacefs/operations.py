"""File and directory primitives on already-validated absolute paths.

Nothing here re-validates paths; callers route inputs through
``validation.validate_path`` first. Every ``OSError`` is converted to a typed
``WorkspaceError`` before it leaves this module.

Writes go through a sibling ``<name>.tmp`` file that is fsynced and then
renamed over the target, so a reader (or a crash) sees either the old or the
new content. Concurrent writers of one target inside this process take
turns, since they share the temp name. Renames across volumes fall back to
copy+delete, which is *not* atomic as a whole: a crash mid-copy can leave a
partial destination next to an intact source.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import stat
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import FileTooLarge, InvalidPath, NotText, error_from_os
from .file_tree_model.types import FileNode

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 4 * 1024 * 1024 * 1024
TEMP_SUFFIX = ".tmp"
_TEMP_OPEN_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0)

_writer_locks_guard = threading.Lock()
_writer_locks: dict[Path, tuple[threading.Lock, int]] = {}


def temp_path_for(path: Path) -> Path:
    """Return the sibling temp path used while atomically writing ``path``."""
    if not path.name:
        raise InvalidPath(f"Invalid file name: {path}")
    return path.with_name(path.name + TEMP_SUFFIX)


def read_file_content(path: Path) -> str:
    """Return the UTF-8 text of ``path``, refusing files over ``MAX_FILE_SIZE``."""
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise error_from_os(exc, path) from exc
    if size > MAX_FILE_SIZE:
        raise FileTooLarge(f"File size {size} bytes exceeds maximum of {MAX_FILE_SIZE} bytes")

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise error_from_os(exc, path) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise NotText(f"{path}: stream did not contain valid UTF-8") from exc


def get_metadata(path: Path) -> FileNode:
    """Build an unexpanded ``FileNode`` for a single file or directory."""
    try:
        st = path.stat()
    except OSError as exc:
        raise error_from_os(exc, path) from exc
    is_file = stat.S_ISREG(st.st_mode)
    return FileNode(
        path=path,
        name=path.name,
        is_file=is_file,
        size=int(st.st_size) if is_file else None,
        modified=int(st.st_mtime_ns),
    )


def _fsync_directory(directory: Path) -> None:
    """Flush a directory entry update; best-effort where unsupported."""
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    try:
        fd = os.open(directory, flags)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def _remove_temp(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("could not remove temp file %s: %s", temp_path, exc)


@contextmanager
def _exclusive_writer(path: Path) -> Iterator[None]:
    """Serialize in-process writers of one target; they share its temp name."""
    with _writer_locks_guard:
        lock, users = _writer_locks.get(path, (None, 0))
        if lock is None:
            lock = threading.Lock()
        _writer_locks[path] = (lock, users + 1)
    try:
        with lock:
            yield
    finally:
        with _writer_locks_guard:
            lock, users = _writer_locks[path]
            if users == 1:
                del _writer_locks[path]
            else:
                _writer_locks[path] = (lock, users - 1)


def write_binary_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` via fsynced temp file + rename.

    A leftover ``<name>.tmp`` is unlinked first and the temp file is created
    exclusively without following symlinks, so a planted link can never
    redirect the write.
    """
    temp_path = temp_path_for(path)
    with _exclusive_writer(path):
        _remove_temp(temp_path)
        try:
            fd = os.open(temp_path, _TEMP_OPEN_FLAGS, 0o666)
        except OSError as exc:
            raise error_from_os(exc, path) from exc
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            _remove_temp(temp_path)
            raise error_from_os(exc, path) from exc

        try:
            os.replace(temp_path, path)
        except OSError as exc:
            _remove_temp(temp_path)
            raise error_from_os(exc, path) from exc
    _fsync_directory(path.parent)


def write_file_atomic(path: Path, content: str) -> None:
    """Atomically replace ``path`` with UTF-8 encoded ``content``."""
    write_binary_atomic(path, content.encode("utf-8"))


def create_file(path: Path) -> None:
    """Create an empty file; fails if anything already exists at ``path``."""
    try:
        with open(path, "xb") as handle:
            os.fsync(handle.fileno())
    except OSError as exc:
        raise error_from_os(exc, path) from exc


def create_folder(path: Path) -> None:
    """Create a single directory; fails if ``path`` already exists."""
    try:
        os.mkdir(path)
    except OSError as exc:
        raise error_from_os(exc, path) from exc


def delete_path(path: Path) -> None:
    """Remove a file, symlink, or whole directory tree. Irreversible."""
    try:
        st = os.lstat(path)
        if stat.S_ISDIR(st.st_mode):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except OSError as exc:
        raise error_from_os(exc, path) from exc


def copy_recursive(source: Path, destination: Path) -> None:
    """Copy a file or directory subtree using an explicit work list."""
    pending: list[tuple[Path, Path]] = [(source, destination)]
    while pending:
        src, dst = pending.pop()
        st = os.lstat(src)
        if stat.S_ISLNK(st.st_mode):
            os.symlink(os.readlink(src), dst)
        elif stat.S_ISDIR(st.st_mode):
            os.makedirs(dst, exist_ok=True)
            with os.scandir(src) as entries:
                for entry in entries:
                    pending.append((src / entry.name, dst / entry.name))
        else:
            shutil.copy2(src, dst, follow_symlinks=False)


def rename_path(old_path: Path, new_path: Path) -> None:
    """Rename/move ``old_path`` to ``new_path``, copying across volumes."""
    try:
        os.rename(old_path, new_path)
        return
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise error_from_os(exc, old_path) from exc

    logger.info("cross-device rename %s -> %s, falling back to copy+delete", old_path, new_path)
    try:
        copy_recursive(old_path, new_path)
    except OSError as exc:
        raise error_from_os(exc, new_path) from exc
    delete_path(old_path)


__all__ = [
    "MAX_FILE_SIZE",
    "TEMP_SUFFIX",
    "temp_path_for",
    "read_file_content",
    "get_metadata",
    "write_binary_atomic",
    "write_file_atomic",
    "create_file",
    "create_folder",
    "delete_path",
    "copy_recursive",
    "rename_path",
]
