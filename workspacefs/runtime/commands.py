"""Operation surface consumed by the command/RPC dispatch layer.

Every method takes path strings relative to the open workspace (workspace
open/close take an absolute path or nothing), validates them against the
current root, and runs the file-system work on the blocking pool. Results are
plain values; failures are ``WorkspaceError`` subclasses.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path

from .. import operations
from ..errors import InvalidPath
from ..file_tree_model import (
    DirectoryPage,
    FileNode,
    count_directory_items,
    get_directory_page,
    read_directory_lazy,
)
from ..validation import validate_path_with_state
from .blocking_pool import BlockingWorkPool
from .state import WorkspaceState

logger = logging.getLogger(__name__)

OPERATIONS = frozenset(
    {
        "read",
        "write",
        "write_binary",
        "create_file",
        "create_dir",
        "metadata",
        "rename",
        "delete",
        "read_dir_lazy",
        "get_dir_page",
        "count_dir_items",
        "open_workspace",
        "close_workspace",
    }
)


class WorkspaceCommands:
    """Validated, pool-dispatched file operations for one ``WorkspaceState``.

    Public methods block the calling thread until the pool finishes the work.
    ``submit`` schedules the same work and returns a ``Future`` instead.
    """

    def __init__(self, state: WorkspaceState, pool: BlockingWorkPool | None = None) -> None:
        self.state = state
        self.pool = pool if pool is not None else BlockingWorkPool()

    def _resolve(self, path: str) -> Path:
        return validate_path_with_state(self.state, path)

    def submit(self, name: str, *args: object, **kwargs: object) -> Future:
        """Schedule operation ``name`` (one of ``OPERATIONS``) on the pool."""
        if name not in OPERATIONS:
            raise InvalidPath(f"Unknown operation: {name}")
        return self.pool.submit(getattr(self, f"_{name}"), *args, **kwargs)

    # worker-side implementations
    def _read(self, path: str) -> str:
        return operations.read_file_content(self._resolve(path))

    def _write(self, path: str, content: str) -> None:
        operations.write_file_atomic(self._resolve(path), content)

    def _write_binary(self, path: str, data: bytes) -> None:
        operations.write_binary_atomic(self._resolve(path), data)

    def _create_file(self, path: str) -> None:
        operations.create_file(self._resolve(path))

    def _create_dir(self, path: str) -> None:
        operations.create_folder(self._resolve(path))

    def _metadata(self, path: str) -> FileNode:
        return operations.get_metadata(self._resolve(path))

    def _rename(self, old_path: str, new_path: str) -> None:
        source = self._resolve(old_path)
        destination = self._resolve(new_path)
        operations.rename_path(source, destination)

    def _delete(self, path: str) -> None:
        target = self._resolve(path)
        workspace = self.state.current()
        if workspace is not None and target == workspace.resolve():
            raise InvalidPath("Refusing to delete the workspace root")
        logger.debug("deleting %s", target)
        operations.delete_path(target)

    def _read_dir_lazy(self, path: str = "", include_hidden: bool = False) -> FileNode:
        return read_directory_lazy(self._resolve(path), include_hidden)

    def _get_dir_page(self, path: str, offset: int, limit: int, include_hidden: bool = False) -> DirectoryPage:
        return get_directory_page(self._resolve(path), offset, limit, include_hidden)

    def _count_dir_items(self, path: str = "", include_hidden: bool = False) -> int:
        return count_directory_items(self._resolve(path), include_hidden)

    def _open_workspace(self, path: str) -> None:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            raise InvalidPath(f"Workspace path must be absolute: {path}")
        if not candidate.is_dir():
            raise InvalidPath(f"Workspace is not an existing directory: {path}")
        self.state.open(candidate)

    def _close_workspace(self) -> None:
        self.state.close()

    # file operations
    def read(self, path: str) -> str:
        return self.pool.run(self._read, path)

    def write(self, path: str, content: str) -> None:
        self.pool.run(self._write, path, content)

    def write_binary(self, path: str, data: bytes) -> None:
        self.pool.run(self._write_binary, path, data)

    def create_file(self, path: str) -> None:
        self.pool.run(self._create_file, path)

    def create_dir(self, path: str) -> None:
        self.pool.run(self._create_dir, path)

    def metadata(self, path: str) -> FileNode:
        return self.pool.run(self._metadata, path)

    def rename(self, old_path: str, new_path: str) -> None:
        self.pool.run(self._rename, old_path, new_path)

    def delete(self, path: str) -> None:
        self.pool.run(self._delete, path)

    # directory operations
    def read_dir_lazy(self, path: str = "", include_hidden: bool = False) -> FileNode:
        return self.pool.run(self._read_dir_lazy, path, include_hidden)

    def get_dir_page(self, path: str, offset: int, limit: int, include_hidden: bool = False) -> DirectoryPage:
        return self.pool.run(self._get_dir_page, path, offset, limit, include_hidden)

    def count_dir_items(self, path: str = "", include_hidden: bool = False) -> int:
        return self.pool.run(self._count_dir_items, path, include_hidden)

    # workspace
    def open_workspace(self, path: str) -> None:
        """Open an existing directory, given as an absolute path."""
        self.pool.run(self._open_workspace, path)

    def current_workspace(self) -> str | None:
        workspace = self.state.current()
        return str(workspace) if workspace is not None else None

    def close_workspace(self) -> None:
        self.pool.run(self._close_workspace)


__all__ = [
    "OPERATIONS",
    "WorkspaceCommands",
]
