"""Directory scanning, lazy reads, and paginated listings."""

from __future__ import annotations

import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..errors import InvalidPath, error_from_os
from .types import DirectoryPage, FileNode, ScanOptions

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."
PARALLEL_STAT_THRESHOLD = 512
STAT_WORKERS = 8


def _is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def node_sort_key(node: FileNode) -> tuple[bool, str]:
    """Directories before files, then case-insensitive name."""
    return (node.is_file, node.name.lower())


def _collect_entry_paths(directory: Path, options: ScanOptions) -> list[tuple[Path, str]]:
    """Walk up to ``max_depth`` levels and return ``(path, name)`` pairs.

    Hidden directories are neither listed nor descended into unless
    ``include_hidden`` is set. Subdirectories that cannot be opened are
    skipped; only the top-level directory is required to be readable.
    """
    found: list[tuple[Path, str]] = []
    pending: list[tuple[Path, int]] = [(directory, 1)]
    while pending:
        current, depth = pending.pop()
        if depth > options.max_depth:
            continue
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    name = entry.name
                    if not options.include_hidden and _is_hidden(name):
                        continue
                    child_path = current / name
                    found.append((child_path, name))
                    if depth < options.max_depth:
                        try:
                            descend = entry.is_dir(follow_symlinks=False)
                        except OSError:
                            descend = False
                        if descend:
                            pending.append((child_path, depth + 1))
        except OSError as exc:
            if current == directory:
                raise error_from_os(exc, directory) from exc
            logger.debug("skipping unreadable directory %s: %s", current, exc)
    return found


def _node_for_entry(entry: tuple[Path, str]) -> FileNode | None:
    """Return a node for one entry, or ``None`` when its metadata is unreadable."""
    path, name = entry
    try:
        st = path.stat()
    except OSError as exc:
        logger.debug("dropping %s from listing: %s", path, exc)
        return None
    is_file = stat.S_ISREG(st.st_mode)
    return FileNode(
        path=path,
        name=name,
        is_file=is_file,
        size=int(st.st_size) if is_file else None,
        modified=int(st.st_mtime_ns),
    )


def _require_directory(path: Path) -> None:
    if not path.is_dir():
        raise InvalidPath(f"{path} is not a directory")


def scan_directory(path: Path, options: ScanOptions | None = None) -> list[FileNode]:
    """List entries under ``path`` as sorted ``FileNode`` values.

    Entries whose metadata cannot be read are dropped rather than failing the
    whole scan. Large listings stat entries on a thread pool; the result is
    sorted afterwards so ordering never depends on completion order.
    """
    options = options or ScanOptions()
    _require_directory(path)
    entries = _collect_entry_paths(path, options)

    if len(entries) >= PARALLEL_STAT_THRESHOLD:
        with ThreadPoolExecutor(max_workers=STAT_WORKERS, thread_name_prefix="workspacefs-scan") as executor:
            candidates = list(executor.map(_node_for_entry, entries))
    else:
        candidates = [_node_for_entry(entry) for entry in entries]

    nodes = [node for node in candidates if node is not None]
    nodes.sort(key=node_sort_key)
    return nodes


def read_directory_lazy(path: Path, include_hidden: bool = False) -> FileNode:
    """Return a node for ``path`` with only its immediate children loaded."""
    try:
        st = path.stat()
    except OSError as exc:
        raise error_from_os(exc, path) from exc
    if not stat.S_ISDIR(st.st_mode):
        raise InvalidPath(f"{path} is not a directory")

    children = scan_directory(path, ScanOptions(include_hidden=include_hidden, max_depth=1))
    directory = FileNode(
        path=path,
        name=path.name,
        is_file=False,
        size=None,
        modified=int(st.st_mtime_ns),
    )
    return directory.with_children(children)


def get_directory_page(path: Path, offset: int, limit: int, include_hidden: bool = False) -> DirectoryPage:
    """Return one page of the sorted depth-1 listing of ``path``.

    Each call rescans the directory; offsets are not stable across concurrent
    mutation of the directory.
    """
    if offset < 0 or limit < 0:
        raise InvalidPath(f"offset and limit must be non-negative (got {offset}, {limit})")
    all_nodes = scan_directory(path, ScanOptions(include_hidden=include_hidden, max_depth=1))
    total_count = len(all_nodes)
    end = min(offset + limit, total_count)
    page = tuple(all_nodes[offset:end]) if offset < total_count else ()
    return DirectoryPage(nodes=page, total_count=total_count, has_more=end < total_count)


def count_directory_items(path: Path, include_hidden: bool = False) -> int:
    """Count what a depth-1 scan would return, without building or sorting nodes."""
    _require_directory(path)
    count = 0
    for child_path, _name in _collect_entry_paths(path, ScanOptions(include_hidden=include_hidden, max_depth=1)):
        try:
            child_path.stat()
        except OSError:
            continue
        count += 1
    return count


__all__ = [
    "HIDDEN_PREFIX",
    "PARALLEL_STAT_THRESHOLD",
    "node_sort_key",
    "scan_directory",
    "read_directory_lazy",
    "get_directory_page",
    "count_directory_items",
]
