"""Value types returned by directory scans."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True)
class ScanOptions:
    """Directory scan filters.

    ``max_depth`` counts levels below the scanned directory: ``1`` lists only
    immediate children, ``0`` lists nothing.
    """

    include_hidden: bool = False
    max_depth: int = 1


@dataclass(frozen=True)
class FileNode:
    """One file-system entry.

    ``size`` is set only for files. ``modified`` is ``st_mtime_ns`` when the
    platform reports it. ``children`` is ``None`` until a lazy read loads the
    immediate children; loaded children never carry their own children.
    """

    path: Path
    name: str
    is_file: bool
    size: int | None = None
    modified: int | None = None
    children: tuple["FileNode", ...] | None = None

    def with_children(self, children: list["FileNode"] | tuple["FileNode", ...]) -> "FileNode":
        return replace(self, children=tuple(children))

    def to_dict(self) -> dict[str, object]:
        """JSON-ready payload; ``children`` stays ``None`` when not loaded."""
        return {
            "path": str(self.path),
            "name": self.name,
            "is_file": self.is_file,
            "size": self.size,
            "modified": self.modified,
            "children": None if self.children is None else [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class DirectoryPage:
    """A window ``[offset, offset + limit)`` of a sorted directory listing."""

    nodes: tuple[FileNode, ...]
    total_count: int
    has_more: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "total_count": self.total_count,
            "has_more": self.has_more,
        }


__all__ = [
    "ScanOptions",
    "FileNode",
    "DirectoryPage",
]
