"""Domain model for workspace directory listings.

This package contains the non-I/O-policy tree primitives:
- file/directory node and page datatypes
- depth-limited directory scans with hidden-file filtering
- lazy (one level) reads, paginated reads, and counts
"""

from __future__ import annotations

from .types import DirectoryPage, FileNode, ScanOptions
from .fs import (
    HIDDEN_PREFIX,
    PARALLEL_STAT_THRESHOLD,
    count_directory_items,
    get_directory_page,
    node_sort_key,
    read_directory_lazy,
    scan_directory,
)

__all__ = [
    "DirectoryPage",
    "FileNode",
    "ScanOptions",
    "HIDDEN_PREFIX",
    "PARALLEL_STAT_THRESHOLD",
    "count_directory_items",
    "get_directory_page",
    "node_sort_key",
    "read_directory_lazy",
    "scan_directory",
]
