"""Turn untrusted path strings into safe absolute paths inside a workspace.

``validate_path`` is the only place where user-supplied strings become
absolute file-system paths. It is pure and synchronous: nothing is created,
modified, or cached, so it may be called from any thread.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import InvalidPath, PathTraversal

if TYPE_CHECKING:
    from .runtime.state import WorkspaceState

logger = logging.getLogger(__name__)

PARENT_SEGMENT = ".."
NO_WORKSPACE_MESSAGE = "No workspace is open. Please select a folder first."


def _canonical(path: Path) -> Path:
    return path.resolve(strict=True)


def _is_within(path: Path, root: Path) -> bool:
    """Segment-wise containment; ``/root-evil`` is not within ``/root``."""
    return path == root or path.is_relative_to(root)


def validate_path(root: Path | str, target: str) -> Path:
    """Resolve ``target`` against ``root`` and refuse anything outside it.

    Existing targets are returned canonicalized. Targets that do not exist yet
    are returned joined but unresolved, provided their parent directory exists
    and lies inside the root. A missing parent (including several missing
    ancestor levels) is rejected with ``InvalidPath``.
    """
    if PARENT_SEGMENT in target:
        logger.debug("rejected parent segment in %r", target)
        raise PathTraversal(f"Path contains '..' which is not allowed: {target}")
    if "\x00" in target:
        raise InvalidPath(f"Path contains a NUL byte: {target!r}")

    try:
        root_canonical = _canonical(Path(root))
    except (OSError, RuntimeError, ValueError) as exc:
        raise InvalidPath(f"Invalid base directory: {root}: {exc}") from exc

    target_path = Path(target)
    full_path = target_path if target_path.is_absolute() else root_canonical / target_path

    try:
        final_path = _canonical(full_path)
    except FileNotFoundError:
        parent = full_path.parent
        if parent == full_path:
            raise InvalidPath(f"Path has no parent: {target}")
        try:
            parent_canonical = _canonical(parent)
        except (OSError, RuntimeError, ValueError) as exc:
            raise InvalidPath(f"Invalid parent path: {target}: {exc}") from exc
        if not _is_within(parent_canonical, root_canonical):
            logger.debug("rejected %r: parent %s outside %s", target, parent_canonical, root_canonical)
            raise PathTraversal(f"Path attempts to escape base directory: {target}")
        return full_path
    except (OSError, RuntimeError, ValueError) as exc:
        # Symlink loops, permission failures on an ancestor, and similar.
        raise InvalidPath(f"Cannot resolve path: {target}: {exc}") from exc

    if not _is_within(final_path, root_canonical):
        logger.debug("rejected %r: %s outside %s", target, final_path, root_canonical)
        raise PathTraversal(f"Path attempts to escape base directory: {target}")
    return final_path


def validate_path_with_state(state: WorkspaceState, target: str) -> Path:
    """Validate ``target`` against the currently open workspace."""
    workspace = state.current()
    if workspace is None:
        raise InvalidPath(NO_WORKSPACE_MESSAGE)
    return validate_path(workspace, target)


__all__ = [
    "NO_WORKSPACE_MESSAGE",
    "validate_path",
    "validate_path_with_state",
]
