"""Process-level runtime: persisted workspace state and command dispatch.

This package groups the workspace config/state holders, the blocking worker
pool, and the ``WorkspaceCommands`` operation surface used by the CLI and by
embedding dispatch layers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .blocking_pool import BlockingWorkPool
    from .commands import WorkspaceCommands
    from .config import WorkspaceConfig
    from .state import WorkspaceState

_LAZY_EXPORTS = {
    "BlockingWorkPool": "blocking_pool",
    "WorkspaceCommands": "commands",
    "WorkspaceConfig": "config",
    "WorkspaceState": "state",
}


def __getattr__(name: str):
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(f".{module_name}", __name__), name)


__all__ = [
    "BlockingWorkPool",
    "WorkspaceCommands",
    "WorkspaceConfig",
    "WorkspaceState",
]
