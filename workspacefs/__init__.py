"""Public package surface for workspacefs.

Exports ``main`` for programmatic CLI invocation.
Library entry points live in ``workspacefs.validation``,
``workspacefs.operations``, ``workspacefs.file_tree_model`` and
``workspacefs.runtime``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
