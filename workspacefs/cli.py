"""Command-line front door for workspacefs.

Loads the persisted workspace state, parses one subcommand, and routes it
through ``WorkspaceCommands`` exactly as an embedding dispatcher would.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .errors import WorkspaceError
from .file_tree_model import FileNode
from .highlight import DEFAULT_STYLE, colorize_source, sanitize_terminal_text
from .logging_utils import configure_logging
from .runtime.blocking_pool import BlockingWorkPool
from .runtime.commands import WorkspaceCommands
from .runtime.config import DEFAULT_CONFIG_PATH
from .runtime.state import WorkspaceState

CONFIG_ENV_VAR = "WORKSPACEFS_CONFIG"


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def resolve_config_path(explicit: str | None) -> Path:
    """``--config`` wins, then ``$WORKSPACEFS_CONFIG``, then the platform default."""
    if explicit:
        return Path(explicit).expanduser()
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def format_node(node: FileNode) -> str:
    """One listing row: ``name/`` for directories, ``name  <size>`` for files."""
    name = sanitize_terminal_text(node.name)
    if not node.is_file:
        return f"{name}/"
    return f"{name}  {node.size if node.size is not None else '?'}"


def _print_json(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def cmd_open(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.open_workspace(str(Path(args.directory).expanduser().resolve()))
    print(commands.current_workspace())
    return 0


def cmd_close(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.close_workspace()
    return 0


def cmd_current(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    workspace = commands.current_workspace()
    if workspace is None:
        sys.stderr.write("no workspace open\n")
        return 1
    print(workspace)
    return 0


def cmd_ls(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    if args.limit is not None:
        page = commands.get_dir_page(args.path, args.offset, args.limit, include_hidden=args.all)
        if args.json:
            _print_json(page.to_dict())
            return 0
        for node in page.nodes:
            print(format_node(node))
        shown_end = args.offset + len(page.nodes)
        more = " (more)" if page.has_more else ""
        sys.stderr.write(f"{args.offset}-{shown_end} of {page.total_count}{more}\n")
        return 0

    directory = commands.read_dir_lazy(args.path, include_hidden=args.all)
    children = (directory.children or ())[args.offset :]
    if args.json:
        _print_json([child.to_dict() for child in children])
        return 0
    for node in children:
        print(format_node(node))
    return 0


def cmd_tree(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    directory = commands.read_dir_lazy(args.path, include_hidden=args.all)
    if args.json:
        _print_json(directory.to_dict())
        return 0
    print(f"{sanitize_terminal_text(directory.name or str(directory.path))}/")
    children = directory.children or ()
    for idx, node in enumerate(children):
        branch = "└── " if idx == len(children) - 1 else "├── "
        print(branch + format_node(node))
    return 0


def cmd_count(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    print(commands.count_dir_items(args.path, include_hidden=args.all))
    return 0


def cmd_read(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    text = commands.read(args.path)
    if sys.stdout.isatty() and not args.no_color:
        sys.stdout.write(colorize_source(text, Path(args.path), args.style))
    else:
        sys.stdout.write(sanitize_terminal_text(text))
    if text and not text.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def cmd_write(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.write(args.path, sys.stdin.read())
    return 0


def cmd_touch(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.create_file(args.path)
    return 0


def cmd_mkdir(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.create_dir(args.path)
    return 0


def cmd_mv(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.rename(args.old_path, args.new_path)
    return 0


def cmd_rm(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    commands.delete(args.path)
    return 0


def cmd_stat(commands: WorkspaceCommands, args: argparse.Namespace) -> int:
    node = commands.metadata(args.path)
    if args.json:
        _print_json(node.to_dict())
        return 0
    print(format_node(node))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspacefs",
        description="Browse and edit files inside a single sandboxed workspace directory.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Config file path (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")

    sub = parser.add_subparsers(dest="subcmd", required=True)

    sp = sub.add_parser("open", help="Open a directory as the workspace")
    sp.add_argument("directory")
    sp.set_defaults(func=cmd_open)

    sp = sub.add_parser("close", help="Close the current workspace")
    sp.set_defaults(func=cmd_close)

    sp = sub.add_parser("current", help="Print the current workspace")
    sp.set_defaults(func=cmd_current)

    sp = sub.add_parser("ls", help="List a directory")
    sp.add_argument("path", nargs="?", default="")
    sp.add_argument("-a", "--all", action="store_true", help="Include hidden entries.")
    sp.add_argument("--offset", type=_non_negative_int, default=0, help="Skip this many entries before listing.")
    sp.add_argument("--limit", type=_non_negative_int, default=None, help="Page size; omit to list everything.")
    sp.add_argument("--json", action="store_true")
    sp.set_defaults(func=cmd_ls)

    sp = sub.add_parser("tree", help="Show a directory with its immediate children")
    sp.add_argument("path", nargs="?", default="")
    sp.add_argument("-a", "--all", action="store_true", help="Include hidden entries.")
    sp.add_argument("--json", action="store_true")
    sp.set_defaults(func=cmd_tree)

    sp = sub.add_parser("count", help="Count directory entries")
    sp.add_argument("path", nargs="?", default="")
    sp.add_argument("-a", "--all", action="store_true", help="Include hidden entries.")
    sp.set_defaults(func=cmd_count)

    sp = sub.add_parser("read", help="Print a text file")
    sp.add_argument("path")
    sp.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    sp.add_argument("--no-color", action="store_true", help="Disable highlighting even on a TTY.")
    sp.set_defaults(func=cmd_read)

    sp = sub.add_parser("write", help="Atomically write stdin to a file")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_write)

    sp = sub.add_parser("touch", help="Create an empty file (fails if it exists)")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_touch)

    sp = sub.add_parser("mkdir", help="Create a directory (fails if it exists)")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_mkdir)

    sp = sub.add_parser("mv", help="Rename or move a file or directory")
    sp.add_argument("old_path")
    sp.add_argument("new_path")
    sp.set_defaults(func=cmd_mv)

    sp = sub.add_parser("rm", help="Delete a file or directory tree")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_rm)

    sp = sub.add_parser("stat", help="Show metadata for one path")
    sp.add_argument("path")
    sp.add_argument("--json", action="store_true")
    sp.set_defaults(func=cmd_stat)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load workspace state, and run one subcommand.

    Typed workspace errors exit through ``SystemExit`` with an ``error:``
    message; the exit status is otherwise the subcommand's return value.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    state = WorkspaceState(resolve_config_path(args.config))
    pool = BlockingWorkPool()
    try:
        state.load()
        return int(args.func(WorkspaceCommands(state, pool), args))
    except WorkspaceError as exc:
        raise SystemExit(f"error: {exc}") from exc
    finally:
        pool.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
