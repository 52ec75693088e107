"""Terminal rendering for file contents printed by the CLI.

Highlights with Pygments and neutralizes terminal control bytes so printing an
untrusted workspace file cannot move the cursor, ring the bell, or rewrite
the terminal title.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, TerminalFormatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


def sanitize_terminal_text(source: str) -> str:
    """Escape C0/C1 control bytes (except newline, CR, tab) as ``\\xNN``."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _normalize_style(style: str) -> str:
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def colorize_source(source: str, path: Path, style: str = DEFAULT_STYLE) -> str:
    """Return ANSI-highlighted ``source`` using a lexer picked from ``path``.

    Unknown styles fall back to ``DEFAULT_STYLE``; unknown file types are
    rendered with the plain-text lexer.
    """
    safe_source = sanitize_terminal_text(source)
    formatter = _formatter_for_style(_normalize_style(style))
    try:
        lexer = get_lexer_for_filename(path.name, safe_source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(safe_source, lexer, formatter)


__all__ = [
    "DEFAULT_STYLE",
    "sanitize_terminal_text",
    "colorize_source",
]
