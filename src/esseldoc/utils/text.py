"""Text helpers for locating R names in buffer text."""

from __future__ import annotations

import string

# Characters R accepts in (possibly namespace-qualified) names, plus the
# operators ESS traditionally lets through so `pkg::fun` and `as.numeric`
# scan as one token.
NAME_CHARS = frozenset(string.ascii_letters + string.digits + "._+:-")


def is_name_char(char: str) -> bool:
    """Return True when `char` may appear inside a name token."""
    return char in NAME_CHARS or char.isalnum()


def clamp_offset(text: str, cursor: int) -> int:
    return max(0, min(cursor, len(text)))


def scan_token(text: str, cursor: int) -> str:
    """Return the run of name characters touching `cursor`.

    The cursor sits between characters, so both `text[cursor - 1]` and
    `text[cursor]` count as touching it. An empty string means there is no
    candidate under the cursor.
    """
    cursor = clamp_offset(text, cursor)

    start = cursor
    while start > 0 and is_name_char(text[start - 1]):
        start -= 1

    end = cursor
    while end < len(text) and is_name_char(text[end]):
        end += 1

    return text[start:end]


def offset_from_position(text: str, line: int, column: int) -> int:
    """Convert a 1-based line and 0-based column into a character offset.

    Columns past the end of the line are clamped to the line end, lines past
    the end of the text map to the end of the text.
    """
    if line < 1:
        raise ValueError(f"Line numbers start at 1, got {line}")
    if column < 0:
        raise ValueError(f"Columns start at 0, got {column}")

    lines = text.splitlines(keepends=True)
    if line > len(lines):
        return len(text)

    offset = sum(len(previous) for previous in lines[: line - 1])
    current = lines[line - 1].rstrip("\r\n")
    return offset + min(column, len(current))
