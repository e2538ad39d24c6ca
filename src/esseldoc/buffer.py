"""Immutable view over buffer text used by the documentation lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from esseldoc.utils.text import clamp_offset, scan_token

LOGGER = logging.getLogger(__name__)

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {closer: opener for opener, closer in OPENERS.items()}
QUOTES = frozenset("\"'`")


@dataclass(frozen=True, slots=True)
class BufferSnapshot:
    """Text of a buffer at lookup time together with the cursor offset."""

    text: str
    cursor: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "cursor", clamp_offset(self.text, self.cursor))

    def text_around(self, cursor: int, radius: int) -> str:
        """Return up to `radius` characters on each side of `cursor`."""
        cursor = clamp_offset(self.text, cursor)
        return self.text[max(cursor - radius, 0) : cursor + radius]

    def token_at(self, cursor: int | None = None) -> str:
        return scan_token(self.text, self.cursor if cursor is None else cursor)

    def _code_brackets(self, cursor: int) -> list[int]:
        """Offsets of brackets before `cursor` that are outside strings and comments."""
        text = self.text
        found: list[int] = []
        quote: str | None = None
        index = 0

        while index < cursor:
            char = text[index]
            if quote is not None:
                if char == "\\" and quote != "`":
                    index += 1
                elif char == quote:
                    quote = None
            elif char in QUOTES:
                quote = char
            elif char == "#":
                newline = text.find("\n", index, cursor)
                if newline == -1:
                    break
                index = newline
            elif char in OPENERS or char in CLOSERS:
                found.append(index)
            index += 1

        return found

    def bracket_ascend(self, cursor: int | None = None) -> int | None:
        """Return the offset of the opening bracket enclosing `cursor`.

        Walks backward from the cursor over balanced lists, skipping brackets
        inside strings, backquoted names and comments. Returns None at top
        level and when a closing bracket between the cursor and the enclosing
        opener does not match its partner. Brackets before that opener are
        never looked at.
        """
        cursor = self.cursor if cursor is None else clamp_offset(self.text, cursor)
        text = self.text
        pending: list[str] = []

        for index in reversed(self._code_brackets(cursor)):
            char = text[index]
            if char in CLOSERS:
                pending.append(char)
            elif not pending:
                return index
            elif OPENERS[char] != pending.pop():
                LOGGER.debug("Unbalanced %r at offset %d", char, index)
                return None

        return None
