"""Character cursor over expression source text.

Tracks how many characters have been consumed so that every syntax error
can point at the 1-based position where parsing stopped.
"""

from __future__ import annotations

from typing import Optional

from exprtree.errors import EndOfInput, SourceLocation


class Cursor:
    """Forward-only reader over a source string."""

    def __init__(self, source: str, filename: str = "<expr>"):
        self.source = source
        self.filename = filename
        self.pos = 0

    @property
    def position(self) -> int:
        """1-based position of the next character to be read."""
        return self.pos + 1

    def location(self) -> SourceLocation:
        return SourceLocation(self.position, self.filename)

    def is_empty(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> str:
        if self.is_empty():
            raise EndOfInput(self.location())
        return self.source[self.pos]

    def advance(self) -> str:
        ch = self.peek()
        self.pos += 1
        return ch

    def peek_ahead(self, offset: int = 1) -> Optional[str]:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return None

    def at(self, ch: str) -> bool:
        """True when the next character is ``ch``; never raises."""
        return not self.is_empty() and self.source[self.pos] == ch

    def skip_whitespace(self) -> None:
        while not self.is_empty() and self.source[self.pos].isspace():
            self.pos += 1
