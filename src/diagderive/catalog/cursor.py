"""Immutable cursor for catalog pattern parsing.

Python 3.13+.

Design Philosophy:
    - Cursor is immutable (frozen dataclass)
    - EOF is a state (is_eof), not a return value
    - Every advance() returns NEW cursor (prevents infinite loops)
"""

from dataclasses import dataclass

__all__ = ["Cursor", "PatternSyntaxError"]


class PatternSyntaxError(Exception):
    """Malformed pattern text; position is an offset into the pattern."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.message = message
        self.position = position


@dataclass(frozen=True, slots=True)
class Cursor:
    """Immutable source position tracker.

    Example:
        >>> cursor = Cursor("hello", 0)
        >>> cursor.current
        'h'
        >>> cursor.advance().current
        'e'
        >>> cursor.current  # Original unchanged
        'h'
    """

    source: str
    pos: int

    @property
    def is_eof(self) -> bool:
        return self.pos >= len(self.source)

    @property
    def current(self) -> str:
        """Current character.

        Raises:
            PatternSyntaxError: If at end of input
        """
        if self.is_eof:
            msg = "Unexpected end of pattern"
            raise PatternSyntaxError(msg, self.pos)
        return self.source[self.pos]

    def peek(self, offset: int = 0) -> str | None:
        """Character at position + offset, or None beyond EOF."""
        target_pos = self.pos + offset
        if target_pos >= len(self.source):
            return None
        return self.source[target_pos]

    def advance(self, count: int = 1) -> "Cursor":
        new_pos = min(self.pos + count, len(self.source))
        return Cursor(self.source, new_pos)

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def skip_spaces(self) -> "Cursor":
        """Skip U+0020 only (Fluent inline whitespace)."""
        c = self
        while not c.is_eof and c.current == " ":
            c = c.advance()
        return c

    def skip_blank(self) -> "Cursor":
        """Skip spaces and line breaks (Fluent block whitespace)."""
        c = self
        while not c.is_eof and c.current in (" ", "\n", "\r"):
            c = c.advance()
        return c

    def expect(self, char: str) -> "Cursor":
        """Consume char or fail.

        Raises:
            PatternSyntaxError: If the current character differs
        """
        if self.is_eof or self.current != char:
            found = "end of pattern" if self.is_eof else repr(self.current)
            msg = f"Expected {char!r}, found {found}"
            raise PatternSyntaxError(msg, self.pos)
        return self.advance()
