"""
mandb errors - one exception class per way a mandoc.db can be malformed.

All of them derive from ParseError (itself a ValueError), so callers that
only care whether the file is usable can catch a single type.
"""

from __future__ import annotations

from typing import Any


def _fmt(value: Any, hexify: bool) -> str:
    if hexify and isinstance(value, int):
        return f"0x{value:08x}"
    return repr(value) if isinstance(value, str) else str(value)


class ParseError(ValueError):
    """Raised when a buffer is not a valid mandoc.db."""

    # Render expected/actual as hex (magic numbers, offsets)
    hex_values = False

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        self.message = message
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(self._render())

    def _render(self) -> str:
        text = self.message
        if self.offset is not None:
            text += f" at offset 0x{self.offset:x}"
        if self.expected is not None or self.actual is not None:
            text += (
                f" (expected {_fmt(self.expected, self.hex_values)},"
                f" got {_fmt(self.actual, self.hex_values)})"
            )
        return text


class OutOfBounds(ParseError):
    """A read would run past the end of the buffer."""


class InvalidMagic(ParseError):
    """Header or trailer magic number is wrong."""

    hex_values = True


class InvalidVersion(ParseError):
    """Unsupported format version."""


class InvalidUtf8(ParseError):
    """A string is not valid UTF-8."""


class MalformedList(ParseError):
    """Bad list framing or a name source byte outside 1..31."""


class CountMismatch(ParseError):
    """A declared count disagrees with what was decoded."""


class UnknownFormatTag(ParseError):
    """A page format byte is neither 1 nor 2."""
