"""
mandb buffer - bounds-checked primitive reads over one immutable buffer.

Nothing here copies text out of the buffer: strings come back as StrView
objects (buffer handle + offset + length) that decode on demand.

Endianness: every number in a mandoc.db is a BIG-ENDIAN u32. The '>' prefix
in the struct format enforces it.
"""

from __future__ import annotations

import string
import struct
from typing import Iterator

from mandb.errors import InvalidUtf8, MalformedList, OutOfBounds

U32 = struct.Struct(">I")

NUL = b"\x00"

# Lowercases A-Z only; every other character is left alone
ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def fold_ascii(text: str) -> str:
    return text.translate(ASCII_LOWER)


class StrView:
    """Borrowed, read-only UTF-8 string inside a SourceBuffer."""

    __slots__ = ("_data", "offset", "length")

    def __init__(self, data: bytes, offset: int, length: int) -> None:
        self._data = data
        self.offset = offset
        self.length = length

    @property
    def raw(self) -> memoryview:
        """Zero-copy view of the encoded bytes (terminator excluded)."""
        return memoryview(self._data)[self.offset:self.offset + self.length]

    def fold_ascii(self) -> str:
        return fold_ascii(str(self))

    def __str__(self) -> str:
        return str(self.raw, "utf-8")

    def __repr__(self) -> str:
        return f"StrView({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StrView):
            return self.raw == other.raw
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


class SourceBuffer:
    """
    The single owner of a mandoc.db's bytes.

    Mutable input (bytearray, memoryview) is copied once into `bytes` so
    nothing decoded from it can change underneath its readers.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = data if isinstance(data, bytes) else bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    def require(self, offset: int, size: int, what: str) -> None:
        if offset < 0 or offset + size > len(self._data):
            raise OutOfBounds(
                f"{what} runs past end of buffer",
                offset=offset,
                expected=f"{size} bytes",
                actual=f"{max(0, len(self._data) - max(offset, 0))} bytes",
            )

    # ─── Numbers ────────────────────────────────────────────────────

    def read_u8(self, offset: int) -> int:
        self.require(offset, 1, "byte read")
        return self._data[offset]

    def read_u32be(self, offset: int) -> int:
        """Read a big-endian u32 at `offset`."""
        self.require(offset, U32.size, "u32 read")
        return U32.unpack_from(self._data, offset)[0]

    # ─── Strings ────────────────────────────────────────────────────

    def text(self, start: int, end: int) -> StrView:
        """Validate bytes [start, end) as UTF-8 and return a view of them."""
        try:
            str(memoryview(self._data)[start:end], "utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidUtf8(
                f"invalid UTF-8 ({exc.reason})", offset=start + exc.start
            ) from exc
        return StrView(self._data, start, end - start)

    def view(self, offset: int, length: int) -> StrView:
        """Bounds-checked `text()` for `length` bytes starting at `offset`."""
        self.require(offset, length, "string view")
        return self.text(offset, offset + length)

    def read_cstring(self, offset: int) -> StrView:
        """Read one NUL-terminated string; the NUL is not part of the result."""
        self.require(offset, 1, "string read")
        end = self._data.find(NUL, offset)
        if end < 0:
            raise OutOfBounds("unterminated string runs past end of buffer", offset=offset)
        return self.text(offset, end)

    # ─── Self-delimiting lists ──────────────────────────────────────

    def iter_fragments(self, offset: int) -> Iterator[tuple[int, int]]:
        """
        Walk a NUL-separated list lazily, yielding (start, end) of each entry.

        An empty entry (a NUL exactly where an entry should start) closes the
        list and is not yielded, so a NUL at `offset` means an empty list.
        """
        self.require(offset, 1, "list read")
        pos = offset
        while True:
            end = self._data.find(NUL, pos)
            if end < 0:
                raise MalformedList("list is missing its terminator", offset=offset)
            if end == pos:
                return
            yield pos, end
            pos = end + 1

    def read_string_list(self, offset: int) -> tuple[StrView, ...]:
        return tuple(self.text(start, end) for start, end in self.iter_fragments(offset))

    def iter_pointers(self, offset: int, cap: int) -> Iterator[int]:
        """
        Walk a list of u32 offsets lazily, stopping at a zero entry.

        At most `cap` entries are read; hitting the cap ends the list
        without error.
        """
        for index in range(cap):
            pointer = self.read_u32be(offset + index * U32.size)
            if pointer == 0:
                return
            yield pointer
