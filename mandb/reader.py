"""
mandb Reader - strict decoder for mandoc.db files.

The whole buffer is decoded in one synchronous pass:
  - Magic check at the header and at the trailer the header points to
  - Version check
  - Pages table (fixed 20-byte records at offset 20)
  - Macros collection (exactly 36 macro tables)

Any malformed structure raises a ParseError subclass; no partial Database
is ever returned.
"""

from __future__ import annotations

import os
from pathlib import Path

from mandb.buffer import SourceBuffer, U32
from mandb.document import Database, Macros, Name, Page, PageFormat, Pages, Table, Value
from mandb.errors import CountMismatch, InvalidMagic, InvalidVersion, MalformedList, UnknownFormatTag
from mandb.spec import (
    FORMAT_VERSION,
    MACRO_PAGES_CAP,
    MACRO_TABLE_COUNT,
    MACRO_VALUE_SIZE,
    MACROS_POINTER_OFFSET,
    MAGIC,
    MAGIC_OFFSET,
    MAX_FILE_SIZE,
    NAME_SOURCE_MAX,
    NAME_SOURCE_MIN,
    PAGE_COUNT_OFFSET,
    PAGE_RECORD_FIELDS,
    PAGE_RECORD_SIZE,
    PAGES_TABLE_OFFSET,
    TRAILER_POINTER_OFFSET,
    VERSION_OFFSET,
)


# =============================================================================
# Names
# =============================================================================

def decode_names(buf: SourceBuffer, offset: int) -> tuple[Name, ...]:
    """Decode a name list: string list entries prefixed by a source byte."""
    names = []
    for start, end in buf.iter_fragments(offset):
        source = buf.data[start]
        if not NAME_SOURCE_MIN <= source <= NAME_SOURCE_MAX:
            raise MalformedList(
                "invalid source byte",
                offset=start,
                expected=f"{NAME_SOURCE_MIN}..{NAME_SOURCE_MAX}",
                actual=source,
            )
        names.append(Name(text=buf.text(start + 1, end), source=source))
    return tuple(names)


# =============================================================================
# Pages
# =============================================================================

def decode_format(buf: SourceBuffer, offset: int) -> PageFormat:
    tag = buf.read_u8(offset)
    try:
        return PageFormat(tag)
    except ValueError:
        raise UnknownFormatTag(
            "unknown page format", offset=offset, expected="1 or 2", actual=tag
        ) from None


def decode_page(buf: SourceBuffer, offset: int) -> Page:
    """Resolve the 20-byte page record at `offset`."""
    names_at, sects_at, archs_at, desc_at, files_at = (
        buf.read_u32be(offset + i * U32.size) for i in range(len(PAGE_RECORD_FIELDS))
    )

    names = decode_names(buf, names_at)
    sections = buf.read_string_list(sects_at)
    archs = buf.read_string_list(archs_at) if archs_at != 0 else None
    description = buf.read_cstring(desc_at)
    # The files list starts with the format byte
    page_format = decode_format(buf, files_at)
    files = buf.read_string_list(files_at + 1)

    return Page(
        names=names,
        sections=sections,
        architectures=archs,
        description=description,
        files=files,
        format=page_format,
    )


def decode_pages(buf: SourceBuffer) -> Pages:
    count = buf.read_u32be(PAGE_COUNT_OFFSET)
    # Refuse counts whose records cannot fit before allocating anything
    buf.require(PAGES_TABLE_OFFSET, count * PAGE_RECORD_SIZE, "page table")

    table = tuple(
        decode_page(buf, PAGES_TABLE_OFFSET + i * PAGE_RECORD_SIZE)
        for i in range(count)
    )
    if len(table) != count:
        raise CountMismatch(
            "page table length", offset=PAGE_COUNT_OFFSET, expected=count, actual=len(table)
        )
    return Pages(count=count, table=table)


# =============================================================================
# Macros
# =============================================================================

def decode_value(buf: SourceBuffer, offset: int) -> Value:
    """Resolve the 8-byte macro value header at `offset`."""
    text = buf.read_cstring(buf.read_u32be(offset))
    pages_at = buf.read_u32be(offset + U32.size)

    # Each pointer is a page record; its first field is the names offset
    page_names = tuple(
        decode_names(buf, buf.read_u32be(page_at))
        for page_at in buf.iter_pointers(pages_at, MACRO_PAGES_CAP)
    )
    return Value(text=text, page_names=page_names)


def decode_table(buf: SourceBuffer, offset: int) -> Table:
    count = buf.read_u32be(offset)
    if count == 0:
        return Table(count=0, values=())

    values_at = offset + U32.size
    buf.require(values_at, count * MACRO_VALUE_SIZE, "macro table")

    values = tuple(
        decode_value(buf, values_at + i * MACRO_VALUE_SIZE) for i in range(count)
    )
    if len(values) != count:
        raise CountMismatch(
            "macro table length", offset=offset, expected=count, actual=len(values)
        )
    return Table(count=count, values=values)


def decode_macros(buf: SourceBuffer, offset: int) -> Macros:
    count = buf.read_u32be(offset)
    if count != MACRO_TABLE_COUNT:
        raise CountMismatch(
            "macro table count", offset=offset, expected=MACRO_TABLE_COUNT, actual=count
        )

    tables_at = offset + U32.size
    tables = tuple(
        decode_table(buf, buf.read_u32be(tables_at + i * U32.size))
        for i in range(count)
    )
    if len(tables) != MACRO_TABLE_COUNT:
        raise CountMismatch(
            "decoded macro tables", offset=offset, expected=MACRO_TABLE_COUNT, actual=len(tables)
        )
    return Macros(count=count, tables=tables)


# =============================================================================
# Database
# =============================================================================

class MandocDBReader:
    """
    Strict mandoc.db reader.

    Usage:
        # From bytes already in memory
        db = MandocDBReader.parse(data)

        # From a file
        db = MandocDBReader.read("/usr/share/man/mandoc.db")
        page = db.search("ls")
    """

    @staticmethod
    def is_mandoc_db(path: str | Path) -> bool:
        """Fast check if a file is a mandoc.db. Reads only the first 4 bytes."""
        with open(path, "rb") as f:
            head = f.read(U32.size)
        return MandocDBReader.is_mandoc_db_bytes(head)

    @staticmethod
    def is_mandoc_db_bytes(data: bytes) -> bool:
        """Fast check if bytes start with the mandoc.db magic number."""
        return len(data) >= U32.size and U32.unpack_from(data, 0)[0] == MAGIC

    @classmethod
    def read(cls, path: str | Path, max_size: int = MAX_FILE_SIZE) -> Database:
        """Load and fully decode a mandoc.db file."""
        size = os.path.getsize(path)
        if size > max_size:
            raise ValueError(f"File size {size} exceeds maximum of {max_size} bytes")
        with open(path, "rb") as f:
            data = f.read()
        return cls.parse(data)

    @classmethod
    def parse(cls, data: bytes | bytearray | memoryview) -> Database:
        """Decode and validate a complete mandoc.db buffer."""
        buf = SourceBuffer(data)

        magic = buf.read_u32be(MAGIC_OFFSET)
        if magic != MAGIC:
            raise InvalidMagic("bad header magic", offset=MAGIC_OFFSET, expected=MAGIC, actual=magic)
        trailer_offset = buf.read_u32be(TRAILER_POINTER_OFFSET)
        trailer = buf.read_u32be(trailer_offset)
        if trailer != MAGIC:
            raise InvalidMagic("bad trailer magic", offset=trailer_offset, expected=MAGIC, actual=trailer)

        version = buf.read_u32be(VERSION_OFFSET)
        if version != FORMAT_VERSION:
            raise InvalidVersion(
                "unsupported format version", offset=VERSION_OFFSET, expected=FORMAT_VERSION, actual=version
            )

        pages = decode_pages(buf)
        macros_offset = buf.read_u32be(MACROS_POINTER_OFFSET)
        macros = decode_macros(buf, macros_offset)

        return Database(
            magic=magic,
            version=version,
            macros_offset=macros_offset,
            trailer_offset=trailer_offset,
            pages=pages,
            macros=macros,
            buffer=buf,
        )


def parse(data: bytes | bytearray | memoryview) -> Database:
    """Decode a mandoc.db buffer. Raises ParseError on any malformed input."""
    return MandocDBReader.parse(data)
