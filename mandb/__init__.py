"""
mandb - read-only decoder for mandoc.db manual page index databases.

Usage:
    from mandb import parse

    db = parse(data)
    page = db.search("ls")
"""

from mandb.buffer import SourceBuffer, StrView
from mandb.document import Database, Macros, Name, NameSource, Page, PageFormat, Pages, Table, Value
from mandb.errors import (
    CountMismatch,
    InvalidMagic,
    InvalidUtf8,
    InvalidVersion,
    MalformedList,
    OutOfBounds,
    ParseError,
    UnknownFormatTag,
)
from mandb.reader import MandocDBReader, parse

__version__ = "0.1.0"

__all__ = [
    "parse", "MandocDBReader",
    "Database", "Pages", "Page", "Name", "NameSource", "PageFormat",
    "Macros", "Table", "Value",
    "SourceBuffer", "StrView",
    "ParseError", "OutOfBounds", "InvalidMagic", "InvalidVersion",
    "InvalidUtf8", "MalformedList", "CountMismatch", "UnknownFormatTag",
]
