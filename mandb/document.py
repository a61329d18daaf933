"""
mandb document - the decoded, read-only view of a mandoc.db.

Every text field is a StrView borrowing from the Database's SourceBuffer,
and every container is a frozen dataclass holding tuples. Nothing is
mutated after the reader builds it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator

from mandb.buffer import SourceBuffer, StrView, fold_ascii
from mandb.spec import FORMAT_MDOC_MAN, FORMAT_PREFORMATTED

# Non-mdoc/man pages listed by Database.summary()
SUMMARY_LIST_LIMIT = 5


class NameSource(enum.IntFlag):
    """Where in a manual page a name was found. Bits combine freely."""

    SYNOPSIS = 0x01
    NAME_ANY = 0x02
    NAME_FIRST = 0x04
    HEADER = 0x08
    FILENAME = 0x10


class PageFormat(enum.Enum):
    MDOC_MAN = FORMAT_MDOC_MAN
    PREFORMATTED = FORMAT_PREFORMATTED

    def __str__(self) -> str:
        if self is PageFormat.MDOC_MAN:
            return "man(7) or mdoc(7)"
        return "preformatted"


@dataclass(frozen=True)
class Name:
    text: StrView
    source: int

    @property
    def sources(self) -> NameSource:
        return NameSource(self.source)

    def __str__(self) -> str:
        return str(self.text)


def _join(items) -> str:
    return ", ".join(str(item) for item in items)


@dataclass(frozen=True)
class Page:
    names: tuple[Name, ...]
    sections: tuple[StrView, ...]
    architectures: tuple[StrView, ...] | None  # None: machine-independent
    description: StrView
    files: tuple[StrView, ...]
    format: PageFormat

    @property
    def machine_independent(self) -> bool:
        return self.architectures is None

    def has_name(self, query: str) -> bool:
        """Exact match against any of the page's names, ignoring ASCII case."""
        folded = fold_ascii(query)
        return any(name.text.fold_ascii() == folded for name in self.names)

    def describe(self) -> str:
        """Human-readable multi-line summary of the page."""
        if self.architectures is None:
            archs = "machine-independent"
        else:
            archs = _join(self.architectures)
        return "\n".join([
            f"* Names: {_join(self.names)}",
            f"* Sections: {_join(self.sections)}",
            f"* Architectures: {archs}",
            f"* Description: {self.description}",
            f"* Files: {_join(self.files)}",
            f"* Format: {self.format}",
        ])


@dataclass(frozen=True)
class Pages:
    count: int
    table: tuple[Page, ...]

    def __len__(self) -> int:
        return len(self.table)

    def __iter__(self) -> Iterator[Page]:
        return iter(self.table)


@dataclass(frozen=True)
class Value:
    """One macro argument and the names of every page that uses it."""

    text: StrView
    page_names: tuple[tuple[Name, ...], ...]


@dataclass(frozen=True)
class Table:
    count: int
    values: tuple[Value, ...]


@dataclass(frozen=True)
class Macros:
    count: int
    tables: tuple[Table, ...]

    def __len__(self) -> int:
        return len(self.tables)


@dataclass(frozen=True)
class Database:
    magic: int
    version: int
    macros_offset: int
    trailer_offset: int
    pages: Pages
    macros: Macros
    buffer: SourceBuffer = field(repr=False, compare=False)

    @property
    def page_count(self) -> int:
        return self.pages.count

    @property
    def macro_count(self) -> int:
        return self.macros.count

    @property
    def file_count(self) -> int:
        """Total number of file names across all pages."""
        return sum(len(page.files) for page in self.pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self.pages)

    def search(self, query: str) -> Page | None:
        """First page (in page order) with a name equal to `query`, ignoring ASCII case."""
        for page in self.pages:
            if page.has_name(query):
                return page
        return None

    def preformatted_pages(self) -> list[Page]:
        return [page for page in self.pages if page.format is PageFormat.PREFORMATTED]

    def summary(self) -> str:
        count = self.page_count
        noun = "entry" if count == 1 else "entries"
        lines = ["[MANDOC.DB]", f"* Contains {count} man page {noun}."]

        others = self.preformatted_pages()
        if not others:
            lines.append("* All pages use man(7) or mdoc(7).")
            return "\n".join(lines)

        if len(others) == 1:
            lines.append("* One page does not use man(7) or mdoc(7).")
        else:
            lines.append(f"* {len(others)} pages do not use man(7) or mdoc(7).")

        for page in others[:SUMMARY_LIST_LIMIT]:
            if len(page.names) == 1:
                lines.append(f"    - {page.names[0]}")
            else:
                lines.append(f"    - [{_join(page.names)}]")
        if len(others) > SUMMARY_LIST_LIMIT:
            lines.append("    - ...")
        return "\n".join(lines)
