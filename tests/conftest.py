"""
Shared fixtures - assemble mandoc.db images in memory.

DBBuilder lays a database out the same way makewhatis(8) does: header,
page records, a heap of strings and lists, the macro tables, then the
trailing magic number. Knobs on the builder break individual invariants.
"""

import struct
from dataclasses import dataclass

import pytest

from mandb.spec import (
    FORMAT_MDOC_MAN,
    FORMAT_VERSION,
    MACRO_TABLE_COUNT,
    MAGIC,
    PAGE_RECORD_SIZE,
    PAGES_TABLE_OFFSET,
)


def strlist(items) -> bytes:
    return b"".join(item.encode("utf-8") + b"\0" for item in items) + b"\0"


@dataclass
class PageSpec:
    names: list
    sections: list
    archs: list | None
    desc: str
    files: list
    fmt: int


class DBBuilder:

    def __init__(self) -> None:
        self.magic = MAGIC
        self.trailer_magic = MAGIC
        self.version = FORMAT_VERSION
        self.macro_table_count = MACRO_TABLE_COUNT
        self.pages: list[PageSpec] = []
        self.macros: list[list[tuple[str, list[int], bool]]] = [[] for _ in range(MACRO_TABLE_COUNT)]
        # raw bytes overriding a page's encoded names list, by page index
        self.raw_names: dict[int, bytes] = {}

    def add_page(self, names, sections=("1",), archs=None, desc="a page",
                 files=("page.1",), fmt=FORMAT_MDOC_MAN) -> int:
        """Add a page; `names` holds plain strings or (name, source) pairs."""
        pairs = [(n, 0x02) if isinstance(n, str) else n for n in names]
        self.pages.append(PageSpec(pairs, list(sections), archs, desc, list(files), fmt))
        return len(self.pages) - 1

    def add_macro(self, table: int, value: str, pages=(), terminate=True) -> None:
        self.macros[table].append((value, list(pages), terminate))

    def page_offset(self, index: int) -> int:
        return PAGES_TABLE_OFFSET + index * PAGE_RECORD_SIZE

    def build(self) -> bytes:
        base = PAGES_TABLE_OFFSET + len(self.pages) * PAGE_RECORD_SIZE
        heap = bytearray()

        def put(raw: bytes) -> int:
            offset = base + len(heap)
            heap.extend(raw)
            return offset

        records = []
        for index, page in enumerate(self.pages):
            if index in self.raw_names:
                names = put(self.raw_names[index])
            else:
                names = put(b"".join(
                    bytes([source]) + name.encode("utf-8") + b"\0" for name, source in page.names
                ) + b"\0")
            sects = put(strlist(page.sections))
            archs = 0 if page.archs is None else put(strlist(page.archs))
            desc = put(page.desc.encode("utf-8") + b"\0")
            files = put(bytes([page.fmt]) + strlist(page.files))
            records.append(struct.pack(">5I", names, sects, archs, desc, files))

        tables = []
        for table in self.macros[:self.macro_table_count]:
            headers = []
            for value, page_ids, terminate in table:
                text = put(value.encode("utf-8") + b"\0")
                pointers = b"".join(struct.pack(">I", self.page_offset(i)) for i in page_ids)
                if terminate:
                    pointers += struct.pack(">I", 0)
                headers.append(struct.pack(">II", text, put(pointers)))
            tables.append(put(struct.pack(">I", len(table)) + b"".join(headers)))

        macros = put(struct.pack(">I", self.macro_table_count)
                     + b"".join(struct.pack(">I", t) for t in tables))
        trailer = put(struct.pack(">I", self.trailer_magic))

        header = struct.pack(">5I", self.magic, self.version, macros, trailer, len(self.pages))
        return header + b"".join(records) + bytes(heap)


@pytest.fixture
def builder():
    return DBBuilder()


@pytest.fixture
def sample_builder(builder):
    ls = builder.add_page(
        [("ls", 0x07), ("dir", 0x02)], sections=["1"], desc="list directory contents",
        files=["man1/ls.1"],
    )
    builder.add_page(
        ["mount"], sections=["8"], archs=["amd64", "arm64"], desc="mount file systems",
        files=["man8/mount.8", "cat8/mount.0"], fmt=2,
    )
    printf = builder.add_page(
        [("printf", 0x1F)], sections=["1", "3"], desc="formatted output",
        files=["man1/printf.1", "man3/printf.3"],
    )
    builder.add_macro(0, "ls", pages=[ls])
    builder.add_macro(0, "printf", pages=[printf, ls])
    builder.add_macro(5, "-l", pages=[ls])
    return builder


@pytest.fixture
def sample_db(sample_builder):
    return sample_builder.build()
