"""
mandoc.db Format Specification v1
=================================

Layout (all numbers are big-endian u32, all offsets from the file start):
    0   magic number              <- 0x3a7d0cdb
    4   version                   <- 1
    8   offset of MACROS          <- collection of macro tables
    12  offset of trailer         <- points at a second copy of the magic
    16  page count N
    20  N page records            <- 20 bytes each, no padding
    ... string heap, MACROS, macro tables ...
        magic number, again       <- trailer

Page record (5 offsets):
    names         <- name list (each entry: source byte + string)
    sections      <- string list
    architectures <- string list, 0 means machine-independent
    description   <- single string
    files         <- format byte, then string list

MACROS:
    count (always 36), then 36 offsets of macro tables

Macro table:
    count, then `count` value headers of 8 bytes:
        offset of the macro string
        offset of a page pointer list (0-terminated, at most 21 entries)

Data types:
    String       <- NUL-terminated UTF-8
    String list  <- consecutive strings, closed by one extra empty string
    Name list    <- string list whose entries start with a source byte (1..31)
"""

# Magic number - first and last four bytes of every mandoc.db
MAGIC = 0x3A7D0CDB

# Format version
FORMAT_VERSION = 1

# Header fields
MAGIC_OFFSET = 0
VERSION_OFFSET = 4
MACROS_POINTER_OFFSET = 8
TRAILER_POINTER_OFFSET = 12
PAGE_COUNT_OFFSET = 16

# Pages table
PAGES_TABLE_OFFSET = 20
PAGE_RECORD_SIZE = 20
PAGE_RECORD_FIELDS = ("names", "sections", "architectures", "description", "files")

# Macros
MACRO_TABLE_COUNT = 36
MACRO_VALUE_SIZE = 8
MACRO_PAGES_CAP = 21

# Page format tags (first byte of the files list)
FORMAT_MDOC_MAN = 1
FORMAT_PREFORMATTED = 2

# Name source bits
NAME_SOURCES = {
    0x01: "a SYNOPSIS section .Nm block",
    0x02: "any NAME section .Nm macro",
    0x04: "the first NAME section .Nm macro",
    0x08: "a header line (.Dt or .TH)",
    0x10: "a file name",
}
NAME_SOURCE_MIN = 1
NAME_SOURCE_MAX = 31

# Conventional file name
FILENAME = "mandoc.db"

# Largest file MandocDBReader.read() will load by default (64 MiB)
MAX_FILE_SIZE = 64 * 1024 * 1024
