"""Interactive search over a mandoc.db file."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from mandb.document import Database
from mandb.errors import ParseError
from mandb.reader import MandocDBReader
from mandb.spec import FILENAME

logger = logging.getLogger(__name__)

PROMPT = "SEARCH: "
QUIT = "quit"


def search(db: Database, query: str, out: TextIO) -> bool:
    """Print the first page named `query`. Returns False if nothing matched."""
    page = db.search(query)
    if page is None:
        print(f'No results for "{query}".\n', file=out)
        return False
    print(f"{page.describe()}\n", file=out)
    return True


def repl(db: Database, stdin: TextIO, out: TextIO) -> None:
    """Prompt for names until "quit" or end of input."""
    print(db.summary(), file=out)
    print(f'* Type "{QUIT}" to exit.\n', file=out)

    while True:
        out.write(PROMPT)
        out.flush()
        line = stdin.readline()
        if not line:
            break
        query = line.strip()
        if not query:
            continue
        if query.lower() == QUIT:
            break
        search(db, query, out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mandb-search",
        description=f"Search the manual page index in a {FILENAME} file",
    )
    parser.add_argument("db_file", help=f"Path to the {FILENAME} file")
    parser.add_argument("-s", "--search", metavar="NAME", help="Search for a page entry by name and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        db = MandocDBReader.read(args.db_file)
    except OSError as e:
        logger.error(f"Cannot read {args.db_file}: {e}")
        return 1
    except ParseError as e:
        logger.error(f"Invalid {FILENAME} file {args.db_file}: {e}")
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1

    if args.search is not None:
        return 0 if search(db, args.search, sys.stdout) else 1

    repl(db, sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
