"""Reading structured log files back and rendering them as text."""

from __future__ import annotations

import argparse
import os
import sys
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, TextIO

from .errors import CuError
from .interning import read_interned_strings
from .logentry import CuLogEntry, read_log_entry, rebuild_logline


class ExportFormat(str, Enum):
    """Output formats for exported data."""

    JSON = "json"
    CSV = "csv"

    def __str__(self) -> str:
        return self.value


def iter_log_entries(src: BinaryIO) -> Iterator[CuLogEntry]:
    """Yield entries from a binary stream until its end or an entry with index 0."""
    while True:
        try:
            entry = read_log_entry(src)
        except EOFError:
            return
        except CuError as exc:
            raise CuError("Error reading log", exc) from exc
        except OSError as exc:
            raise CuError("Error reading log", exc) from exc
        if entry.msg_index == 0:
            return
        yield entry


def textlog_dump(
    src: BinaryIO, index: str | os.PathLike, out: TextIO | None = None
) -> None:
    """Write every entry of src as a text line, using the string index at index."""
    if out is None:
        out = sys.stdout
    all_strings = read_interned_strings(index)
    for entry in iter_log_entries(src):
        try:
            line = rebuild_logline(all_strings, entry)
        except (CuError, IndexError) as err:
            print(f"Failed to rebuild log line: {err}", file=sys.stderr)
            continue
        print(f"{entry.time}: {line}", file=out)


def _entries_from_file(handle: BinaryIO) -> Iterator[CuLogEntry]:
    with handle:
        yield from iter_log_entries(handle)


def struct_log_iterator_bare(
    bare_struct_src_path: str | os.PathLike, index_path: str | os.PathLike
) -> tuple[Iterator[CuLogEntry], list[str]]:
    """Open a bare structured log file; return its entries and the interned strings."""
    handle = open(bare_struct_src_path, "rb")
    try:
        all_strings = read_interned_strings(index_path)
    except BaseException:
        handle.close()
        raise
    return _entries_from_file(handle), all_strings


def entry_timestamp(entry: CuLogEntry) -> timedelta:
    """The entry's time, in nanoseconds, as a timedelta (microsecond precision)."""
    return timedelta(microseconds=entry.time // 1_000)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copperlog-export",
        description="Extract the content of a structured log file.",
    )
    parser.add_argument("log", type=Path, help="path of the binary structured log file")
    commands = parser.add_subparsers(dest="command", required=True)
    extract = commands.add_parser("extract-log", help="extract the text logs")
    extract.add_argument("log_index", type=Path, help="path of the string index")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Command line entry point."""
    args = _build_parser().parse_args(argv)
    try:
        with open(args.log, "rb") as src:
            textlog_dump(src, args.log_index)
    except (CuError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0