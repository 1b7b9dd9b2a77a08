"""Delimited-text reading and writing."""

from __future__ import annotations

import csv
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence, TextIO

from csv_exec.models.errors import ConfigurationError, InputError, OutputError

TAB_ESCAPE = r"\t"

# Fields have no size limit.
csv.field_size_limit(sys.maxsize)


def parse_single_char(value: str, *, option: str, allow_tab_escape: bool = False) -> str:
    """Validate ``value`` is exactly one ASCII character (``\\t`` optionally allowed)."""
    if allow_tab_escape and value == TAB_ESCAPE:
        return "\t"
    if not value:
        raise ConfigurationError(f"Missing value for {option}", option=option)
    if len(value) != 1 or not value.isascii():
        raise ConfigurationError(f"Value {value} must be 1 ASCII character", option=option)
    return value


@dataclass(frozen=True)
class CsvDialect:
    delimiter: str = ","
    quote: str = '"'

    @classmethod
    def parse(cls, delimiter: str, quote: str, *, prefix: str = "") -> "CsvDialect":
        return cls(
            delimiter=parse_single_char(delimiter, option=f"{prefix}delimiter", allow_tab_escape=True),
            quote=parse_single_char(quote, option=f"{prefix}quote"),
        )

    def reader_kwargs(self) -> dict:
        return {"delimiter": self.delimiter, "quotechar": self.quote}

    def writer_kwargs(self) -> dict:
        return {
            "delimiter": self.delimiter,
            "quotechar": self.quote,
            "quoting": csv.QUOTE_MINIMAL,
            "lineterminator": "\n",
        }


@contextmanager
def open_input(path: Path | None) -> Iterator[TextIO]:
    """Yield a text stream for ``path``, or stdin when ``path`` is ``None``."""
    if path is None:
        yield sys.stdin
        return

    try:
        handle = path.open("r", encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise InputError(f"Failed to open {path}: {exc.strerror or exc}") from exc
    with handle:
        yield handle


@contextmanager
def open_output(path: Path | None) -> Iterator[TextIO]:
    """Yield a text stream for ``path``, or stdout when ``path`` is ``None``."""
    if path is None:
        yield sys.stdout
        return

    try:
        handle = path.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise OutputError(f"Failed to create {path}: {exc.strerror or exc}") from exc
    with handle:
        yield handle


def _strip_bom(row: list[str]) -> list[str]:
    if row and row[0].startswith("\ufeff"):
        return [row[0][1:], *row[1:]]
    return row


def iter_records(
    stream: TextIO,
    dialect: CsvDialect,
    *,
    has_header: bool,
) -> tuple[list[str] | None, Iterator[list[str]]]:
    """Return the header (when ``has_header``) and a lazy iterator of records.

    Empty lines are skipped. Every record must have as many fields as the
    header, or as the first record when there is no header; a mismatch or a
    malformed row raises :class:`InputError`. An empty input with
    ``has_header`` yields an empty header.
    """
    reader = csv.reader(stream, **dialect.reader_kwargs())

    def _next_row() -> list[str] | None:
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return None
            except csv.Error as exc:
                raise InputError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc
            if row:
                return row

    first = _next_row()
    if first is not None:
        first = _strip_bom(first)

    header: list[str] | None = None
    if has_header:
        header, first = first or [], None

    def _records() -> Iterator[list[str]]:
        expected = len(header) if header else None
        row = first if first is not None else _next_row()
        while row is not None:
            if expected is None:
                expected = len(row)
            elif len(row) != expected:
                raise InputError(
                    f"Record at line {reader.line_num} has {len(row)} fields, expected {expected}"
                )
            yield row
            row = _next_row()

    return header, _records()


class RecordWriter:
    """Write rows with minimal quoting and ``\\n`` line endings."""

    def __init__(self, stream: TextIO, dialect: CsvDialect) -> None:
        self._stream = stream
        self._writer = csv.writer(stream, **dialect.writer_kwargs())

    def write_header(self, header: Sequence[str], new_column_name: str) -> None:
        self.write([*header, new_column_name])

    def write(self, record: Sequence[str]) -> None:
        try:
            self._writer.writerow(record)
            self._stream.flush()
        except OSError as exc:
            raise OutputError(f"Failed to write record: {exc.strerror or exc}") from exc


__all__ = [
    "CsvDialect",
    "RecordWriter",
    "TAB_ESCAPE",
    "iter_records",
    "open_input",
    "open_output",
    "parse_single_char",
]
