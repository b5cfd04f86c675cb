"""
Input parsing for pq-bench.

The input is a CSV-like stream: one header line (always discarded) followed by
``hostname,start_time,end_time`` lines. Time values are passed through as text;
PostgreSQL validates them when the query runs.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO

from pq_bench.domain.models import QueryRecord
from pq_bench.errors import ConfigurationError, InputFormatError

FIELD_COUNT = 3
STDIN_MARKER = "-"


def parse_record_line(line: str, line_no: int) -> QueryRecord:
    """
    Parse one input line into a QueryRecord.

    Parameters
    ----------
    line : str
        Raw line, with or without its trailing newline.
    line_no : int
        1-based line number used in error messages.

    Raises
    ------
    InputFormatError
        If the line does not hold exactly three non-empty fields.
    """
    stripped = line.rstrip("\r\n")
    fields = stripped.split(",") if stripped else []
    if len(fields) != FIELD_COUNT:
        raise InputFormatError(line_no, len(fields))

    for position, value in enumerate(fields, start=1):
        if not value:
            raise InputFormatError(
                line_no,
                len(fields),
                detail=f"empty field {position} in input line {line_no}",
            )

    key, range_start, range_end = fields
    return QueryRecord(key=key, range_start=range_start, range_end=range_end)


def read_records(stream: TextIO) -> Iterator[QueryRecord]:
    """
    Yield records from ``stream``, skipping the header line.

    Line numbers count the header as line 1, so the first record is line 2.

    Raises
    ------
    InputFormatError
        On a malformed line, or when the input cannot be decoded as UTF-8.
        Decoding happens in chunks, so the reported line is approximate.
    """
    line_no = 1
    try:
        header = stream.readline()
        if not header:
            return
        for line_no, line in enumerate(stream, start=2):
            yield parse_record_line(line, line_no)
    except UnicodeDecodeError as exc:
        raise InputFormatError(
            line_no,
            0,
            detail=f"input is not valid UTF-8 near input line {line_no} ({exc.reason})",
        ) from exc


@contextmanager
def open_input(path: Optional[Path | str]) -> Iterator[TextIO]:
    """
    Open the input source; ``None`` or ``"-"`` selects standard input.

    Standard input is left open on exit; files are always closed.
    """
    if path is None or str(path) == STDIN_MARKER:
        yield sys.stdin
        return

    try:
        handle = open(path, "r", encoding="utf-8", newline="")
    except OSError as exc:
        raise ConfigurationError(f"cannot open input file {path} ({exc.strerror})") from exc
    try:
        yield handle
    finally:
        handle.close()


__all__ = ["FIELD_COUNT", "open_input", "parse_record_line", "read_records"]
