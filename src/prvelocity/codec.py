"""Delimited text encoding of pull request records.

Layout: one header line followed by one line per record. The title column is
always wrapped in double quotes with embedded quotes doubled. Other columns are
written bare unless they contain a comma or a quote, in which case they are
quoted the same way. Line breaks inside text values are written as spaces so
every record occupies exactly one line.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .errors import DecodeError
from .models import PullRequestRecord

logger = logging.getLogger(__name__)

SEPARATOR = ","
QUOTE = '"'
HEADER = (
    "Author",
    "AuthorEmail",
    "Project",
    "Repository",
    "ClosedDate",
    "PRId",
    "Title",
    "LinesAdded",
    "LinesDeleted",
)
HEADER_LINE = SEPARATOR.join(HEADER)

_MIN_COLUMNS = 5
_SPECIAL_CHARACTERS = (SEPARATOR, QUOTE)
_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def _single_line(value: str) -> str:
    return _LINE_BREAK_PATTERN.sub(" ", value)


def quote_field(value: str) -> str:
    """Wrap a value in quotes, doubling any quote characters it contains."""
    return QUOTE + _single_line(value).replace(QUOTE, QUOTE * 2) + QUOTE


def _bare_field(value: str) -> str:
    if any(character in value for character in _SPECIAL_CHARACTERS):
        return quote_field(value)
    return _single_line(value)


def encode_record(record: PullRequestRecord) -> str:
    """Encode one record as a single delimited line (without line terminator)."""
    return SEPARATOR.join(
        [
            _bare_field(record.author),
            _bare_field(record.author_email),
            _bare_field(record.project),
            _bare_field(record.repository),
            record.closed_date.isoformat(),
            str(record.pr_id),
            quote_field(record.title),
            str(record.lines_added),
            str(record.lines_deleted),
        ]
    )


def encode_records(records: Iterable[PullRequestRecord]) -> str:
    """Encode records with a header line; lines are joined by ``\\n``."""
    lines = [HEADER_LINE]
    lines.extend(encode_record(record) for record in records)
    return "\n".join(lines)


def split_line(line: str) -> List[str]:
    """Split one line on separators that are outside quotes.

    A quote opens or closes a quoted section; two quotes inside a quoted
    section stand for one literal quote.

    Raises:
        DecodeError: If a quoted section is still open at the end of the line.
    """
    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    index = 0
    length = len(line)

    while index < length:
        character = line[index]
        if character == QUOTE:
            if in_quotes and index + 1 < length and line[index + 1] == QUOTE:
                current.append(QUOTE)
                index += 1
            else:
                in_quotes = not in_quotes
        elif character == SEPARATOR and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(character)
        index += 1

    if in_quotes:
        raise DecodeError("Unterminated quoted field.")

    values.append("".join(current))
    return values


def _parse_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def decode_row(values: Sequence[str]) -> PullRequestRecord:
    """Build a record from already split column values.

    Numeric columns that fail to parse become ``0``.

    Raises:
        DecodeError: If the row has too few columns or an invalid closed date.
    """
    if len(values) < _MIN_COLUMNS:
        raise DecodeError(f"Expected at least {_MIN_COLUMNS} columns, got {len(values)}.")

    try:
        closed_date = date.fromisoformat(values[4].strip())
    except ValueError as exc:
        raise DecodeError(f"Invalid ClosedDate value: {values[4]!r}.") from exc

    def column(index: int) -> str:
        return values[index] if index < len(values) else ""

    return PullRequestRecord(
        author=values[0],
        author_email=values[1],
        project=values[2],
        repository=values[3],
        closed_date=closed_date,
        pr_id=_parse_int(column(5)),
        title=column(6),
        lines_added=_parse_int(column(7)),
        lines_deleted=_parse_int(column(8)),
    )


def decode_records(text: Optional[str]) -> List[PullRequestRecord]:
    """Decode delimited text produced by :func:`encode_records`.

    The first line is treated as the header and ignored. Each following line
    is one record, split with :func:`split_line`, so separators and doubled
    quotes inside a quoted title stay part of the title. Blank lines, including
    a trailing newline, are ignored. Lines that cannot be decoded are logged
    and skipped without affecting their neighbours.
    """
    if not text:
        return []

    records: List[PullRequestRecord] = []
    skipped_rows = 0

    for row_number, line in enumerate(_LINE_BREAK_PATTERN.split(text)):
        if row_number == 0 or not line.strip():
            continue
        try:
            records.append(decode_row(split_line(line)))
        except DecodeError as exc:
            skipped_rows += 1
            logger.debug(
                "Skipping undecodable record row",
                extra={"row_number": row_number, "error": str(exc)},
            )

    if skipped_rows:
        logger.warning(
            "Skipped undecodable record rows",
            extra={"skipped_rows": skipped_rows, "records_decoded": len(records)},
        )

    return records
