"""
app/parsing/tabular_parser.py

Delimited text parsing with delimiter fallback and best-effort type inference.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from app.config import get_parser_settings

logger = logging.getLogger(__name__)

EXTRA_FIELDS_KEY = "__parsed_extra"

NUMBER_REGEX = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_WHITESPACE_RUN = re.compile(r"\s+")
_TRUE_LITERALS = {"true", "TRUE"}
_FALSE_LITERALS = {"false", "FALSE"}


class TabularParseError(ValueError):
    """
    Raised when file contents cannot be decoded or tokenized.
    """


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of one parse: ordered rows plus the delimiter that produced them.
    """

    rows: tuple[dict[str, Any], ...]
    delimiter: str | None
    headers: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def clean_header(header: str) -> str:
    """
    Strip a leading byte-order mark, trim, and collapse inner whitespace runs.
    """

    return _WHITESPACE_RUN.sub(" ", header.lstrip("\ufeff").strip())


def infer_value(value: str) -> Any:
    """
    Best-effort scalar typing: booleans, numbers, empty -> None, else the raw string.
    """

    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    if NUMBER_REGEX.match(value):
        stripped = value.strip()
        if any(marker in stripped for marker in (".", "e", "E")):
            return float(stripped)
        return int(stripped)
    if value == "":
        return None
    return value


def parse_tabular(
    data: bytes | str,
    *,
    delimiters: Sequence[str] | None = None,
    encoding: str | None = None,
) -> ParseResult:
    """
    Parse delimited text with a header row, trying each delimiter in order.

    The first delimiter that yields at least one data row wins. When every
    attempt yields zero rows the last attempt is returned with ``is_empty``
    set; this is not an error.
    """

    settings = get_parser_settings()
    attempts = tuple(delimiters or settings.delimiters)
    text = _decode(data, encoding or settings.encoding)

    result = ParseResult(rows=(), delimiter=None)
    for position, delimiter in enumerate(attempts):
        result = _parse_with_delimiter(
            text,
            delimiter=delimiter,
            later_delimiters=attempts[position + 1:],
        )
        logger.debug("Delimiter %r produced %d rows", delimiter, len(result.rows))
        if result.rows:
            return result
    return result


def _decode(data: bytes | str, encoding: str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise TabularParseError(f"File could not be decoded as {encoding}: {exc}") from exc


def _is_blank_record(record: Sequence[str]) -> bool:
    return all(not value.strip() for value in record)


def _unique_headers(raw_headers: Sequence[str]) -> tuple[str, ...]:
    seen: dict[str, int] = {}
    headers: list[str] = []
    for raw in raw_headers:
        header = clean_header(raw)
        if header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        seen.setdefault(header, 0)
        headers.append(header)
    return tuple(headers)


def _parse_with_delimiter(
    text: str,
    *,
    delimiter: str,
    later_delimiters: Sequence[str],
) -> ParseResult:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    headers: tuple[str, ...] | None = None
    rows: list[dict[str, Any]] = []

    try:
        for record in reader:
            if _is_blank_record(record):
                continue

            if headers is None:
                # One column whose name still holds a later delimiter means the
                # file is not split by this delimiter at all.
                if len(record) == 1 and any(other in record[0] for other in later_delimiters):
                    return ParseResult(rows=(), delimiter=delimiter)
                headers = _unique_headers(record)
                continue

            row: dict[str, Any] = {}
            for header, value in zip(headers, record):
                row[header] = infer_value(value)
            if len(record) > len(headers):
                row[EXTRA_FIELDS_KEY] = [infer_value(value) for value in record[len(headers):]]
            rows.append(row)
    except csv.Error as exc:
        raise TabularParseError(f"Invalid delimited file format: {exc}") from exc

    return ParseResult(rows=tuple(rows), delimiter=delimiter, headers=headers or ())
