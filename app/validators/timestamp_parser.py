"""
app/validators/timestamp_parser.py

Layered detection-timestamp parsing.

Attempts, in priority order:

1. Generic parsing: ISO-8601 (date, optional time, optional offset) or one
   of the natively recognised calendar formats in ``NATIVE_FORMATS``.
2. Anchored day-first ``D[/-.]M[/-.]Y[[ T]H:M[:S]]``; two-digit years map to
   ``2000 + YY`` and missing time parts default to zero.
3. Unanchored ``YYYY-MM-DD HH:MM:SS``, ``DD.MM.YYYY`` and ``MM/DD/YYYY``
   searches anywhere in the string.

A candidate is accepted only when it forms a valid calendar date/time;
out-of-range days or months never roll over.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

NATIVE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m-%d-%Y",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%b %d, %Y",
    "%b %d, %Y %H:%M",
    "%b %d, %Y %H:%M:%S",
    "%B %d, %Y",
    "%B %d, %Y %H:%M",
    "%B %d, %Y %H:%M:%S",
    "%d %b %Y",
    "%d %B %Y",
    "%a %b %d %Y",
    "%a %b %d %Y %H:%M:%S",
    "%a, %d %b %Y %H:%M:%S",
)

DAY_FIRST_REGEX = re.compile(
    r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})(?:[ T](\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)
ISO_SPACED_SEARCH = re.compile(r"(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2}):(\d{2})")
DOTTED_DAY_FIRST_SEARCH = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")
US_SLASHED_SEARCH = re.compile(r"(\d{2})/(\d{2})/(\d{4})")


def _build(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
) -> datetime | None:
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def parse_generic(text: str) -> datetime | None:
    """
    ISO-8601 first, then the fixed table of natively recognised formats.
    """

    iso_candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_candidate)
    except ValueError:
        pass

    for fmt in NATIVE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_day_first(text: str) -> datetime | None:
    """
    Anchored day-first pattern with optional time of day.
    """

    match = DAY_FIRST_REGEX.match(text)
    if match is None:
        return None

    day, month, raw_year = int(match.group(1)), int(match.group(2)), match.group(3)
    year = 2000 + int(raw_year) if len(raw_year) == 2 else int(raw_year)
    return _build(
        year,
        month,
        day,
        int(match.group(4) or 0),
        int(match.group(5) or 0),
        int(match.group(6) or 0),
    )


def parse_embedded(text: str) -> datetime | None:
    """
    Search for explicit date patterns anywhere in the string.
    """

    match = ISO_SPACED_SEARCH.search(text)
    if match:
        parsed = _build(*(int(part) for part in match.groups()))
        if parsed is not None:
            return parsed

    match = DOTTED_DAY_FIRST_SEARCH.search(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        parsed = _build(year, month, day)
        if parsed is not None:
            return parsed

    match = US_SLASHED_SEARCH.search(text)
    if match:
        month, day, year = (int(part) for part in match.groups())
        return _build(year, month, day)
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a raw cell into a datetime, or ``None`` when every attempt fails.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if not text:
        return None

    for attempt in (parse_generic, parse_day_first, parse_embedded):
        parsed = attempt(text)
        if parsed is not None:
            return parsed
    return None


def to_calendar_date(moment: datetime) -> date:
    """
    Calendar date of a parsed timestamp; aware values are taken in UTC.
    """

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()
