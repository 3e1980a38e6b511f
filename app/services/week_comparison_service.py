"""
app/services/week_comparison_service.py

Week-over-week comparison for one scenario type.

Windows
-------
The "current" window is the last complete ISO week: the Monday-to-Sunday
week that starts seven days before the Monday of the week containing
``now``. The "previous" window is the ISO week before that. Both windows are
inclusive calendar-day ranges.

Percent change
--------------
``(current - previous) / previous * 100``; when ``previous`` is zero the
change is ``100`` if ``current`` is positive and ``0`` otherwise.

Display gate
------------
``should_show`` requires ``max(current, previous) >= min_count`` and
``|percent_change| >= min_percent_change`` (10 and 10 by default).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from app.config import WeekComparisonSettings, get_week_comparison_settings
from app.domain.incident import Incident, ReportRow, WeekComparisonResult
from app.validators.timestamp_parser import to_calendar_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekWindow:
    """
    Inclusive Monday-to-Sunday calendar window.
    """

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def start_of_iso_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def last_complete_week(now: datetime | date) -> WeekWindow:
    today = now.date() if isinstance(now, datetime) else now
    start = start_of_iso_week(today) - timedelta(days=7)
    return WeekWindow(start=start, end=start + timedelta(days=6))


def previous_week(now: datetime | date) -> WeekWindow:
    anchor = last_complete_week(now)
    start = anchor.start - timedelta(days=7)
    return WeekWindow(start=start, end=start + timedelta(days=6))


def percent_change(current: int, previous: int) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return 100.0
    return 0.0


class WeekComparisonService:
    """
    Pure comparator: the result depends only on the records, the type and ``now``.
    """

    def __init__(self, settings: WeekComparisonSettings | None = None) -> None:
        self._settings = settings or get_week_comparison_settings()

    def compare(
        self,
        dated_types: Iterable[tuple[str | None, date | None]],
        scenario_type: str,
        *,
        now: datetime | date | None = None,
    ) -> WeekComparisonResult:
        """
        Compare counts of ``scenario_type`` between the last two complete ISO weeks.

        ``dated_types`` yields ``(type, calendar_date)`` pairs; pairs with no
        date never count.
        """

        moment = now or datetime.now()
        current_window = last_complete_week(moment)
        previous_window = previous_week(moment)

        current_count = 0
        previous_count = 0
        for record_type, day in dated_types:
            if record_type != scenario_type or day is None:
                continue
            if current_window.contains(day):
                current_count += 1
            elif previous_window.contains(day):
                previous_count += 1

        change = percent_change(current_count, previous_count)
        should_show = (
            max(current_count, previous_count) >= self._settings.min_count
            and abs(change) >= self._settings.min_percent_change
        )
        logger.debug(
            "Week comparison type=%r current=%d previous=%d change=%.2f show=%s",
            scenario_type,
            current_count,
            previous_count,
            change,
            should_show,
        )
        return WeekComparisonResult(
            current_count=current_count,
            previous_count=previous_count,
            percent_change=change,
            should_show=should_show,
        )

    def compare_incidents(
        self,
        incidents: Iterable[Incident],
        scenario_type: str,
        *,
        now: datetime | date | None = None,
    ) -> WeekComparisonResult:
        return self.compare(
            ((incident.type, incident.calendar_date) for incident in incidents),
            scenario_type,
            now=now,
        )

    def compare_report_rows(
        self,
        rows: Iterable[ReportRow],
        scenario_type: str,
        *,
        now: datetime | date | None = None,
    ) -> WeekComparisonResult:
        return self.compare(
            (
                (row.scenario, to_calendar_date(row.detected_at) if row.detected_at else None)
                for row in rows
            ),
            scenario_type,
            now=now,
        )
