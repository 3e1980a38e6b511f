"""
tests/test_week_comparison_service.py

Pytest unit tests for week-over-week comparison.

``now`` is fixed to Wednesday 2024-03-13, so the last complete ISO week is
2024-03-04..2024-03-10 and the week before it is 2024-02-26..2024-03-03.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from app.config import WeekComparisonSettings
from app.domain.incident import ReportRow
from app.services.week_comparison_service import (
    WeekComparisonService,
    last_complete_week,
    percent_change,
    previous_week,
)

NOW = datetime(2024, 3, 13, 12, 0)
CURRENT_MONDAY = date(2024, 3, 4)
PREVIOUS_MONDAY = date(2024, 2, 26)


@pytest.fixture()
def svc() -> WeekComparisonService:
    return WeekComparisonService(WeekComparisonSettings(min_count=10, min_percent_change=10.0))


def _records(type_: str, start: date, count: int) -> list[tuple[str, date]]:
    return [(type_, start + timedelta(days=index % 7)) for index in range(count)]


class TestWindows:
    def test_last_complete_week(self) -> None:
        window = last_complete_week(NOW)

        assert window.start == CURRENT_MONDAY
        assert window.end == date(2024, 3, 10)

    def test_previous_week(self) -> None:
        window = previous_week(NOW)

        assert window.start == PREVIOUS_MONDAY
        assert window.end == date(2024, 3, 3)

    def test_on_a_monday(self) -> None:
        assert last_complete_week(date(2024, 3, 11)).start == CURRENT_MONDAY

    def test_on_a_sunday(self) -> None:
        assert last_complete_week(date(2024, 3, 10)).start == PREVIOUS_MONDAY


class TestPercentChange:
    @pytest.mark.parametrize(
        ("current", "previous", "expected"),
        [
            (12, 10, 20.0),
            (5, 10, -50.0),
            (3, 0, 100.0),
            (0, 0, 0.0),
        ],
    )
    def test_values(self, current: int, previous: int, expected: float) -> None:
        assert percent_change(current, previous) == pytest.approx(expected)


class TestCompare:
    def test_counts_and_gate(self, svc: WeekComparisonService) -> None:
        records = _records("PPE", CURRENT_MONDAY, 12) + _records("PPE", PREVIOUS_MONDAY, 10)

        result = svc.compare(records, "PPE", now=NOW)

        assert result.current_count == 12
        assert result.previous_count == 10
        assert result.percent_change == pytest.approx(20.0)
        assert result.should_show

    def test_small_counts_are_hidden(self, svc: WeekComparisonService) -> None:
        records = _records("PPE", CURRENT_MONDAY, 6) + _records("PPE", PREVIOUS_MONDAY, 3)

        result = svc.compare(records, "PPE", now=NOW)

        assert result.percent_change == pytest.approx(100.0)
        assert not result.should_show

    def test_small_change_is_hidden(self, svc: WeekComparisonService) -> None:
        records = _records("PPE", CURRENT_MONDAY, 21) + _records("PPE", PREVIOUS_MONDAY, 20)

        assert not svc.compare(records, "PPE", now=NOW).should_show

    def test_other_types_and_dates_are_ignored(self, svc: WeekComparisonService) -> None:
        records = [
            ("Near Hit", CURRENT_MONDAY),
            ("PPE", date(2024, 3, 11)),
            ("PPE", date(2024, 2, 25)),
            ("PPE", None),
            ("PPE", date(2024, 3, 10)),
        ]

        result = svc.compare(records, "PPE", now=NOW)

        assert (result.current_count, result.previous_count) == (1, 0)

    def test_empty_records(self, svc: WeekComparisonService) -> None:
        result = svc.compare([], "PPE", now=NOW)

        assert result.percent_change == 0.0
        assert not result.should_show

    def test_report_rows(self, svc: WeekComparisonService) -> None:
        rows = [
            ReportRow(row_index=0, scenario="PPE", camera="Cam 1", detected_at=datetime(2024, 3, 5, 8)),
            ReportRow(row_index=1, scenario="PPE", camera="Cam 1", detected_at=datetime(2024, 2, 27, 8)),
            ReportRow(row_index=2, scenario="PPE", camera="Cam 1", detected_at=None),
        ]

        result = svc.compare_report_rows(rows, "PPE", now=NOW)

        assert (result.current_count, result.previous_count) == (1, 1)
