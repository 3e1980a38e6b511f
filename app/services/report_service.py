"""
app/services/report_service.py

Printable safety report assembled from raw rows on the lenient report path.

Report rows never require a parseable timestamp: undated rows still count in
the area, camera and scenario rankings and only drop out of the per-day
series. Rows without a camera are reported as ``"Unknown"`` and left out of
camera rankings.

Layout
------
header         totals plus the top camera, scenario and area
insights       top-N areas, cameras and scenarios over all rows
sections       one section per leading scenario (three by default)
entries        per-day series over all dated rows
obstruction    rows whose scenario matches the obstruction keywords
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Sequence

from app.config import AggregationSettings, get_aggregation_settings
from app.domain.incident import (
    UNKNOWN_LABEL,
    DailyPoint,
    RankedEntry,
    RawRow,
    ReportRow,
    WeekComparisonResult,
)
from app.mappers.incident_mapper import build_report_rows
from app.services.aggregation_service import (
    average_per_day,
    camera_bars,
    camera_histogram,
    count_by,
    daily_series,
    is_obstruction_scenario,
    rank,
)
from app.services.week_comparison_service import WeekComparisonService

logger = logging.getLogger(__name__)


class EmptyReportError(ValueError):
    """
    Raised when a report is requested for an empty row set.
    """


# ---------------------------------------------------------------------------
# Report structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AreaStats:
    names: tuple[str, ...] = ()
    ranking: tuple[RankedEntry, ...] = ()

    @property
    def top(self) -> RankedEntry | None:
        return self.ranking[0] if self.ranking else None

    def count_for(self, name: str) -> int:
        for entry in self.ranking:
            if entry.label == name:
                return entry.count
        return 0


@dataclass(frozen=True)
class ScenarioSection:
    scenario: str
    observations: int
    daily: tuple[DailyPoint, ...]
    area_stats: AreaStats
    camera_bars: tuple[RankedEntry, ...]
    top_camera: RankedEntry | None
    average_per_day: float
    week_over_week: WeekComparisonResult | None = None


@dataclass(frozen=True)
class ObstructionSection:
    observations: int = 0
    scenarios: tuple[RankedEntry, ...] = ()
    daily: tuple[DailyPoint, ...] = ()
    top_areas: tuple[RankedEntry, ...] = ()


@dataclass(frozen=True)
class ReportHeader:
    total_observations: int
    total_days: int
    sites: int
    generated_on: date
    top_camera: RankedEntry | None = None
    top_scenario: RankedEntry | None = None
    top_area: RankedEntry | None = None

    @property
    def generated_label(self) -> str:
        return f"{self.generated_on:%b} {self.generated_on.day}, {self.generated_on.year}"

    @property
    def document_title(self) -> str:
        return f"Safety-Weekly-Report-{self.generated_on.isoformat()}"

    @property
    def summary_text(self) -> str:
        parts = [f"{self.total_observations} total observations across {self.total_days} days."]
        if self.top_camera:
            parts.append(f"Top camera: {self.top_camera.label} ({self.top_camera.count}).")
        if self.top_scenario:
            parts.append(f"Most common: {self.top_scenario.label} ({self.top_scenario.count}).")
        if self.top_area:
            parts.append(f"Top area: {self.top_area.label} ({self.top_area.count}).")
        return " ".join(parts)


@dataclass(frozen=True)
class SafetyReport:
    header: ReportHeader
    top_areas: tuple[RankedEntry, ...] = ()
    top_cameras: tuple[RankedEntry, ...] = ()
    top_scenarios: tuple[RankedEntry, ...] = ()
    sections: tuple[ScenarioSection, ...] = ()
    entries: tuple[DailyPoint, ...] = ()
    obstruction: ObstructionSection = field(default_factory=ObstructionSection)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def area_stats(rows: Sequence[ReportRow]) -> AreaStats:
    counts = count_by(row.area for row in rows)
    return AreaStats(names=tuple(counts), ranking=tuple(rank(counts)))


def camera_ranking(rows: Sequence[ReportRow]) -> list[RankedEntry]:
    return rank(camera_histogram(row.camera for row in rows if row.has_camera))


def scenario_ranking(rows: Sequence[ReportRow]) -> list[RankedEntry]:
    return rank(count_by(row.scenario for row in rows if row.scenario != UNKNOWN_LABEL))


def _detected_days(rows: Sequence[ReportRow]) -> list[datetime | None]:
    return [row.detected_at for row in rows]


class ReportService:
    """
    Builds ``SafetyReport`` objects; holds configuration only.
    """

    def __init__(
        self,
        *,
        settings: AggregationSettings | None = None,
        week_comparison: WeekComparisonService | None = None,
    ) -> None:
        self._settings = settings or get_aggregation_settings()
        self._week_comparison = week_comparison or WeekComparisonService()

    def build_report(
        self,
        raw_rows: Sequence[RawRow],
        *,
        now: datetime | None = None,
    ) -> SafetyReport:
        """
        Assemble the report for ``raw_rows``.

        Raises:
            EmptyReportError: when ``raw_rows`` is empty.
        """

        if not raw_rows:
            raise EmptyReportError("Please select at least one incident to generate a report.")

        moment = now or datetime.now()
        rows = build_report_rows(raw_rows)
        return self.build_from_report_rows(rows, now=moment)

    def build_from_report_rows(
        self,
        rows: Sequence[ReportRow],
        *,
        now: datetime,
    ) -> SafetyReport:
        top_n = self._settings.insights_top_n
        entries = daily_series(_detected_days(rows))
        areas = area_stats(rows)
        cameras = camera_ranking(rows)
        scenarios = scenario_ranking(rows)
        sites = {row.site for row in rows if row.site}

        header = ReportHeader(
            total_observations=len(rows),
            total_days=len(entries),
            sites=len(sites),
            generated_on=now.date(),
            top_camera=cameras[0] if cameras else None,
            top_scenario=scenarios[0] if scenarios else None,
            top_area=areas.top,
        )

        sections = tuple(
            self._scenario_section(rows, entry.label, total_days=header.total_days, now=now)
            for entry in scenarios[: self._settings.report_scenario_sections]
        )

        report = SafetyReport(
            header=header,
            top_areas=areas.ranking[:top_n],
            top_cameras=tuple(cameras[:top_n]),
            top_scenarios=tuple(scenarios[:top_n]),
            sections=sections,
            entries=tuple(entries),
            obstruction=self._obstruction_section(rows),
        )
        logger.info(
            "Built report: %d observations, %d days, %d sections",
            header.total_observations,
            header.total_days,
            len(sections),
        )
        return report

    def _scenario_section(
        self,
        rows: Sequence[ReportRow],
        scenario: str,
        *,
        total_days: int,
        now: datetime,
    ) -> ScenarioSection:
        scenario_rows = [row for row in rows if row.scenario == scenario]
        daily = daily_series(_detected_days(scenario_rows))
        cameras = camera_ranking(scenario_rows)
        comparison = self._week_comparison.compare_report_rows(rows, scenario, now=now)

        return ScenarioSection(
            scenario=scenario,
            observations=len(scenario_rows),
            daily=tuple(daily),
            area_stats=area_stats(scenario_rows),
            camera_bars=tuple(
                camera_bars(
                    (row.camera for row in scenario_rows if row.has_camera),
                    limit=self._settings.camera_chart_top_n,
                    label_width=self._settings.camera_label_width,
                )
            ),
            top_camera=cameras[0] if cameras else None,
            average_per_day=average_per_day(len(scenario_rows), len(daily), total_days),
            week_over_week=comparison if comparison.should_show else None,
        )

    def _obstruction_section(self, rows: Sequence[ReportRow]) -> ObstructionSection:
        matching = [row for row in rows if is_obstruction_scenario(row.scenario)]
        if not matching:
            return ObstructionSection()
        return ObstructionSection(
            observations=len(matching),
            scenarios=tuple(rank(count_by(row.scenario for row in matching))),
            daily=tuple(daily_series(_detected_days(matching))),
            top_areas=area_stats(matching).ranking[: self._settings.insights_top_n],
        )
