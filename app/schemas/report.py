"""
app/schemas/report.py

Export contract for the safety report download.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Iterable

from pydantic import BaseModel, ConfigDict, Field

from app.domain.incident import DailyPoint, RankedEntry

if TYPE_CHECKING:
    from app.services.report_service import SafetyReport, ScenarioSection


_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    str_strip_whitespace=True,
)


class RankedEntryModel(BaseModel):
    model_config = _MODEL_CONFIG

    label: str
    count: int = Field(ge=0)


class DailyPointModel(BaseModel):
    model_config = _MODEL_CONFIG

    day: date
    label: str
    count: int = Field(ge=0)


class WeekOverWeekModel(BaseModel):
    model_config = _MODEL_CONFIG

    current_count: int = Field(ge=0)
    previous_count: int = Field(ge=0)
    percent_change: float


class ScenarioSectionModel(BaseModel):
    model_config = _MODEL_CONFIG

    scenario: str
    observations: int = Field(ge=0)
    average_per_day: float = Field(ge=0.0)
    top_camera: RankedEntryModel | None = None
    top_area: RankedEntryModel | None = None
    areas: list[RankedEntryModel] = Field(default_factory=list)
    camera_bars: list[RankedEntryModel] = Field(default_factory=list)
    daily: list[DailyPointModel] = Field(default_factory=list)
    week_over_week: WeekOverWeekModel | None = None


class ObstructionSectionModel(BaseModel):
    model_config = _MODEL_CONFIG

    observations: int = Field(ge=0)
    scenarios: list[RankedEntryModel] = Field(default_factory=list)
    top_areas: list[RankedEntryModel] = Field(default_factory=list)
    daily: list[DailyPointModel] = Field(default_factory=list)


class SafetyReportExport(BaseModel):
    """
    Serializable view of a ``SafetyReport``; the download is this model as JSON.
    """

    model_config = _MODEL_CONFIG

    title: str = Field(min_length=1)
    generated_on: date
    generated_label: str
    summary: str
    total_observations: int = Field(ge=0)
    total_days: int = Field(ge=0)
    sites: int = Field(ge=0)
    top_camera: RankedEntryModel | None = None
    top_scenario: RankedEntryModel | None = None
    top_area: RankedEntryModel | None = None
    top_areas: list[RankedEntryModel] = Field(default_factory=list)
    top_cameras: list[RankedEntryModel] = Field(default_factory=list)
    top_scenarios: list[RankedEntryModel] = Field(default_factory=list)
    sections: list[ScenarioSectionModel] = Field(default_factory=list)
    entries: list[DailyPointModel] = Field(default_factory=list)
    obstruction: ObstructionSectionModel

    @classmethod
    def from_report(cls, report: "SafetyReport") -> "SafetyReportExport":
        header = report.header
        return cls(
            title=header.document_title,
            generated_on=header.generated_on,
            generated_label=header.generated_label,
            summary=header.summary_text,
            total_observations=header.total_observations,
            total_days=header.total_days,
            sites=header.sites,
            top_camera=_entry(header.top_camera),
            top_scenario=_entry(header.top_scenario),
            top_area=_entry(header.top_area),
            top_areas=_entries(report.top_areas),
            top_cameras=_entries(report.top_cameras),
            top_scenarios=_entries(report.top_scenarios),
            sections=[_section(section) for section in report.sections],
            entries=_points(report.entries),
            obstruction=ObstructionSectionModel(
                observations=report.obstruction.observations,
                scenarios=_entries(report.obstruction.scenarios),
                top_areas=_entries(report.obstruction.top_areas),
                daily=_points(report.obstruction.daily),
            ),
        )


def _entry(entry: RankedEntry | None) -> RankedEntryModel | None:
    if entry is None:
        return None
    return RankedEntryModel(label=entry.label, count=entry.count)


def _entries(entries: Iterable[RankedEntry]) -> list[RankedEntryModel]:
    return [RankedEntryModel(label=entry.label, count=entry.count) for entry in entries]


def _points(points: Iterable[DailyPoint]) -> list[DailyPointModel]:
    return [DailyPointModel(day=point.key, label=point.label, count=point.count) for point in points]


def _section(section: "ScenarioSection") -> ScenarioSectionModel:
    comparison = section.week_over_week
    return ScenarioSectionModel(
        scenario=section.scenario,
        observations=section.observations,
        average_per_day=section.average_per_day,
        top_camera=_entry(section.top_camera),
        top_area=_entry(section.area_stats.top),
        areas=_entries(section.area_stats.ranking),
        camera_bars=_entries(section.camera_bars),
        daily=_points(section.daily),
        week_over_week=(
            None
            if comparison is None
            else WeekOverWeekModel(
                current_count=comparison.current_count,
                previous_count=comparison.previous_count,
                percent_change=comparison.percent_change,
            )
        ),
    )
