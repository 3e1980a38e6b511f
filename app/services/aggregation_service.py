"""
app/services/aggregation_service.py

Deterministic aggregation over incidents and report rows.

Every aggregate is rebuilt by a full scan of the collection it is given;
nothing is cached or updated in place, so identical inputs always produce
identical outputs.

Ordering rules
--------------
Histograms are plain dicts whose insertion order is the order in which each
key was first encountered. Rankings sort by count descending with a stable
sort, so ties keep that first-encountered order.

Camera grouping
---------------
Camera names are grouped on a trimmed, lowercased, whitespace-collapsed key
and displayed with the first spelling seen for that key. Areas and scenario
types are grouped verbatim.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping, Sequence

from app.config import AggregationSettings, get_aggregation_settings
from app.domain.incident import (
    NOT_AVAILABLE_LABEL,
    UNKNOWN_LABEL,
    DailyPoint,
    Incident,
    RankedEntry,
)
from app.validators.timestamp_parser import to_calendar_date

logger = logging.getLogger(__name__)

OBSTRUCTION_KEYWORDS: tuple[str, ...] = (
    "obstruction",
    "obstructed",
    "blocked",
    "blockage",
    "pathway",
    "walkway",
    "aisle",
)
ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def count_by(labels: Iterable[str | None]) -> dict[str, int]:
    """
    Count labels in first-encountered order; ``None`` labels are skipped.
    """

    counts: dict[str, int] = {}
    for label in labels:
        if label is None:
            continue
        counts[label] = counts.get(label, 0) + 1
    return counts


def rank(counts: Mapping[str, int], limit: int | None = None) -> list[RankedEntry]:
    """
    Sort histogram entries by count descending, keeping ties in insertion order.
    """

    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ordered = ordered[: max(0, limit)]
    return [RankedEntry(label=label, count=count) for label, count in ordered]


def camera_key(name: str) -> str:
    """
    Grouping key for camera names: trimmed, lowercased, inner whitespace collapsed.
    """

    return _WHITESPACE.sub(" ", name.strip().lower())


def camera_histogram(cameras: Iterable[str | None]) -> dict[str, int]:
    """
    Count camera names case/whitespace-insensitively under their first-seen spelling.
    """

    counts: dict[str, int] = {}
    display_names: dict[str, str] = {}
    for camera in cameras:
        if camera is None:
            continue
        display = camera.strip()
        if not display:
            continue
        key = camera_key(display)
        display_names.setdefault(key, display)
        counts[key] = counts.get(key, 0) + 1
    return {display_names[key]: count for key, count in counts.items()}


def short_day_label(day: date) -> str:
    """
    Short locale-style label such as ``"Mar 5"``.
    """

    return f"{day:%b} {day.day}"


def as_calendar_date(value: date | datetime | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_calendar_date(value)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def per_day_histogram(days: Iterable[date | datetime | str | None]) -> dict[str, int]:
    """
    Count records per ISO calendar day; undated records are left out.
    """

    keys = []
    for value in days:
        day = as_calendar_date(value)
        keys.append(day.isoformat() if day is not None else None)
    return count_by(keys)


def daily_series(days: Iterable[date | datetime | str | None]) -> list[DailyPoint]:
    """
    Per-day counts ordered ascending by ISO key, labelled ``"Mar 5"`` style.
    """

    histogram = per_day_histogram(days)
    return [
        DailyPoint(key=key, label=short_day_label(date.fromisoformat(key)), count=count)
        for key, count in sorted(histogram.items(), key=lambda item: item[0])
    ]


def average_per_day(
    total: int,
    distinct_days: int,
    default_day_count: int | None = None,
) -> float:
    """
    ``total`` divided by the number of dated days, never by zero.

    When no day carries a record, ``default_day_count`` is used instead; the
    divisor is always at least one.
    """

    divisor = distinct_days or default_day_count or 0
    return total / max(divisor, 1)


def is_obstruction_scenario(scenario: str | None) -> bool:
    """
    Broad keyword match for obstruction-style scenario labels.
    """

    if not scenario:
        return False
    lowered = scenario.lower()
    return any(keyword in lowered for keyword in OBSTRUCTION_KEYWORDS)


def truncate_label(label: str, width: int) -> str:
    return label[:width] + ELLIPSIS if len(label) > width else label


def camera_bars(
    cameras: Iterable[str | None],
    *,
    limit: int,
    label_width: int,
) -> list[RankedEntry]:
    """
    Top cameras for a bar chart, labels truncated to ``label_width`` characters.
    """

    return [
        RankedEntry(label=truncate_label(entry.label, label_width), count=entry.count)
        for entry in rank(camera_histogram(cameras), limit)
    ]


# ---------------------------------------------------------------------------
# Incident summaries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScenarioBreakdown:
    """
    Per-day and per-camera counts for one scenario family.
    """

    by_day: dict[str, int] = field(default_factory=dict)
    per_camera: dict[str, int] = field(default_factory=dict)
    total: int = 0


@dataclass(frozen=True)
class IncidentTotals:
    all_observations: int = 0
    total_days: int = 0
    top_camera: str = NOT_AVAILABLE_LABEL
    top_type: str = NOT_AVAILABLE_LABEL


@dataclass(frozen=True)
class ProcessedIncidents:
    """
    Dashboard aggregates for one incident collection.
    """

    per_day: dict[str, int] = field(default_factory=dict)
    per_camera: dict[str, int] = field(default_factory=dict)
    per_type: dict[str, int] = field(default_factory=dict)
    ppe_overall: ScenarioBreakdown = field(default_factory=ScenarioBreakdown)
    person_near_hit: ScenarioBreakdown = field(default_factory=ScenarioBreakdown)
    totals: IncidentTotals = field(default_factory=IncidentTotals)

    @property
    def top_camera_count(self) -> int:
        return self.per_camera.get(self.totals.top_camera, 0)

    @property
    def top_type_count(self) -> int:
        return self.per_type.get(self.totals.top_type, 0)


@dataclass(frozen=True)
class SummaryStats:
    """
    Header card figures plus the auto-generated summary sentence.
    """

    total: int
    sites: int
    cameras: int
    most_common_type: RankedEntry | None
    summary_text: str


def is_ppe_scenario(scenario: str) -> bool:
    lowered = scenario.lower()
    return "ppe" in lowered or "overall" in lowered


def is_person_near_hit_scenario(scenario: str) -> bool:
    lowered = scenario.lower()
    return "person" in lowered and "near" in lowered


def _display_camera(incident: Incident) -> str:
    return incident.reported_by or UNKNOWN_LABEL


def _scenario_breakdown(incidents: Sequence[Incident]) -> ScenarioBreakdown:
    by_day = per_day_histogram(incident.date for incident in incidents)
    return ScenarioBreakdown(
        by_day=by_day,
        per_camera=camera_histogram(_display_camera(incident) for incident in incidents),
        total=sum(by_day.values()),
    )


def _top_label(counts: Mapping[str, int]) -> str:
    ranked = rank(counts, 1)
    return ranked[0].label if ranked else NOT_AVAILABLE_LABEL


class AggregationService:
    """
    Stateless aggregation engine configured with ranking sizes and label widths.

    Usage::

        service = AggregationService()
        processed = service.summarize_incidents(incidents)
        print(processed.totals.top_camera)
    """

    def __init__(self, settings: AggregationSettings | None = None) -> None:
        self._settings = settings or get_aggregation_settings()

    @property
    def settings(self) -> AggregationSettings:
        return self._settings

    def summarize_incidents(self, incidents: Sequence[Incident]) -> ProcessedIncidents:
        """
        Build per-day, per-camera and per-type histograms plus scenario breakdowns.

        Camera-less incidents are counted under ``"Unknown"`` here; the label
        exists for display only.
        """

        if not incidents:
            return ProcessedIncidents()

        per_day = per_day_histogram(incident.date for incident in incidents)
        per_camera = camera_histogram(_display_camera(incident) for incident in incidents)
        per_type = count_by(incident.type or UNKNOWN_LABEL for incident in incidents)

        processed = ProcessedIncidents(
            per_day=per_day,
            per_camera=per_camera,
            per_type=per_type,
            ppe_overall=_scenario_breakdown([i for i in incidents if is_ppe_scenario(i.type)]),
            person_near_hit=_scenario_breakdown(
                [i for i in incidents if is_person_near_hit_scenario(i.type)]
            ),
            totals=IncidentTotals(
                all_observations=len(incidents),
                total_days=len(per_day),
                top_camera=_top_label(per_camera),
                top_type=_top_label(per_type),
            ),
        )
        logger.debug(
            "Summarized %d incidents across %d days",
            processed.totals.all_observations,
            processed.totals.total_days,
        )
        return processed

    def summary_stats(
        self,
        visible: Sequence[Incident],
        selected: Sequence[Incident],
    ) -> SummaryStats:
        """
        Header figures over the selected incidents, falling back to the visible ones.
        """

        basis = selected if selected else visible
        type_ranking = rank(count_by(incident.type for incident in basis), 1)
        cameras = camera_histogram(incident.reported_by for incident in basis)

        if selected:
            processed = self.summarize_incidents(selected)
            selected_sites = len({incident.location for incident in selected})
            summary_text = (
                f"{len(selected)} incidents across {selected_sites} sites. "
                f"Top camera: {processed.totals.top_camera}. "
                f"Top type: {processed.totals.top_type}."
            )
        elif visible:
            visible_sites = len({incident.location for incident in visible})
            summary_text = (
                f"{len(visible)} incidents visible across {visible_sites} sites. "
                "Use 'Select All Visible' to include them in the report."
            )
        else:
            summary_text = "No incidents selected."

        return SummaryStats(
            total=len(basis),
            sites=len({incident.location for incident in basis}),
            cameras=len(cameras),
            most_common_type=type_ranking[0] if type_ranking else None,
            summary_text=summary_text,
        )

    def incident_daily_series(self, incidents: Sequence[Incident]) -> list[DailyPoint]:
        return daily_series(incident.date for incident in incidents)

    def incident_camera_bars(self, incidents: Sequence[Incident]) -> list[RankedEntry]:
        """
        Dashboard camera chart; camera-less incidents are not charted.
        """

        return camera_bars(
            (incident.reported_by for incident in incidents),
            limit=self._settings.camera_chart_top_n,
            label_width=self._settings.dashboard_camera_label_width,
        )

    def type_distribution(self, incidents: Sequence[Incident]) -> list[RankedEntry]:
        return rank(count_by(incident.type for incident in incidents))
