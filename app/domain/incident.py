"""
app/domain/incident.py

Domain models shared by the normalization and aggregation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

RawRow = Mapping[str, Any]
"""One parsed CSV row: header exactly as read -> scalar value (str, number, bool or None)."""

UNKNOWN_LABEL = "Unknown"
NOT_AVAILABLE_LABEL = "N/A"


class CanonicalField(str, Enum):
    """
    Semantic fields recognised across arbitrary CSV headers.
    """

    ID = "id"
    TIMESTAMP = "timestamp"
    AREA = "area"
    SITE = "site"
    CAMERA = "camera"
    SCENARIO = "scenario"
    SEVERITY = "severity"


@dataclass(frozen=True)
class SemanticRow:
    """
    Alias-resolved view of one raw row.

    ``fields`` only holds canonical fields that resolved to a column.
    ``extra`` keeps every normalized key with its untouched value.
    """

    row_index: int
    fields: dict[CanonicalField, Any]
    extra: dict[str, Any] = field(default_factory=dict)

    def get(self, canonical_field: CanonicalField) -> Any:
        return self.fields.get(canonical_field)


@dataclass(frozen=True)
class Incident:
    """
    Canonical incident consumed by the dashboard, filters and aggregates.

    ``reported_by`` carries the camera name and stays ``None`` when the row
    had no camera; the ``"Unknown"`` label is only used at display time.
    """

    id: str
    date: str
    type: str
    location: str
    description: str
    row_index: int
    reported_by: str | None = None
    severity: str | None = None
    assigned_to: str | None = None
    corrective_action: str | None = None

    @property
    def calendar_date(self) -> date:
        return date.fromisoformat(self.date)


@dataclass(frozen=True)
class ReportRow:
    """
    Lenient report-path view of a raw row. Never dropped for a bad timestamp.
    """

    row_index: int
    scenario: str
    camera: str
    area: str | None = None
    site: str | None = None
    detected_at: datetime | None = None
    severity: str | None = None

    @property
    def has_camera(self) -> bool:
        return self.camera.strip().lower() != UNKNOWN_LABEL.lower()


@dataclass(frozen=True)
class RankedEntry:
    """
    One label/count pair of a ranked histogram.
    """

    label: str
    count: int


@dataclass(frozen=True)
class DailyPoint:
    """
    One point of a per-day series; ``key`` is ISO ``YYYY-MM-DD``.
    """

    key: str
    label: str
    count: int


@dataclass(frozen=True)
class WeekComparisonResult:
    """
    Week-over-week delta for one scenario type.
    """

    current_count: int
    previous_count: int
    percent_change: float
    should_show: bool
