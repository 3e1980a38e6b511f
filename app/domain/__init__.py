"""
app/domain package marker.
"""

from app.domain.incident import (
    CanonicalField,
    DailyPoint,
    Incident,
    RankedEntry,
    ReportRow,
    WeekComparisonResult,
)

__all__ = [
    "CanonicalField",
    "DailyPoint",
    "Incident",
    "RankedEntry",
    "ReportRow",
    "WeekComparisonResult",
]
