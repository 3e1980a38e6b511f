"""
app/schemas package marker.
"""

from app.schemas.filters import IncidentFilters
from app.schemas.report import SafetyReportExport

__all__ = [
    "IncidentFilters",
    "SafetyReportExport",
]
