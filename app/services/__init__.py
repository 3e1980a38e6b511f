"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    CSVParseError,
    UploadOutcome,
    get_csv_ingestion_service,
)
from app.services.dashboard_state import DashboardState, DashboardStore
from app.services.filter_service import apply_filters, filter_options
from app.services.hazard_palette import hazard_color
from app.services.report_service import EmptyReportError, ReportService, SafetyReport
from app.services.week_comparison_service import WeekComparisonService

__all__ = [
    "AggregationService",
    "CSVIngestionService",
    "CSVParseError",
    "DashboardState",
    "DashboardStore",
    "EmptyReportError",
    "ReportService",
    "SafetyReport",
    "UploadOutcome",
    "WeekComparisonService",
    "apply_filters",
    "filter_options",
    "get_csv_ingestion_service",
    "hazard_color",
]
