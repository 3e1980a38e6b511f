"""
app/mappers package marker.
"""

from app.mappers.header_aliases import ALIAS_TABLE, flexible_lookup, normalize_key
from app.mappers.incident_mapper import build_incidents, build_report_rows

__all__ = [
    "ALIAS_TABLE",
    "build_incidents",
    "build_report_rows",
    "flexible_lookup",
    "normalize_key",
]
