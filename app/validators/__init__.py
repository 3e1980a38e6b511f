"""
app/validators package marker.
"""

from app.validators.timestamp_parser import parse_timestamp, to_calendar_date

__all__ = [
    "parse_timestamp",
    "to_calendar_date",
]
