"""
app/schemas/filters.py

User-chosen incident filter predicates.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IncidentFilters(BaseModel):
    """
    Active dashboard filters. Every field is optional; ``None`` disables it.

    ``site`` is a case-insensitive substring match on the incident location,
    ``incident_type`` an exact match on the type, and the date bounds are
    inclusive.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    site: str | None = None
    incident_type: str | None = None
    date_start: date | None = Field(default=None)
    date_end: date | None = Field(default=None)

    @field_validator("site", "incident_type", "date_start", "date_end", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_active(self) -> bool:
        return any(
            value is not None
            for value in (self.site, self.incident_type, self.date_start, self.date_end)
        )
