"""
app/services/filter_service.py

Filter engine producing the visible incident subset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.domain.incident import Incident
from app.schemas.filters import IncidentFilters


@dataclass(frozen=True)
class FilterOptions:
    """
    Selectable filter values derived from the loaded incidents.
    """

    sites: tuple[str, ...]
    incident_types: tuple[str, ...]


def matches_filters(incident: Incident, filters: IncidentFilters) -> bool:
    """
    Return True when the incident satisfies every active predicate.
    """

    if filters.site and filters.site.lower() not in incident.location.lower():
        return False
    if filters.incident_type and incident.type != filters.incident_type:
        return False
    if filters.date_start is not None or filters.date_end is not None:
        day = incident.calendar_date
        if filters.date_start is not None and day < filters.date_start:
            return False
        if filters.date_end is not None and day > filters.date_end:
            return False
    return True


def apply_filters(incidents: Sequence[Incident], filters: IncidentFilters | None) -> list[Incident]:
    """
    Visible incidents in input order.
    """

    if filters is None or not filters.is_active:
        return list(incidents)
    return [incident for incident in incidents if matches_filters(incident, filters)]


def filter_options(incidents: Sequence[Incident]) -> FilterOptions:
    """
    Distinct locations and types in first-seen order.
    """

    return FilterOptions(
        sites=tuple(dict.fromkeys(incident.location for incident in incidents)),
        incident_types=tuple(dict.fromkeys(incident.type for incident in incidents)),
    )
