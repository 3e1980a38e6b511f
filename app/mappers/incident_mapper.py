"""
app/mappers/incident_mapper.py

Row-to-incident and row-to-report-row mapping.

Incidents are built on the strict path (canonical keys + alias matching) and
only for rows whose detection timestamp parses. Report rows are built on the
flexible path and never dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from app.domain.incident import (
    UNKNOWN_LABEL,
    CanonicalField,
    Incident,
    RawRow,
    ReportRow,
    SemanticRow,
)
from app.mappers.header_aliases import (
    INCIDENT_FIELDS,
    clean_text,
    lookup_field,
    normalize_row_keys,
    resolve_field_key,
)
from app.validators.timestamp_parser import parse_timestamp, to_calendar_date

logger = logging.getLogger(__name__)


def synthetic_incident_id(row_index: int) -> str:
    return f"incident-{row_index}"


def resolve_semantic_row(raw_row: RawRow, row_index: int) -> SemanticRow:
    """
    Normalize headers and resolve every incident field through the alias table.
    """

    normalized = normalize_row_keys(raw_row)
    keys = list(normalized)
    fields: dict[CanonicalField, Any] = {}
    for canonical_field in INCIDENT_FIELDS:
        key = resolve_field_key(keys, canonical_field)
        if key is not None:
            fields[canonical_field] = normalized[key]
    return SemanticRow(row_index=row_index, fields=fields, extra=normalized)


def describe_incident(hazard: str, area: str, camera: str | None) -> str:
    description = f"{hazard} detected at {area}"
    if camera:
        description += f" (Camera: {camera})"
    return description


def build_incident(
    semantic_row: SemanticRow,
    *,
    incident_id: str | None = None,
) -> Incident | None:
    """
    Map one resolved row to an Incident, or ``None`` when its timestamp does not parse.
    """

    detected_at = parse_timestamp(semantic_row.get(CanonicalField.TIMESTAMP))
    if detected_at is None:
        return None

    hazard = clean_text(semantic_row.get(CanonicalField.SCENARIO)) or UNKNOWN_LABEL
    area = clean_text(semantic_row.get(CanonicalField.AREA)) or UNKNOWN_LABEL
    camera = clean_text(semantic_row.get(CanonicalField.CAMERA))

    return Incident(
        id=incident_id or synthetic_incident_id(semantic_row.row_index),
        date=to_calendar_date(detected_at).isoformat(),
        type=hazard,
        location=area,
        description=describe_incident(hazard, area, camera),
        row_index=semantic_row.row_index,
        reported_by=camera,
        severity=clean_text(semantic_row.get(CanonicalField.SEVERITY)),
    )


def build_incidents(raw_rows: Sequence[RawRow]) -> list[Incident]:
    """
    Build the canonical incident set, preserving row order.

    Rows with an unparseable or missing timestamp are skipped. A raw id that
    was already used falls back to the synthetic ``incident-<rowIndex>`` id.
    """

    incidents: list[Incident] = []
    used_ids: set[str] = set()
    skipped = 0

    for row_index, raw_row in enumerate(raw_rows):
        semantic_row = resolve_semantic_row(raw_row, row_index)
        raw_id = clean_text(semantic_row.get(CanonicalField.ID))
        incident_id = raw_id if raw_id and raw_id not in used_ids else None

        incident = build_incident(semantic_row, incident_id=incident_id)
        if incident is None:
            skipped += 1
            logger.debug("Row %d skipped: detection timestamp did not parse", row_index)
            continue

        used_ids.add(incident.id)
        incidents.append(incident)

    if skipped:
        logger.info("Built %d incidents; skipped %d rows without a usable timestamp", len(incidents), skipped)
    return incidents


def build_report_row(raw_row: RawRow, row_index: int) -> ReportRow:
    """
    Lenient report view: missing camera and scenario become ``"Unknown"``.
    """

    return ReportRow(
        row_index=row_index,
        scenario=lookup_field(raw_row, CanonicalField.SCENARIO) or UNKNOWN_LABEL,
        camera=lookup_field(raw_row, CanonicalField.CAMERA) or UNKNOWN_LABEL,
        area=lookup_field(raw_row, CanonicalField.AREA),
        site=lookup_field(raw_row, CanonicalField.SITE) or lookup_field(raw_row, CanonicalField.AREA),
        detected_at=parse_timestamp(lookup_field(raw_row, CanonicalField.TIMESTAMP)),
        severity=lookup_field(raw_row, CanonicalField.SEVERITY),
    )


def build_report_rows(raw_rows: Iterable[RawRow]) -> list[ReportRow]:
    return [build_report_row(raw_row, row_index) for row_index, raw_row in enumerate(raw_rows)]
