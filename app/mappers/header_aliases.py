"""
app/mappers/header_aliases.py

Alias table and the two header normalization strategies built on it.

Flexible lookup
---------------
Tolerant lookup over raw headers, used by report aggregation. Candidates are
tried in preference order; each one matches a column by exact name first and
then by a case- and whitespace-insensitive comparison.

Canonical key normalization
---------------------------
Stricter rewrite used when building incidents. Every header is lowercased,
trimmed and has whitespace/hyphen runs replaced with ``_``; a semantic field
is then located by the first key (in column order) that equals or contains
one of the field's alias keys.

Both strategies read from the same ``ALIAS_TABLE``; the strict alias keys are
derived from the display-form candidates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from app.domain.incident import CanonicalField

_KEY_SEPARATOR_RUN = re.compile(r"[\s-]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_key(header: str) -> str:
    """
    Lowercase, trim, and replace whitespace/hyphen runs with one underscore.
    """

    return _KEY_SEPARATOR_RUN.sub("_", header.strip().lower())


def _loose_key(header: str) -> str:
    return _WHITESPACE.sub("", header.lower())


@dataclass(frozen=True)
class AliasSpec:
    """
    Ordered header candidates for one canonical field.

    ``exact_only`` disables substring matching on the strict path.
    """

    candidates: tuple[str, ...]
    exact_only: bool = False

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(normalize_key(candidate) for candidate in self.candidates))


ALIAS_TABLE: dict[CanonicalField, AliasSpec] = {
    CanonicalField.ID: AliasSpec(candidates=("id", "ID", "Id"), exact_only=True),
    CanonicalField.TIMESTAMP: AliasSpec(
        candidates=(
            "First Detection",
            "Created At",
            "Timestamp",
            "Detected At",
            "Time",
            "Datetime",
            "Date",
        )
    ),
    CanonicalField.AREA: AliasSpec(
        candidates=(
            "Area",
            "Area Name",
            "AreaName",
            "Site/Location",
            "Location",
            "Site",
            "Zone",
            "Subarea",
            "Section",
        )
    ),
    CanonicalField.SITE: AliasSpec(
        candidates=("Site", "Project", "Project Name", "Site Name", "Location"),
    ),
    CanonicalField.CAMERA: AliasSpec(
        candidates=(
            "Camera Name",
            "Camera",
            "cameraName",
            "Cam",
            "Device",
            "Device Name",
        )
    ),
    CanonicalField.SCENARIO: AliasSpec(
        candidates=(
            "Scenario",
            "Type",
            "Category",
            "Incident Type",
            "Event Type",
            "Hazard",
            "Violation Type",
            "Event",
        )
    ),
    CanonicalField.SEVERITY: AliasSpec(candidates=("Severity", "Level")),
}

# Fields resolved on the strict path when building incidents.
INCIDENT_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.ID,
    CanonicalField.TIMESTAMP,
    CanonicalField.AREA,
    CanonicalField.CAMERA,
    CanonicalField.SCENARIO,
    CanonicalField.SEVERITY,
)


def candidates_for(canonical_field: CanonicalField) -> tuple[str, ...]:
    return ALIAS_TABLE[canonical_field].candidates


# ---------------------------------------------------------------------------
# Flexible lookup
# ---------------------------------------------------------------------------


def clean_text(value: Any) -> str | None:
    """
    Stringify a cell and trim it; blank and missing values become ``None``.
    """

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def flexible_lookup(row: Mapping[str, Any], candidates: Sequence[str]) -> str | None:
    """
    Return the first non-empty value among ``candidates`` (most preferred first).

    Each candidate is tried as an exact key, then against every column name
    with case and whitespace ignored.
    """

    for candidate in candidates:
        if candidate in row:
            value = clean_text(row[candidate])
            if value:
                return value
        target = _loose_key(candidate)
        for column, raw_value in row.items():
            if _loose_key(column) == target:
                value = clean_text(raw_value)
                if value:
                    return value
    return None


def lookup_field(row: Mapping[str, Any], canonical_field: CanonicalField) -> str | None:
    """
    Flexible lookup driven by the alias table.
    """

    return flexible_lookup(row, candidates_for(canonical_field))


# ---------------------------------------------------------------------------
# Canonical key normalization
# ---------------------------------------------------------------------------


def normalize_row_keys(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rewrite every header with ``normalize_key``; later duplicates overwrite earlier ones.
    """

    return {normalize_key(key): value for key, value in row.items()}


def find_alias_key(keys: Iterable[str], aliases: Sequence[str], *, exact_only: bool = False) -> str | None:
    """
    Return the first key (in the given order) equal to, or containing, any alias.
    """

    for key in keys:
        for alias in aliases:
            if key == alias or (not exact_only and alias in key):
                return key
    return None


def resolve_field_key(keys: Sequence[str], canonical_field: CanonicalField) -> str | None:
    """
    Locate the normalized column holding ``canonical_field``.
    """

    aliases = ALIAS_TABLE[canonical_field]
    return find_alias_key(keys, aliases.keys, exact_only=aliases.exact_only)
