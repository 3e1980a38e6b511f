"""
app/services/dashboard_state.py

Explicit application state for one dashboard session.

The state holds the current raw rows, the canonical incidents derived from
them, the active filters and the selected incident ids. Every transition
returns a new ``DashboardState``; nothing is mutated in place. Loading a new
row set always starts from an empty state, so no filter or selection can
outlive the rows it referred to.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable, Sequence

from app.domain.incident import Incident, RawRow
from app.mappers.incident_mapper import build_incidents
from app.schemas.filters import IncidentFilters
from app.services.filter_service import apply_filters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardState:
    """
    Immutable snapshot of rows, filters and selection.
    """

    raw_rows: tuple[RawRow, ...] = ()
    incidents: tuple[Incident, ...] = ()
    filters: IncidentFilters = field(default_factory=IncidentFilters)
    selected_ids: frozenset[str] = frozenset()

    @classmethod
    def from_rows(cls, raw_rows: Sequence[RawRow]) -> "DashboardState":
        rows = tuple(raw_rows)
        return cls(raw_rows=rows, incidents=tuple(build_incidents(rows)))

    @property
    def has_data(self) -> bool:
        return bool(self.raw_rows)

    @property
    def skipped_rows(self) -> int:
        return len(self.raw_rows) - len(self.incidents)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def visible_incidents(self) -> list[Incident]:
        return apply_filters(self.incidents, self.filters)

    def selected_incidents(self) -> list[Incident]:
        return [incident for incident in self.incidents if incident.id in self.selected_ids]

    def is_selected(self, incident_id: str) -> bool:
        return incident_id in self.selected_ids

    def selected_raw_rows(self) -> list[RawRow]:
        return [self.raw_rows[incident.row_index] for incident in self.selected_incidents()]

    def report_rows(self) -> list[RawRow]:
        """
        Rows feeding the report: the selected rows, or every row when nothing is selected.
        """

        selected = self.selected_raw_rows()
        return selected if selected else list(self.raw_rows)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load_rows(self, raw_rows: Sequence[RawRow]) -> "DashboardState":
        """
        Replace the dataset; filters and selection are reset.
        """

        return DashboardState.from_rows(raw_rows)

    def with_filters(self, filters: IncidentFilters) -> "DashboardState":
        return replace(self, filters=filters)

    def clear_filters(self) -> "DashboardState":
        return replace(self, filters=IncidentFilters())

    def toggle_selection(self, incident_id: str) -> "DashboardState":
        """
        Select or deselect one incident; ids not in the current dataset are ignored.
        """

        if incident_id in self.selected_ids:
            return replace(self, selected_ids=self.selected_ids - {incident_id})
        if not any(incident.id == incident_id for incident in self.incidents):
            logger.debug("Ignoring selection of unknown incident id %r", incident_id)
            return self
        return replace(self, selected_ids=self.selected_ids | {incident_id})

    def select_all_visible(self) -> "DashboardState":
        return replace(
            self,
            selected_ids=frozenset(incident.id for incident in self.visible_incidents()),
        )

    def clear_selection(self) -> "DashboardState":
        return replace(self, selected_ids=frozenset())


class DashboardStore:
    """
    Single-writer holder for the current ``DashboardState``.

    Readers always see a complete snapshot; writers swap it wholesale.
    """

    def __init__(self, state: DashboardState | None = None) -> None:
        self._state = state or DashboardState()
        self._lock = threading.Lock()

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    def replace(self, state: DashboardState) -> DashboardState:
        with self._lock:
            self._state = state
            return state

    def update(self, transition: Callable[[DashboardState], DashboardState]) -> DashboardState:
        """
        Apply ``transition`` to the current snapshot and store the result atomically.
        """

        with self._lock:
            self._state = transition(self._state)
            return self._state
