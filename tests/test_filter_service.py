from __future__ import annotations

import unittest
from datetime import date

from pydantic import ValidationError

from app.domain.incident import Incident
from app.parsing.tabular_parser import parse_tabular
from app.schemas.filters import IncidentFilters
from app.services.dashboard_state import DashboardState
from app.services.filter_service import apply_filters, filter_options


def _incident(index: int, day: str, type_: str, location: str) -> Incident:
    return Incident(
        id=f"incident-{index}",
        date=day,
        type=type_,
        location=location,
        description=f"{type_} detected at {location}",
        row_index=index,
    )


class TestIncidentFilters(unittest.TestCase):
    def test_blank_values_disable_predicates(self) -> None:
        filters = IncidentFilters(site="  ", incident_type="", date_start="")

        self.assertIsNone(filters.site)
        self.assertIsNone(filters.incident_type)
        self.assertIsNone(filters.date_start)
        self.assertFalse(filters.is_active)

    def test_iso_dates_are_accepted(self) -> None:
        filters = IncidentFilters(date_start="2024-03-04")

        self.assertEqual(filters.date_start, date(2024, 3, 4))
        self.assertTrue(filters.is_active)

    def test_unknown_fields_are_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            IncidentFilters(camera="Cam 1")


class TestApplyFilters(unittest.TestCase):
    def setUp(self) -> None:
        self.incidents = [
            _incident(0, "2024-03-04", "PPE Violation", "Loading Dock"),
            _incident(1, "2024-03-05", "Person Near Hit", "Warehouse"),
            _incident(2, "2024-03-06", "PPE Violation", "Dock Yard"),
            _incident(3, "2024-03-07", "ppe violation", "Office"),
        ]

    def _ids(self, filters: IncidentFilters) -> list[str]:
        return [incident.id for incident in apply_filters(self.incidents, filters)]

    def test_no_filters_returns_everything(self) -> None:
        self.assertEqual(len(apply_filters(self.incidents, IncidentFilters())), 4)
        self.assertEqual(len(apply_filters(self.incidents, None)), 4)

    def test_site_is_case_insensitive_substring(self) -> None:
        self.assertEqual(self._ids(IncidentFilters(site="dock")), ["incident-0", "incident-2"])

    def test_type_is_exact(self) -> None:
        self.assertEqual(
            self._ids(IncidentFilters(incident_type="PPE Violation")),
            ["incident-0", "incident-2"],
        )

    def test_date_bounds_are_inclusive(self) -> None:
        filters = IncidentFilters(date_start=date(2024, 3, 5), date_end=date(2024, 3, 6))

        self.assertEqual(self._ids(filters), ["incident-1", "incident-2"])

    def test_open_ended_bounds(self) -> None:
        self.assertEqual(self._ids(IncidentFilters(date_start=date(2024, 3, 7))), ["incident-3"])
        self.assertEqual(self._ids(IncidentFilters(date_end=date(2024, 3, 4))), ["incident-0"])

    def test_predicates_combine(self) -> None:
        filters = IncidentFilters(site="DOCK", incident_type="PPE Violation", date_start=date(2024, 3, 5))

        self.assertEqual(self._ids(filters), ["incident-2"])

    def test_filtering_is_a_subset_in_order(self) -> None:
        visible = apply_filters(self.incidents, IncidentFilters(site="o"))

        positions = [self.incidents.index(incident) for incident in visible]
        self.assertEqual(positions, sorted(positions))

    def test_filter_options_first_seen(self) -> None:
        options = filter_options(self.incidents)

        self.assertEqual(options.sites[0], "Loading Dock")
        self.assertEqual(
            options.incident_types,
            ("PPE Violation", "Person Near Hit", "ppe violation"),
        )


class TestFiltersOnPaddedExport(unittest.TestCase):
    def setUp(self) -> None:
        data = (
            b"Timestamp, Area, Camera, Type\n"
            b"2024-03-05, Dock, Cam 1, Forklift\n"
            b"2024-03-06, Yard, Cam 2, PPE Violation\n"
        )
        self.state = DashboardState.from_rows(parse_tabular(data).rows)

    def test_options_are_trimmed(self) -> None:
        options = filter_options(self.state.incidents)

        self.assertEqual(options.incident_types, ("Forklift", "PPE Violation"))
        self.assertEqual(options.sites, ("Dock", "Yard"))

    def test_offered_type_matches_its_rows(self) -> None:
        chosen = filter_options(self.state.incidents).incident_types[0]

        visible = self.state.with_filters(IncidentFilters(incident_type=chosen)).visible_incidents()

        self.assertEqual([incident.type for incident in visible], ["Forklift"])
        self.assertEqual(visible[0].reported_by, "Cam 1")
        self.assertEqual(visible[0].description, "Forklift detected at Dock (Camera: Cam 1)")
