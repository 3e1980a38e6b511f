"""
tests/test_dashboard_state.py

Pytest unit tests for dashboard state transitions.
"""

from __future__ import annotations

import pytest

from app.parsing.tabular_parser import parse_tabular
from app.schemas.filters import IncidentFilters
from app.services.dashboard_state import DashboardState, DashboardStore


@pytest.fixture()
def state(sample_csv: str) -> DashboardState:
    return DashboardState.from_rows(parse_tabular(sample_csv).rows)


class TestLoading:
    def test_empty_state(self) -> None:
        empty = DashboardState()

        assert not empty.has_data
        assert empty.visible_incidents() == []
        assert empty.report_rows() == []

    def test_from_rows(self, state: DashboardState) -> None:
        assert state.has_data
        assert len(state.raw_rows) == 5
        assert len(state.incidents) == 4
        assert state.skipped_rows == 1

    def test_reload_resets_filters_and_selection(self, state: DashboardState) -> None:
        busy = state.with_filters(IncidentFilters(site="Dock")).toggle_selection("a1")

        reloaded = busy.load_rows([{"ID": "z1", "Date": "2024-04-01"}])

        assert reloaded.filters == IncidentFilters()
        assert reloaded.selected_ids == frozenset()
        assert [incident.id for incident in reloaded.incidents] == ["z1"]

    def test_reload_with_same_ids_still_clears_selection(self, state: DashboardState) -> None:
        selected = state.toggle_selection("a1")

        assert selected.load_rows(selected.raw_rows).selected_ids == frozenset()


class TestSelection:
    def test_toggle_twice_restores(self, state: DashboardState) -> None:
        once = state.toggle_selection("a3")

        assert once.is_selected("a3")
        assert once.toggle_selection("a3").selected_ids == state.selected_ids

    def test_unknown_id_is_ignored(self, state: DashboardState) -> None:
        assert state.toggle_selection("nope") is state

    def test_select_all_visible_is_idempotent(self, state: DashboardState) -> None:
        filtered = state.with_filters(IncidentFilters(site="warehouse"))

        once = filtered.select_all_visible()

        assert once.selected_ids == frozenset({"a3"})
        assert once.select_all_visible() == once

    def test_clear_selection(self, state: DashboardState) -> None:
        assert state.select_all_visible().clear_selection().selected_ids == frozenset()

    def test_selection_survives_filter_changes(self, state: DashboardState) -> None:
        selected = state.toggle_selection("a1").with_filters(IncidentFilters(site="Yard"))

        assert selected.is_selected("a1")
        assert [incident.id for incident in selected.visible_incidents()] == ["a5"]
        assert [incident.id for incident in selected.clear_filters().visible_incidents()] == [
            "a1",
            "a2",
            "a3",
            "a5",
        ]


class TestReportRows:
    def test_all_rows_when_nothing_selected(self, state: DashboardState) -> None:
        assert len(state.report_rows()) == 5

    def test_selected_rows_only(self, state: DashboardState) -> None:
        rows = state.toggle_selection("a3").toggle_selection("a5").report_rows()

        assert [row["ID"] for row in rows] == ["a3", "a5"]


class TestStore:
    def test_update_and_replace(self, state: DashboardState) -> None:
        store = DashboardStore()
        assert not store.state.has_data

        store.replace(state)
        updated = store.update(lambda current: current.toggle_selection("a1"))

        assert store.state is updated
        assert updated.is_selected("a1")
