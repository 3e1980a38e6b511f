"""Streamlit dashboard for safety-camera incident exports."""

from __future__ import annotations

import hashlib
from datetime import date
from typing import Any, Sequence

import pandas as pd
import streamlit as st

from app.domain.incident import DailyPoint, Incident, RankedEntry
from app.logging_utils import configure_logging
from app.schemas.filters import IncidentFilters
from app.schemas.report import SafetyReportExport
from app.services.aggregation_service import AggregationService
from app.services.csv_ingestion_service import CSVParseError, get_csv_ingestion_service
from app.services.dashboard_state import DashboardState, DashboardStore
from app.services.filter_service import filter_options
from app.services.hazard_palette import CHART_COLORS, hazard_colors, hsl_to_hex
from app.services.report_service import EmptyReportError, ReportService, SafetyReport
from app.services.week_comparison_service import WeekComparisonService

ALL_OPTION = "All"
INCIDENT_LIST_LIMIT = 200
LINE_COLOR = hsl_to_hex(CHART_COLORS["primary"])
BAR_COLOR = hsl_to_hex(CHART_COLORS["secondary"])
OBSTRUCTION_COLOR = hsl_to_hex(CHART_COLORS["quaternary"])

st.set_page_config(page_title="Safety Insights", page_icon="SI", layout="wide")


@st.cache_resource(show_spinner=False)
def _load_backend_handles() -> dict[str, Any]:
    """Build services once per process."""
    configure_logging()
    return {
        "csv_service": get_csv_ingestion_service(),
        "aggregation": AggregationService(),
        "week_comparison": WeekComparisonService(),
        "report": ReportService(),
    }


def _store() -> DashboardStore:
    return st.session_state.store


def _daily_frame(points: Sequence[DailyPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        {"Day": [point.label for point in points], "Incidents": [point.count for point in points]}
    ).set_index("Day")


def _ranking_frame(entries: Sequence[RankedEntry], label: str) -> pd.DataFrame:
    return pd.DataFrame(
        {label: [entry.label for entry in entries], "Incidents": [entry.count for entry in entries]}
    )


def _type_frame(entries: Sequence[RankedEntry]) -> pd.DataFrame:
    frame = _ranking_frame(entries, "Type")
    colors = hazard_colors(entry.label for entry in entries)
    frame["Color"] = [hsl_to_hex(colors[entry.label]) for entry in entries]
    return frame


def _incident_frame(incidents: Sequence[Incident]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "ID": incident.id,
                "Date": incident.date,
                "Type": incident.type,
                "Location": incident.location,
                "Camera": incident.reported_by or "Unknown",
                "Description": incident.description,
            }
            for incident in incidents
        ]
    )


def _handle_upload(uploaded_file: Any) -> None:
    """Load a new file; the dashboard resets only when rows were parsed."""
    data = uploaded_file.getvalue()
    upload_hash = hashlib.sha256(data).hexdigest()
    if upload_hash == st.session_state.uploaded_hash:
        return
    st.session_state.uploaded_hash = upload_hash

    csv_service = _load_backend_handles()["csv_service"]
    try:
        outcome = csv_service.load(data, filename=uploaded_file.name)
    except CSVParseError as exc:
        st.session_state.upload_message = ("error", str(exc))
        return

    if outcome.status == "empty" or outcome.state is None:
        st.session_state.upload_message = ("warning", outcome.message)
        return

    _store().replace(outcome.state)
    st.session_state.report = None
    message = outcome.message
    if outcome.rows_skipped:
        message += f" {outcome.rows_skipped} row(s) had no usable detection time."
    st.session_state.upload_message = ("success", message)


def _toggle(incident_id: str) -> None:
    _store().update(lambda state: state.toggle_selection(incident_id))


def _render_charts(state: DashboardState, visible: list[Incident]) -> None:
    aggregation: AggregationService = _load_backend_handles()["aggregation"]
    processed = aggregation.summarize_incidents(visible)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Observations", processed.totals.all_observations)
    col2.metric("Days Covered", processed.totals.total_days)
    col3.metric("Top Camera", processed.totals.top_camera, processed.top_camera_count or None)
    col4.metric("Top Type", processed.totals.top_type, processed.top_type_count or None)

    stats = aggregation.summary_stats(visible, state.selected_incidents())
    st.info(stats.summary_text)

    chart1, chart2 = st.columns(2)
    with chart1:
        st.markdown("**Incidents per day**")
        daily = aggregation.incident_daily_series(visible)
        if daily:
            st.line_chart(_daily_frame(daily), color=LINE_COLOR)
        else:
            st.caption("No dated incidents.")
    with chart2:
        st.markdown("**Top cameras**")
        bars = aggregation.incident_camera_bars(visible)
        if bars:
            st.bar_chart(_ranking_frame(bars, "Camera"), x="Camera", y="Incidents", color=BAR_COLOR)
        else:
            st.caption("No camera data.")

    st.markdown("**Type distribution**")
    distribution = aggregation.type_distribution(visible)
    if distribution:
        st.bar_chart(_type_frame(distribution), x="Type", y="Incidents", color="Color")

    week_comparison: WeekComparisonService = _load_backend_handles()["week_comparison"]
    for entry in distribution[:3]:
        comparison = week_comparison.compare_incidents(visible, entry.label)
        if comparison.should_show:
            st.caption(
                f"{entry.label}: {comparison.current_count} last week vs "
                f"{comparison.previous_count} the week before ({comparison.percent_change:+.0f}%)."
            )


def _render_incident_list(state: DashboardState, visible: list[Incident]) -> None:
    st.subheader("Incidents")
    bcol1, bcol2, _ = st.columns([1, 1, 4])
    if bcol1.button("Select All Visible", use_container_width=True):
        _store().update(lambda current: current.select_all_visible())
        st.rerun()
    if bcol2.button("Clear Selection", use_container_width=True):
        _store().update(lambda current: current.clear_selection())
        st.rerun()

    st.caption(f"{len(state.selected_ids)} selected, {len(visible)} visible.")
    for incident in visible[:INCIDENT_LIST_LIMIT]:
        selected = state.is_selected(incident.id)
        st.checkbox(
            f"{incident.date} · {incident.description}",
            value=selected,
            key=f"select-{incident.id}-{selected}",
            on_change=_toggle,
            args=(incident.id,),
        )
    if len(visible) > INCIDENT_LIST_LIMIT:
        st.caption(f"Showing the first {INCIDENT_LIST_LIMIT} incidents.")
        st.dataframe(_incident_frame(visible), use_container_width=True)


def _render_report(report: SafetyReport) -> None:
    header = report.header
    st.subheader(header.document_title)
    st.caption(f"Generated {header.generated_label}")
    st.markdown(header.summary_text)

    icol1, icol2, icol3 = st.columns(3)
    with icol1:
        st.markdown("**Top areas**")
        st.dataframe(_ranking_frame(report.top_areas, "Area"), hide_index=True)
    with icol2:
        st.markdown("**Top cameras**")
        st.dataframe(_ranking_frame(report.top_cameras, "Camera"), hide_index=True)
    with icol3:
        st.markdown("**Top scenarios**")
        st.dataframe(_ranking_frame(report.top_scenarios, "Scenario"), hide_index=True)

    for section in report.sections:
        st.markdown(f"### {section.scenario}")
        st.caption(
            f"{section.observations} observations, {section.average_per_day:.1f} per day on average."
        )
        if section.top_camera:
            st.markdown(f"Top camera: **{section.top_camera.label}** ({section.top_camera.count})")
        if section.area_stats.top:
            st.markdown(
                f"Top area: **{section.area_stats.top.label}** ({section.area_stats.top.count})"
            )
        if section.week_over_week:
            comparison = section.week_over_week
            st.markdown(
                f"Week over week: {comparison.current_count} vs {comparison.previous_count} "
                f"({comparison.percent_change:+.0f}%)"
            )
        scol1, scol2 = st.columns(2)
        if section.daily:
            scol1.line_chart(_daily_frame(section.daily), color=LINE_COLOR)
        if section.camera_bars:
            scol2.bar_chart(
                _ranking_frame(section.camera_bars, "Camera"),
                x="Camera",
                y="Incidents",
                color=BAR_COLOR,
            )

    if report.obstruction.observations:
        st.markdown("### Obstructions")
        st.caption(f"{report.obstruction.observations} obstruction observations.")
        if report.obstruction.daily:
            st.line_chart(_daily_frame(report.obstruction.daily), color=OBSTRUCTION_COLOR)

    export = SafetyReportExport.from_report(report)
    st.download_button(
        label="Download Report JSON",
        data=export.model_dump_json(indent=2).encode("utf-8"),
        file_name=f"{header.document_title}.json",
        mime="application/json",
        use_container_width=True,
    )


if "store" not in st.session_state:
    st.session_state.store = DashboardStore()
if "uploaded_hash" not in st.session_state:
    st.session_state.uploaded_hash = None
if "upload_message" not in st.session_state:
    st.session_state.upload_message = None
if "report" not in st.session_state:
    st.session_state.report = None


st.title("Safety Insights")

uploaded_file = st.file_uploader("Upload incident CSV", type=["csv", "tsv", "txt"])
if uploaded_file is not None:
    _handle_upload(uploaded_file)

if st.session_state.upload_message:
    level, text = st.session_state.upload_message
    getattr(st, level)(text)

state = _store().state
if not state.has_data:
    st.info("Upload a CSV export to populate the dashboard.")
    st.stop()


with st.sidebar:
    st.header("Filters")
    # widget keys change with each upload so filters start cleared
    upload_key = st.session_state.uploaded_hash
    options = filter_options(state.incidents)
    site_choice = st.selectbox("Site", options=[ALL_OPTION, *options.sites], key=f"site-{upload_key}")
    type_choice = st.selectbox(
        "Incident type", options=[ALL_OPTION, *options.incident_types], key=f"type-{upload_key}"
    )
    start_choice: date | None = st.date_input("From", value=None, key=f"from-{upload_key}")
    end_choice: date | None = st.date_input("To", value=None, key=f"to-{upload_key}")

    filters = IncidentFilters(
        site=None if site_choice == ALL_OPTION else site_choice,
        incident_type=None if type_choice == ALL_OPTION else type_choice,
        date_start=start_choice,
        date_end=end_choice,
    )
    if filters != state.filters:
        state = _store().update(lambda current: current.with_filters(filters))


visible = state.visible_incidents()
_render_charts(state, visible)
_render_incident_list(state, visible)

st.subheader("Report")
if st.button("Generate Report", type="primary"):
    report_service: ReportService = _load_backend_handles()["report"]
    try:
        st.session_state.report = report_service.build_report(state.report_rows())
    except EmptyReportError as exc:
        st.session_state.report = None
        st.warning(str(exc))

if st.session_state.report is not None:
    _render_report(st.session_state.report)
