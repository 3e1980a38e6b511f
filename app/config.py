"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TypeVar


ENV_FILES: tuple[str, ...] = (".env", ".env.local")

T = TypeVar("T", int, float, str)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    return (key, value.strip("\"'")) if key else None


@lru_cache(maxsize=1)
def load_env_files() -> None:
    """
    Seed ``os.environ`` from the project's ``ENV_FILES`` once per process.

    Variables already present in the process environment win.
    """

    project_root = Path(__file__).resolve().parents[1]
    for env_path in (project_root / name for name in ENV_FILES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def _env(name: str, default: T) -> T:
    """
    Read ``name`` converted to the type of ``default``; blank or malformed values give ``default``.
    """

    load_env_files()
    raw_value = (os.getenv(name) or "").strip()
    if not raw_value:
        return default
    try:
        return type(default)(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ParserSettings:
    """
    Runtime settings for tabular file parsing.
    """

    encoding: str = "utf-8-sig"
    delimiters: tuple[str, ...] = (",", ";", "\t")


@dataclass(frozen=True)
class AggregationSettings:
    """
    Ranking sizes and label widths used by dashboard and report aggregates.
    """

    insights_top_n: int = 5
    camera_chart_top_n: int = 12
    report_scenario_sections: int = 3
    camera_label_width: int = 12
    dashboard_camera_label_width: int = 10


@dataclass(frozen=True)
class WeekComparisonSettings:
    """
    Display gate for week-over-week deltas.
    """

    min_count: int = 10
    min_percent_change: float = 10.0


@lru_cache(maxsize=1)
def get_parser_settings() -> ParserSettings:
    """
    Return cached parser settings from environment variables.
    """

    return ParserSettings(encoding=_env("CSV_ENCODING", "utf-8-sig"))


@lru_cache(maxsize=1)
def get_aggregation_settings() -> AggregationSettings:
    """
    Return cached aggregation settings from environment variables.
    """

    return AggregationSettings(
        insights_top_n=max(1, _env("INSIGHTS_TOP_N", 5)),
        camera_chart_top_n=max(1, _env("CAMERA_CHART_TOP_N", 12)),
        report_scenario_sections=max(0, _env("REPORT_SCENARIO_SECTIONS", 3)),
        camera_label_width=max(1, _env("CAMERA_LABEL_WIDTH", 12)),
        dashboard_camera_label_width=max(1, _env("DASHBOARD_CAMERA_LABEL_WIDTH", 10)),
    )


@lru_cache(maxsize=1)
def get_week_comparison_settings() -> WeekComparisonSettings:
    """
    Return cached week-over-week gate settings from environment variables.
    """

    return WeekComparisonSettings(
        min_count=max(0, _env("WOW_MIN_COUNT", 10)),
        min_percent_change=max(0.0, _env("WOW_MIN_PERCENT_CHANGE", 10.0)),
    )


def get_log_level() -> str:
    """
    Return the configured root log level name.
    """

    return _env("LOG_LEVEL", "INFO").upper()
