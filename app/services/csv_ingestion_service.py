"""
app/services/csv_ingestion_service.py

Service layer for CSV upload handling.

An upload either replaces the whole dataset or changes nothing:

    * parse failure  -> ``CSVParseError`` is raised; no partial rows are kept
    * zero rows      -> ``UploadOutcome(status="empty")``; the caller decides
                        how to surface it and keeps its previous state
    * rows parsed    -> ``UploadOutcome(status="loaded")`` carrying a fresh
                        ``DashboardState`` with filters and selection reset
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from app.config import get_parser_settings
from app.logging_utils import log_event
from app.parsing.tabular_parser import TabularParseError, parse_tabular
from app.services.dashboard_state import DashboardState

logger = logging.getLogger(__name__)

UploadStatus = Literal["loaded", "empty"]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVParseError(ValueError):
    """
    Raised when an uploaded file cannot be decoded or tokenized.
    """

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UploadOutcome:
    """
    Result of one upload attempt.
    """

    status: UploadStatus
    rows_parsed: int
    incidents_built: int
    delimiter: str | None
    state: DashboardState | None = None
    filename: str | None = None

    @property
    def rows_skipped(self) -> int:
        return self.rows_parsed - self.incidents_built

    @property
    def message(self) -> str:
        if self.status == "empty":
            return "Parsed 0 rows: the file appears to be empty."
        return f"Successfully imported {self.rows_parsed} records from CSV."


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Parses uploaded bytes and builds the dashboard state for them.
    """

    def __init__(
        self,
        *,
        encoding: str,
        delimiters: tuple[str, ...],
    ) -> None:
        self._encoding = encoding
        self._delimiters = delimiters

    def load(self, data: bytes | str, *, filename: str | None = None) -> UploadOutcome:
        """
        Parse one upload and return its outcome.

        Raises:
            CSVParseError: when the contents cannot be decoded or tokenized.
        """

        try:
            result = parse_tabular(data, delimiters=self._delimiters, encoding=self._encoding)
        except TabularParseError as exc:
            log_event(logger, logging.WARNING, "csv_upload_failed", filename=filename, error=str(exc))
            raise CSVParseError("There was an error parsing the CSV file.", filename=filename) from exc

        if result.is_empty:
            log_event(logger, logging.INFO, "csv_upload_empty", filename=filename)
            return UploadOutcome(
                status="empty",
                rows_parsed=0,
                incidents_built=0,
                delimiter=None,
                filename=filename,
            )

        state = DashboardState.from_rows(result.rows)
        outcome = UploadOutcome(
            status="loaded",
            rows_parsed=len(result.rows),
            incidents_built=len(state.incidents),
            delimiter=result.delimiter,
            state=state,
            filename=filename,
        )
        log_event(
            logger,
            logging.INFO,
            "csv_upload_loaded",
            filename=filename,
            delimiter=result.delimiter,
            rows_parsed=outcome.rows_parsed,
            incidents_built=outcome.incidents_built,
            rows_skipped=outcome.rows_skipped,
        )
        return outcome


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    settings = get_parser_settings()
    return CSVIngestionService(
        encoding=settings.encoding,
        delimiters=settings.delimiters,
    )
