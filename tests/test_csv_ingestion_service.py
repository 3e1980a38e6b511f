from __future__ import annotations

import logging
import unittest

from app.services.csv_ingestion_service import CSVIngestionService, CSVParseError


class TestCSVIngestionService(unittest.TestCase):
    def setUp(self) -> None:
        self.service = CSVIngestionService(encoding="utf-8-sig", delimiters=(",", ";", "\t"))

    def test_loaded_outcome(self) -> None:
        data = (
            "ID;First Detection;Area;Camera;Scenario\n"
            "1;2024-03-04 08:00:00;Dock;Cam 1;PPE\n"
            "2;bad;Dock;Cam 1;PPE\n"
        ).encode("utf-8")

        outcome = self.service.load(data, filename="export.csv")

        self.assertEqual(outcome.status, "loaded")
        self.assertEqual(outcome.delimiter, ";")
        self.assertEqual(outcome.rows_parsed, 2)
        self.assertEqual(outcome.incidents_built, 1)
        self.assertEqual(outcome.rows_skipped, 1)
        self.assertEqual(outcome.message, "Successfully imported 2 records from CSV.")
        self.assertIsNotNone(outcome.state)
        self.assertEqual(outcome.state.incidents[0].id, "1")

    def test_empty_outcome(self) -> None:
        outcome = self.service.load(b"ID,Date\n\n")

        self.assertEqual(outcome.status, "empty")
        self.assertIsNone(outcome.state)
        self.assertIn("0 rows", outcome.message)

    def test_decode_failure_raises(self) -> None:
        service = CSVIngestionService(encoding="ascii", delimiters=(",",))

        with self.assertRaises(CSVParseError) as ctx:
            service.load("Área,Date\n".encode("utf-8"), filename="bad.csv")

        self.assertEqual(ctx.exception.filename, "bad.csv")
        self.assertIsNotNone(ctx.exception.__cause__)

    def test_loaded_event_is_logged(self) -> None:
        with self.assertLogs("app.services.csv_ingestion_service", level=logging.INFO) as logs:
            self.service.load(b"ID,Date\n1,2024-03-04\n", filename="one.csv")

        self.assertTrue(any('"event": "csv_upload_loaded"' in line for line in logs.output))
