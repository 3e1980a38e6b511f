from __future__ import annotations

import unittest

from app.domain.incident import CanonicalField
from app.mappers.header_aliases import (
    ALIAS_TABLE,
    find_alias_key,
    flexible_lookup,
    lookup_field,
    normalize_key,
    normalize_row_keys,
    resolve_field_key,
)


class TestNormalizeKey(unittest.TestCase):
    def test_lowercases_and_joins_separators(self) -> None:
        self.assertEqual(normalize_key("  First Detection "), "first_detection")
        self.assertEqual(normalize_key("Camera - Name"), "camera_name")
        self.assertEqual(normalize_key("Created\tAt"), "created_at")

    def test_row_keys_are_rewritten(self) -> None:
        row = {"Camera Name": "Cam 1", "First-Detection": "2024-03-05"}

        self.assertEqual(
            normalize_row_keys(row),
            {"camera_name": "Cam 1", "first_detection": "2024-03-05"},
        )

    def test_alias_keys_are_derived_from_candidates(self) -> None:
        keys = ALIAS_TABLE[CanonicalField.TIMESTAMP].keys

        self.assertEqual(keys[0], "first_detection")
        self.assertIn("created_at", keys)


class TestStrictResolution(unittest.TestCase):
    def test_first_key_in_column_order_wins(self) -> None:
        keys = ["created_at", "first_detection"]

        self.assertEqual(resolve_field_key(keys, CanonicalField.TIMESTAMP), "created_at")

    def test_substring_match(self) -> None:
        keys = ["zone_camera_name_raw", "area"]

        self.assertEqual(resolve_field_key(keys, CanonicalField.CAMERA), "zone_camera_name_raw")

    def test_id_requires_exact_key(self) -> None:
        self.assertIsNone(resolve_field_key(["incident_id", "video"], CanonicalField.ID))
        self.assertEqual(resolve_field_key(["video", "id"], CanonicalField.ID), "id")

    def test_missing_field(self) -> None:
        self.assertIsNone(find_alias_key(["foo", "bar"], ("camera",)))


class TestFlexibleLookup(unittest.TestCase):
    def test_exact_match(self) -> None:
        row = {"Camera Name": "Cam 1"}

        self.assertEqual(flexible_lookup(row, ["Camera Name"]), "Cam 1")

    def test_case_and_whitespace_insensitive(self) -> None:
        row = {"CAMERANAME": " Cam 7 "}

        self.assertEqual(flexible_lookup(row, ["cameraName"]), "Cam 7")

    def test_candidate_preference_order(self) -> None:
        row = {"Camera": "second", "Camera Name": "first"}

        self.assertEqual(lookup_field(row, CanonicalField.CAMERA), "first")

    def test_blank_values_fall_through(self) -> None:
        row = {"Camera Name": "  ", "Device": "Cam 9"}

        self.assertEqual(lookup_field(row, CanonicalField.CAMERA), "Cam 9")

    def test_numbers_are_stringified(self) -> None:
        self.assertEqual(flexible_lookup({"Area": 12}, ["Area"]), "12")

    def test_no_match_returns_none(self) -> None:
        self.assertIsNone(lookup_field({"Other": "x"}, CanonicalField.SCENARIO))


class TestAreaSpellings(unittest.TestCase):
    ROWS = (
        {"area ": "Dock"},
        {"AREA": "Dock"},
        {"Area Name": "Dock"},
    )

    def test_flexible_lookup_resolves_each_spelling(self) -> None:
        for row in self.ROWS:
            with self.subTest(row=row):
                self.assertEqual(lookup_field(row, CanonicalField.AREA), "Dock")

    def test_strict_resolution_finds_each_spelling(self) -> None:
        for row in self.ROWS:
            with self.subTest(row=row):
                normalized = normalize_row_keys(row)
                key = resolve_field_key(list(normalized), CanonicalField.AREA)

                self.assertIsNotNone(key)
                self.assertEqual(normalized[key], "Dock")
