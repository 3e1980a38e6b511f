from __future__ import annotations

import pytest

from app.services.hazard_palette import (
    CHART_COLORS,
    PEDESTRIAN_OBSTRUCTION_COLOR,
    PERSON_NEAR_HIT_COLOR,
    PPE_COLOR,
    VEHICLE_COLOR,
    hashed_hue,
    hazard_color,
    hazard_colors,
    hsl_to_hex,
    string_hash,
)


@pytest.mark.parametrize(
    ("hazard", "expected"),
    [
        ("Obstructed Vehicle Lane", VEHICLE_COLOR),
        ("Vehicle Near Miss", VEHICLE_COLOR),
        ("Obstructed Pedestrian Walkway", PEDESTRIAN_OBSTRUCTION_COLOR),
        ("PPE Violation", PPE_COLOR),
        ("Overall compliance", PPE_COLOR),
        ("Person Near Hit", PERSON_NEAR_HIT_COLOR),
    ],
)
def test_known_hazards(hazard: str, expected: str) -> None:
    assert hazard_color(hazard) == expected


def test_string_hash_small_inputs() -> None:
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("ab") == 97 * 31 + 98


def test_unknown_hazard_uses_hashed_hue() -> None:
    assert hashed_hue("ab") == (97 * 31 + 98) % 360
    assert hazard_color("ab") == f"hsl({(97 * 31 + 98) % 360}, 65%, 55%)"


def test_long_labels_give_valid_hue() -> None:
    assert 0 <= hashed_hue("Unclassified slip hazard near stairwell") < 360


def test_colour_is_deterministic() -> None:
    assert hazard_color("Ladder misuse") == hazard_color("Ladder misuse")


def test_hsl_to_hex() -> None:
    assert hsl_to_hex("hsl(0, 100%, 50%)") == "#ff0000"
    assert hsl_to_hex("hsl(120, 100%, 25%)") == "#008000"

    with pytest.raises(ValueError):
        hsl_to_hex("#ffffff")


def test_hazard_colors_maps_each_label() -> None:
    colors = hazard_colors(["PPE Violation", "ab", "PPE Violation"])

    assert colors == {"PPE Violation": PPE_COLOR, "ab": hazard_color("ab")}


def test_chart_colors_convert_to_hex() -> None:
    assert hsl_to_hex(CHART_COLORS["quaternary"]).startswith("#")
    assert len({hsl_to_hex(color) for color in CHART_COLORS.values()}) == len(CHART_COLORS)
