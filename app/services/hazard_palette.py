"""
app/services/hazard_palette.py

Deterministic chart colours for hazard types.

Known hazard families map to fixed brand colours by case-insensitive
substring rules; any other hazard gets a hue derived from a 32-bit string
hash, so the same label is always drawn in the same colour.
"""

from __future__ import annotations

import colorsys
import re
from typing import Iterable

VEHICLE_COLOR = "hsl(32, 100%, 27%)"
PEDESTRIAN_OBSTRUCTION_COLOR = "hsl(267, 45%, 60%)"
PPE_COLOR = "hsl(167, 78%, 40%)"
PERSON_NEAR_HIT_COLOR = "hsl(142, 69%, 58%)"

_HSL_PATTERN = re.compile(r"hsl\(\s*([\d.]+)\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)")

CHART_COLORS = {
    "primary": "hsl(142, 69%, 58%)",
    "secondary": "hsl(22, 96%, 50%)",
    "tertiary": "hsl(45, 93%, 47%)",
    "quaternary": "hsl(0, 84%, 60%)",
}

# (required substrings, colour); first match wins.
_SUBSTRING_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("obstructed", "vehicle"), VEHICLE_COLOR),
    (("vehicle", "near"), VEHICLE_COLOR),
    (("obstructed", "pedestrian"), PEDESTRIAN_OBSTRUCTION_COLOR),
    (("ppe",), PPE_COLOR),
    (("overall",), PPE_COLOR),
    (("person", "near"), PERSON_NEAR_HIT_COLOR),
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> list[int]:
    encoded = text.encode("utf-16-le")
    return [int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2)]


def string_hash(text: str) -> int:
    """
    ``hash = unit + ((hash << 5) - hash)`` over UTF-16 code units.

    The shift wraps to a signed 32-bit integer; the subtraction and addition
    do not.
    """

    value = 0
    for unit in _utf16_units(text):
        value = unit + (_to_int32(_to_int32(value) << 5) - value)
    return value


def hashed_hue(text: str) -> int:
    # |a rem n| == |a| mod n for truncating remainder
    return abs(string_hash(text)) % 360


def hazard_color(hazard: str) -> str:
    lowered = hazard.lower()
    for needles, color in _SUBSTRING_RULES:
        if all(needle in lowered for needle in needles):
            return color
    return f"hsl({hashed_hue(hazard)}, 65%, 55%)"


def hazard_colors(hazards: Iterable[str]) -> dict[str, str]:
    return {hazard: hazard_color(hazard) for hazard in hazards}


def hsl_to_hex(color: str) -> str:
    """
    Convert an ``hsl(h, s%, l%)`` string to ``#rrggbb`` for chart libraries.
    """

    match = _HSL_PATTERN.fullmatch(color.strip())
    if match is None:
        raise ValueError(f"Not an hsl() colour: {color!r}")
    hue, saturation, lightness = (float(part) for part in match.groups())
    red, green, blue = colorsys.hls_to_rgb(hue / 360, lightness / 100, saturation / 100)
    return "#{:02x}{:02x}{:02x}".format(*(round(channel * 255) for channel in (red, green, blue)))
