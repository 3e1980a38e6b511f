from __future__ import annotations

import pytest

SAMPLE_CSV = (
    "ID,First Detection,Area,Camera Name,Scenario\n"
    "a1,2024-03-04 08:00:00,Loading Dock,Cam 1,PPE Violation\n"
    "a2,2024-03-04 09:30:00,Loading Dock,cam 1,PPE Violation\n"
    "a3,2024-03-05 10:00:00,Warehouse,Cam 2,Person Near Hit\n"
    "a4,not-a-date,Warehouse,Cam 2,Person Near Hit\n"
    "a5,05.03.2024,Yard,,Obstructed Walkway\n"
)


@pytest.fixture()
def sample_csv() -> str:
    return SAMPLE_CSV
