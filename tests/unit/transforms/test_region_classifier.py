"""Unit tests for region classification."""

from __future__ import annotations

import pytest

from transforms.region_classifier import classify_region, infer_governorate


@pytest.mark.parametrize(
    ("location_name", "region"),
    [
        ("Gaza City", "Gaza Strip"),
        ("Khan Younis", "Gaza Strip"),
        ("Jenin Camp", "West Bank"),
        ("Hebron|Old City", "West Bank"),
        ("East Jerusalem", "East Jerusalem"),
        ("Occupied Palestinian Territory", "Palestine"),
        ("PSE", "Palestine"),
        ("Amman", "Unknown"),
        ("", "Unknown"),
        (None, "Unknown"),
    ],
)
def test_classify_region(location_name: str | None, region: str) -> None:
    """Location names should classify into corpus regions."""
    assert classify_region(location_name) == region


def test_infer_governorate_prefers_specific_names() -> None:
    """More specific governorates should win over Gaza."""
    assert infer_governorate("North Gaza") == "North Gaza"
    assert infer_governorate("Gaza City") == "Gaza"
    assert infer_governorate("Khan Yunis") == "Khan Yunis"
    assert infer_governorate("Amman") is None
