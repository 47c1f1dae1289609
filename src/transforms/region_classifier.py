"""Region and governorate classification from location names.

This module maps free-text location names onto the regions and
governorates used across the corpus.
"""

from __future__ import annotations

from core.constants import UNKNOWN_REGION

_REGION_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Gaza Strip",
        ("gaza", "rafah", "khan yunis", "khan younis", "deir al-balah", "deir al balah", "jabalia"),
    ),
    (
        "West Bank",
        (
            "west bank",
            "westbank",
            "ramallah",
            "hebron",
            "al-khalil",
            "nablus",
            "jenin",
            "tulkarm",
            "tulkarem",
            "qalqilya",
            "qalqiliya",
            "tubas",
            "salfit",
            "bethlehem",
            "jericho",
        ),
    ),
    ("East Jerusalem", ("jerusalem", "al-quds")),
    ("Palestine", ("palestine", "occupied palestinian territory")),
)

_GOVERNORATE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("North Gaza", ("north gaza", "northern gaza", "jabalia")),
    ("Deir al-Balah", ("deir al-balah", "deir al balah")),
    ("Khan Yunis", ("khan yunis", "khan younis")),
    ("Rafah", ("rafah",)),
    ("Gaza", ("gaza",)),
    ("Jenin", ("jenin",)),
    ("Tubas", ("tubas",)),
    ("Tulkarm", ("tulkarm", "tulkarem")),
    ("Nablus", ("nablus",)),
    ("Qalqilya", ("qalqilya", "qalqiliya")),
    ("Salfit", ("salfit",)),
    ("Ramallah", ("ramallah",)),
    ("Jericho", ("jericho",)),
    ("Jerusalem", ("jerusalem", "al-quds")),
    ("Bethlehem", ("bethlehem",)),
    ("Hebron", ("hebron", "al-khalil")),
)


def classify_region(location_name: str | None) -> str:
    """Classify a location name into a corpus region.

    Args:
        location_name: Free-text location name.

    Returns:
        Region name, or ``"Unknown"`` when nothing matches.
    """
    name = _normalize(location_name)
    if not name:
        return UNKNOWN_REGION
    if name == "pse":
        return "Palestine"
    for region, keywords in _REGION_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return region
    return UNKNOWN_REGION


def infer_governorate(location_name: str | None) -> str | None:
    """Infer the governorate (admin level 1) from a location name.

    Args:
        location_name: Free-text location name.

    Returns:
        Governorate name, or ``None`` when nothing matches.
    """
    name = _normalize(location_name)
    if not name:
        return None
    for governorate, keywords in _GOVERNORATE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return governorate
    return None


def _normalize(location_name: str | None) -> str:
    """Lowercase a name and strip pipe separators and padding."""
    if not isinstance(location_name, str):
        return ""
    return location_name.lower().replace("|", " ").strip()
