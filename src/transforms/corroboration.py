"""Cross-source corroboration within one ingest run.

A record is corroborated by every other source that reports a record of
the same category within a short date window at the same place. Place
matches on location name, governorate, or coordinates within a radius.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
import math
from typing import Sequence

from core.constants import (
    CORROBORATION_DAY_WINDOW,
    CORROBORATION_RADIUS_METERS,
    EARTH_RADIUS_METERS,
    UNKNOWN_LOCATION,
)
from core.types import Location, UnifiedRecord
from transforms.quality_scoring import apply_corroboration


def count_corroborations(records: Sequence[UnifiedRecord]) -> list[int]:
    """Count distinct other sources corroborating each record.

    Args:
        records: Records of one category.

    Returns:
        Corroborating source count per record, in input order.
    """
    by_date: dict[date, list[int]] = {}
    for position, record in enumerate(records):
        by_date.setdefault(record.date, []).append(position)
    counts: list[int] = []
    for record in records:
        own_source = _source_key(record)
        sources: set[str] = set()
        for offset in range(-CORROBORATION_DAY_WINDOW, CORROBORATION_DAY_WINDOW + 1):
            for position in by_date.get(record.date + timedelta(days=offset), ()):
                other = records[position]
                other_source = _source_key(other)
                if other_source == own_source or other_source in sources:
                    continue
                if same_place(record.location, other.location):
                    sources.add(other_source)
        counts.append(len(sources))
    return counts


def corroborate_records(records: Sequence[UnifiedRecord]) -> list[UnifiedRecord]:
    """Return records with accuracy raised by their corroboration counts."""
    return [
        replace(record, quality=apply_corroboration(record.quality, count)) if count else record
        for record, count in zip(records, count_corroborations(records))
    ]


def same_place(first: Location, second: Location) -> bool:
    """Return whether two locations describe the same place."""
    first_name = first.name.strip().lower()
    named = first_name not in ("", UNKNOWN_LOCATION.lower())
    if named and first_name == second.name.strip().lower():
        return True
    first_governorate = first.admin_levels.get("level1")
    if first_governorate and first_governorate == second.admin_levels.get("level1"):
        return True
    if first.coordinates is None or second.coordinates is None:
        return False
    return haversine_meters(first.coordinates, second.coordinates) <= CORROBORATION_RADIUS_METERS


def haversine_meters(first: tuple[float, float], second: tuple[float, float]) -> float:
    """Great-circle distance between two ``(longitude, latitude)`` pairs."""
    first_longitude, first_latitude = first
    second_longitude, second_latitude = second
    delta_latitude = math.radians(second_latitude - first_latitude)
    delta_longitude = math.radians(second_longitude - first_longitude)
    a = (
        math.sin(delta_latitude / 2) ** 2
        + math.cos(math.radians(first_latitude))
        * math.cos(math.radians(second_latitude))
        * math.sin(delta_longitude / 2) ** 2
    )
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _source_key(record: UnifiedRecord) -> str:
    return record.source.name.strip().lower()
