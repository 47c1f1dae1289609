"""Shared unified record builders for tests."""

from __future__ import annotations

from datetime import date

from core.types import Location, QualityProfile, SourceInfo, UnifiedRecord


def build_record(
    record_id: str,
    record_date: str,
    category: str = "conflict",
    location_name: str = "Gaza City",
    region: str = "Gaza Strip",
    source_name: str = "ACLED",
    attributes: dict[str, str] | None = None,
) -> UnifiedRecord:
    """Build a minimal unified record for store-level tests.

    Args:
        record_id: Record id.
        record_date: ISO date string.
        category: Record category.
        location_name: Location name.
        region: Location region.
        source_name: Source short name.
        attributes: Optional attribute overrides.

    Returns:
        Unified record with fixed metrics and quality.
    """
    return UnifiedRecord(
        record_id=record_id,
        category=category,
        date=date.fromisoformat(record_date),
        location=Location(
            name=location_name,
            region=region,
            coordinates=(34.47, 31.5),
            admin_levels={"level1": "Gaza", "level2": None, "level3": None},
        ),
        metrics={"fatalities": 2, "injuries": 5},
        attributes=attributes if attributes is not None else {"event_type": "airstrike"},
        source=SourceInfo(name=source_name, organization=source_name, fetched_at=None, url=None),
        quality=QualityProfile(
            score=0.8,
            completeness=0.75,
            consistency=1.0,
            accuracy=0.8,
            confidence=0.8,
            verified=False,
        ),
    )
