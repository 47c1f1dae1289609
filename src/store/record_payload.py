"""Shared JSON serialization for UnifiedRecord payloads.

This module centralizes UnifiedRecord JSON serialization logic.
It is reused by partition writing, chunk reading, and the search index.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from core.types import Location, MetricValue, QualityProfile, SourceInfo, UnifiedRecord


def unified_record_to_payload(record: UnifiedRecord) -> dict[str, object]:
    """Serialize UnifiedRecord into JSON-safe payload.

    Args:
        record: Unified record instance.

    Returns:
        Dictionary payload for JSON encoding, with ``id`` as the id key.
    """
    location = record.location
    quality = record.quality
    payload: dict[str, object] = {
        "id": record.record_id,
        "category": record.category,
        "date": record.date.isoformat(),
        "location": {
            "name": location.name,
            "region": location.region,
            "coordinates": list(location.coordinates) if location.coordinates else None,
            "admin_levels": dict(location.admin_levels),
        },
        "metrics": dict(record.metrics),
        "attributes": dict(record.attributes),
        "source": {
            "name": record.source.name,
            "organization": record.source.organization,
            "fetched_at": record.source.fetched_at,
            "url": record.source.url,
        },
        "quality": {
            "score": quality.score,
            "completeness": quality.completeness,
            "consistency": quality.consistency,
            "accuracy": quality.accuracy,
            "confidence": quality.confidence,
            "verified": quality.verified,
        },
    }
    if record.raw_excerpt:
        payload["raw_excerpt"] = dict(record.raw_excerpt)
    return payload


def unified_record_from_payload(payload: Mapping[str, Any]) -> UnifiedRecord:
    """Deserialize JSON payload into UnifiedRecord.

    Args:
        payload: Serialized record payload.

    Returns:
        Parsed UnifiedRecord.

    Raises:
        ValueError: If the payload has no id or an invalid date.
        KeyError: If a required section is missing.
    """
    record_id = str(payload["id"])
    location_payload = _as_dict(payload.get("location"))
    source_payload = _as_dict(payload.get("source"))
    quality_payload = _as_dict(payload.get("quality"))
    raw_excerpt = payload.get("raw_excerpt")
    return UnifiedRecord(
        record_id=record_id,
        category=str(payload["category"]),
        date=date.fromisoformat(str(payload["date"])),
        location=Location(
            name=str(location_payload.get("name", "Unknown")),
            region=str(location_payload.get("region", "Unknown")),
            coordinates=_parse_coordinates(location_payload.get("coordinates")),
            admin_levels={
                str(key): (str(value) if value is not None else None)
                for key, value in _as_dict(location_payload.get("admin_levels")).items()
            },
        ),
        metrics=_parse_metrics(payload.get("metrics")),
        attributes={
            str(key): str(value) for key, value in _as_dict(payload.get("attributes")).items()
        },
        source=SourceInfo(
            name=str(source_payload.get("name", "")),
            organization=str(source_payload.get("organization", "")),
            fetched_at=_optional_str(source_payload.get("fetched_at")),
            url=_optional_str(source_payload.get("url")),
        ),
        quality=QualityProfile(
            score=float(quality_payload.get("score", 0.0)),
            completeness=float(quality_payload.get("completeness", 0.0)),
            consistency=float(quality_payload.get("consistency", 0.0)),
            accuracy=float(quality_payload.get("accuracy", 0.0)),
            confidence=float(quality_payload.get("confidence", 0.0)),
            verified=bool(quality_payload.get("verified", False)),
        ),
        raw_excerpt=(
            {str(key): str(value) for key, value in raw_excerpt.items()}
            if isinstance(raw_excerpt, dict)
            else None
        ),
    )


def _as_dict(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _parse_coordinates(value: object) -> tuple[float, float] | None:
    if isinstance(value, list) and len(value) == 2:
        return float(value[0]), float(value[1])
    return None


def _parse_metrics(value: object) -> dict[str, MetricValue]:
    metrics: dict[str, MetricValue] = {}
    for key, number in _as_dict(value).items():
        if isinstance(number, bool):
            continue
        if isinstance(number, (int, float)):
            metrics[str(key)] = number
    return metrics
