"""Category-specific enrichment of mapped records.

Enrichment derives attributes and metrics from already-mapped fields:
normalized conflict event types, severity, conflict phase, water status,
health indicator units and families. It never changes which raw fields
were resolved, so quality scores only reflect source content.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from core.constants import ACTIVE_CONFLICT_END_DATE, CONFLICT_BASELINE_DATE
from core.types import MetricValue
from transforms.field_mapping import MappedFields

_EVENT_TYPE_ALIASES = {
    "airstrike": "airstrike",
    "air strike": "airstrike",
    "aerial bombardment": "airstrike",
    "bombing": "airstrike",
    "artillery": "artillery",
    "shelling": "artillery",
    "mortar": "artillery",
    "shooting": "shooting",
    "gunfire": "shooting",
    "small arms": "shooting",
    "raid": "raid",
    "incursion": "raid",
    "military operation": "raid",
    "explosion": "explosion",
    "blast": "explosion",
    "ied": "explosion",
    "clash": "armed clash",
    "armed clash": "armed clash",
    "firefight": "armed clash",
    "protest": "protest",
    "demonstration": "protest",
}
_EVENT_SEVERITY_MULTIPLIERS = {
    "airstrike": 1.5,
    "artillery": 1.3,
    "explosion": 1.4,
    "armed clash": 1.2,
    "shooting": 1.0,
    "raid": 0.8,
    "protest": 0.5,
}
_MAX_SEVERITY = 10

_INDICATOR_FAMILIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("mortality", ("mortality", "death", "deaths", "life expectancy")),
    ("maternal_child", ("maternal", "neonatal", "infant", "under-five", "birth")),
    ("nutrition", ("nutrition", "stunting", "wasting", "anaemia", "anemia", "overweight")),
    ("immunization", ("immunization", "vaccine", "vaccination", "dtp", "measles")),
    ("communicable_disease", ("tuberculosis", "hiv", "malaria", "hepatitis", "cholera")),
    ("noncommunicable_disease", ("diabetes", "cancer", "cardiovascular", "tobacco", "alcohol")),
    ("health_system", ("physician", "nurse", "hospital", "health worker", "expenditure")),
    ("water_sanitation", ("water", "sanitation", "hygiene", "wash")),
)

_UNRWA_DATA_TYPES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("refugee", ("refugee",), ("registered",)),
    ("displacement", ("displacement", "displaced"), ()),
    ("education", ("education", "school"), ()),
    ("health", ("health", "medical"), ()),
    ("emergency", ("emergency", "assistance"), ()),
)
_UNRWA_DEFAULT_DATA_TYPE = "refugee"


def normalize_event_type(event_type: str | None) -> str | None:
    """Map a raw event type onto the canonical vocabulary.

    Unrecognized values are returned stripped, not discarded.
    """
    if event_type is None:
        return None
    normalized = event_type.strip().lower()
    if not normalized:
        return None
    return _EVENT_TYPE_ALIASES.get(normalized, event_type.strip())


def compute_severity_index(
    fatalities: MetricValue,
    injuries: MetricValue,
    event_type: str | None,
) -> int:
    """Compute a 0-10 severity index from casualties and event type.

    Fatalities weigh three times injuries; the event type scales the sum.

    Args:
        fatalities: Reported fatalities.
        injuries: Reported injuries.
        event_type: Canonical event type.

    Returns:
        Integer severity in ``[0, 10]``.
    """
    multiplier = _EVENT_SEVERITY_MULTIPLIERS.get(event_type or "", 1.0)
    severity = ((fatalities * 3) + injuries) * multiplier
    return min(_MAX_SEVERITY, int(round(severity / 10)))


def determine_conflict_phase(record_date: date) -> str:
    """Classify a date relative to the October 2023 escalation."""
    if record_date < date.fromisoformat(CONFLICT_BASELINE_DATE):
        return "pre-escalation"
    if record_date < date.fromisoformat(ACTIVE_CONFLICT_END_DATE):
        return "active-conflict"
    return "ongoing-conflict"


def assess_water_status(indicator_name: str | None, value: MetricValue) -> str:
    """Assess a water indicator as Critical, Warning, Stable, Good, or Unknown.

    Shortage indicators are worse when high; access and coverage
    indicators are worse when low.
    """
    name = (indicator_name or "").lower()
    if "shortage" in name or "deficit" in name:
        if value > 50:
            return "Critical"
        if value > 20:
            return "Warning"
        return "Stable"
    if "access" in name or "coverage" in name:
        if value < 30:
            return "Critical"
        if value < 70:
            return "Warning"
        return "Good"
    return "Unknown"


def access_level_for_status(status: str) -> str:
    return {"Critical": "Low", "Warning": "Moderate", "Good": "High"}.get(status, "Unknown")


def infer_indicator_unit(indicator_name: str | None, value: MetricValue) -> str:
    """Infer the unit of a health indicator from its name and value."""
    name = (indicator_name or "").lower()
    if "per 1000" in name or "per 10000" in name or "per 100 000" in name:
        return "per_capita"
    if "percent" in name or "%" in name or "rate" in name:
        return "percentage"
    if "years" in name and "expectancy" in name:
        return "years"
    if "usd" in name or "dollars" in name:
        return "currency_usd"
    if isinstance(value, float) and not value.is_integer() and 0 <= value <= 100:
        return "percentage"
    return "number"


def classify_indicator_family(indicator_name: str | None) -> str:
    """Classify a health indicator into a coarse family by keyword."""
    name = (indicator_name or "").lower()
    for family, keywords in _INDICATOR_FAMILIES:
        if any(keyword in name for keyword in keywords):
            return family
    return "other"


def detect_unrwa_data_type(title: str | None, description: str | None) -> str:
    """Detect the category of an UNRWA dataset from its title and description.

    Args:
        title: Dataset title.
        description: Dataset description.

    Returns:
        Category name; ``refugee`` when no keyword matches.
    """
    text = f"{title or ''} {description or ''}".lower()
    for data_type, any_keywords, required_keywords in _UNRWA_DATA_TYPES:
        if any(keyword in text for keyword in any_keywords) and all(
            keyword in text for keyword in required_keywords
        ):
            return data_type
    return _UNRWA_DEFAULT_DATA_TYPE


def enrich_conflict(mapped: MappedFields) -> MappedFields:
    """Normalize the event type and add the severity index."""
    attributes = dict(mapped.attributes)
    event_type = normalize_event_type(attributes.get("event_type"))
    if event_type is not None:
        attributes["event_type"] = event_type
    metrics = dict(mapped.metrics)
    metrics["severity_index"] = compute_severity_index(
        metrics.get("fatalities", 0),
        metrics.get("injuries", 0),
        event_type,
    )
    return _with_phase(replace(mapped, metrics=metrics, attributes=attributes))


def enrich_infrastructure(mapped: MappedFields) -> MappedFields:
    """Add total affected housing units."""
    metrics = dict(mapped.metrics)
    metrics["total_affected"] = metrics.get("housing_destroyed", 0) + metrics.get(
        "housing_damaged", 0
    )
    return _with_phase(replace(mapped, metrics=metrics))


def enrich_water(mapped: MappedFields) -> MappedFields:
    """Add the water status and access level assessment."""
    attributes = dict(mapped.attributes)
    status = assess_water_status(attributes.get("indicator_name"), mapped.metrics.get("value", 0))
    attributes["status"] = status
    attributes["access_level"] = access_level_for_status(status)
    return _with_phase(replace(mapped, attributes=attributes))


def enrich_health_indicator(mapped: MappedFields) -> MappedFields:
    """Add the indicator unit, when not reported, and indicator family."""
    attributes = dict(mapped.attributes)
    indicator_name = attributes.get("indicator_name")
    if "unit" not in attributes:
        attributes["unit"] = infer_indicator_unit(indicator_name, mapped.metrics.get("value", 0))
    attributes["indicator_family"] = classify_indicator_family(indicator_name)
    return _with_phase(replace(mapped, attributes=attributes))


def enrich_common(mapped: MappedFields) -> MappedFields:
    """Add only the conflict phase."""
    return _with_phase(mapped)


def _with_phase(mapped: MappedFields) -> MappedFields:
    attributes = dict(mapped.attributes)
    attributes["conflict_phase"] = determine_conflict_phase(mapped.date)
    return replace(mapped, attributes=attributes)
