"""Declarative field mapping engine.

This module resolves canonical fields (date, location, metrics, attributes)
from loosely-typed raw records using ordered candidate-key rule tables.
One generic engine serves every source; per-source behavior lives in data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
import math
import re
from typing import Literal, Mapping

from dateutil import parser as dateutil_parser

from core.constants import (
    RAW_EXCERPT_MAX_CHARS,
    RAW_EXCERPT_MAX_FIELDS,
    UNKNOWN_LOCATION,
    UNKNOWN_REGION,
)
from core.errors import MappingError
from core.types import Location, MetricValue
from transforms.region_classifier import classify_region, infer_governorate

CoercionKind = Literal["count", "amount", "text"]

_YEAR_PATTERN = re.compile(r"^\d{4}$")
_YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")
_YEAR_RANGE_PATTERN = re.compile(r"^(\d{4})\s*[-/]\s*\d{4}$")
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_CONTAINS_YEAR = re.compile(r"\d{4}")
_DATEUTIL_DEFAULT = datetime(2000, 1, 1)
_MIN_YEAR = 1900
_MAX_YEAR = 2100


@dataclass(frozen=True)
class FieldRule:
    """One canonical field and its candidate source keys.

    Attributes:
        canonical: Canonical field name.
        candidates: Source keys tried in priority order.
        kind: Coercion applied to the first present value.
        allow_negative: Whether negative numbers are semantically valid.
    """

    canonical: str
    candidates: tuple[str, ...]
    kind: CoercionKind = "count"
    allow_negative: bool = False


@dataclass(frozen=True)
class RuleSet:
    """Declarative mapping rules for one source family.

    Attributes:
        name: Rule set identifier.
        category: Default category for mapped records.
        date_fields: Date candidate keys in priority order.
        location_fields: Location name candidate keys.
        region_fields: Keys holding an explicit region, tried before classification.
        admin1_fields: Admin level 1 (governorate) candidate keys.
        admin2_fields: Admin level 2 (district) candidate keys.
        admin3_fields: Admin level 3 (locality) candidate keys.
        latitude_fields: Latitude candidate keys.
        longitude_fields: Longitude candidate keys.
        metrics: Numeric field rules.
        attributes: Text field rules.
        default_location: Location name used when no location key is present.
    """

    name: str
    category: str
    date_fields: tuple[str, ...]
    location_fields: tuple[str, ...] = ("location", "location_name", "admin1", "governorate")
    region_fields: tuple[str, ...] = ()
    admin1_fields: tuple[str, ...] = ("admin1", "admin1_name", "governorate")
    admin2_fields: tuple[str, ...] = ("admin2", "admin2_name", "district")
    admin3_fields: tuple[str, ...] = ("admin3", "admin3_name", "locality")
    latitude_fields: tuple[str, ...] = ("latitude", "lat")
    longitude_fields: tuple[str, ...] = ("longitude", "lon", "lng")
    metrics: tuple[FieldRule, ...] = ()
    attributes: tuple[FieldRule, ...] = ()
    default_location: str | None = None

    @property
    def schema_fields(self) -> tuple[str, ...]:
        """Return canonical fields defined for this rule set's schema."""
        metric_names = tuple(rule.canonical for rule in self.metrics)
        attribute_names = tuple(rule.canonical for rule in self.attributes)
        return ("date", "location") + metric_names + attribute_names


@dataclass(frozen=True)
class MappedFields:
    """Canonical field set produced by the mapping engine.

    Attributes:
        date: Resolved calendar date.
        location: Structured location.
        metrics: Numeric fields, 0 when absent or invalid.
        attributes: Text fields found in the raw record.
        resolved: Canonical fields found with a usable value.
        coerced: Canonical fields whose raw value was replaced by a default.
        raw_excerpt: Bounded copy of the coerced raw values.
    """

    date: date
    location: Location
    metrics: Mapping[str, MetricValue]
    attributes: Mapping[str, str]
    resolved: frozenset[str]
    coerced: tuple[str, ...]
    raw_excerpt: Mapping[str, str] | None


def map_record(raw: object, rule_set: RuleSet) -> MappedFields:
    """Map one raw record onto canonical fields.

    Args:
        raw: Raw key/value record.
        rule_set: Source-specific rules.

    Returns:
        Canonical field set.

    Raises:
        MappingError: If the record is not a mapping or has no usable date.
    """
    if not isinstance(raw, Mapping):
        raise MappingError(f"record is not a key/value mapping ({type(raw).__name__})")
    record_date = _resolve_date(raw, rule_set.date_fields)
    resolved: set[str] = {"date"}
    coerced: list[str] = []
    excerpt: dict[str, str] = {}
    location, location_found = _resolve_location(raw, rule_set)
    if location_found:
        resolved.add("location")
    metrics: dict[str, MetricValue] = {}
    for rule in rule_set.metrics:
        key, raw_value = _first_present(raw, rule.candidates)
        if key is None:
            metrics[rule.canonical] = 0
            continue
        number = coerce_number(raw_value, rule.kind, rule.allow_negative)
        if number is None:
            metrics[rule.canonical] = 0
            coerced.append(rule.canonical)
            _add_excerpt(excerpt, key, raw_value)
            continue
        metrics[rule.canonical] = number
        resolved.add(rule.canonical)
    attributes: dict[str, str] = {}
    for rule in rule_set.attributes:
        _, raw_value = _first_present(raw, rule.candidates)
        text = _coerce_text(raw_value)
        if text:
            attributes[rule.canonical] = text
            resolved.add(rule.canonical)
    return MappedFields(
        date=record_date,
        location=location,
        metrics=metrics,
        attributes=attributes,
        resolved=frozenset(resolved),
        coerced=tuple(coerced),
        raw_excerpt=excerpt or None,
    )


def parse_date(value: object) -> date | None:
    """Parse a loosely-typed date value.

    Accepts ``date``/``datetime`` objects, bare years, ``YYYY-MM``,
    ISO dates and datetimes, and textual dates that contain a year.

    Args:
        value: Raw date value.

    Returns:
        Parsed date, or ``None`` when the value is not a usable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not value.is_integer():
            return None
        return _year_start(int(value))
    if not isinstance(value, str):
        return None
    text = value.strip()
    if _YEAR_PATTERN.match(text):
        return _year_start(int(text))
    year_month = _YEAR_MONTH_PATTERN.match(text)
    if year_month:
        return _safe_date(int(year_month.group(1)), int(year_month.group(2)), 1)
    year_range = _YEAR_RANGE_PATTERN.match(text)
    if year_range:
        return _year_start(int(year_range.group(1)))
    if _ISO_DATE_PREFIX.match(text):
        try:
            return _bounded(date.fromisoformat(text[:10]))
        except ValueError:
            return None
    if not _CONTAINS_YEAR.search(text):
        return None
    try:
        return _bounded(dateutil_parser.parse(text, default=_DATEUTIL_DEFAULT).date())
    except (ValueError, OverflowError):
        return None


def coerce_number(
    value: object,
    kind: CoercionKind = "count",
    allow_negative: bool = False,
) -> MetricValue | None:
    """Coerce a raw numeric value.

    Args:
        value: Raw value, number or numeric string.
        kind: ``count`` yields integers, ``amount`` yields floats.
        allow_negative: Whether negative values are accepted.

    Returns:
        Coerced number, or ``None`` when unparseable, non-finite, or
        negative where negative is invalid.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("_", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    if number < 0 and not allow_negative:
        return None
    if kind == "count":
        return int(round(number))
    return number


def _resolve_date(raw: Mapping[str, object], date_fields: tuple[str, ...]) -> date:
    """Resolve the first parseable date among candidate keys.

    Raises:
        MappingError: If no candidate holds a usable date.
    """
    present_keys: list[str] = []
    for key in date_fields:
        value = raw.get(key)
        if value is None or value == "":
            continue
        present_keys.append(key)
        parsed = parse_date(value)
        if parsed is not None:
            return parsed
    if present_keys:
        raise MappingError(f"unparseable date in fields: {', '.join(present_keys)}")
    raise MappingError(f"no date field present (tried: {', '.join(date_fields)})")


def _resolve_location(raw: Mapping[str, object], rule_set: RuleSet) -> tuple[Location, bool]:
    """Build a structured location and report whether a name was found."""
    _, raw_name = _first_present(raw, rule_set.location_fields)
    if isinstance(raw_name, Mapping):
        raw_name = raw_name.get("name")
    name = _coerce_text(raw_name)
    found = bool(name)
    if not name:
        name = rule_set.default_location or UNKNOWN_LOCATION
    _, explicit_region = _first_present(raw, rule_set.region_fields)
    region = _coerce_text(explicit_region) or classify_region(
        name if name != UNKNOWN_LOCATION else None
    )
    _, admin1 = _first_present(raw, rule_set.admin1_fields)
    _, admin2 = _first_present(raw, rule_set.admin2_fields)
    _, admin3 = _first_present(raw, rule_set.admin3_fields)
    admin_levels = {
        "level1": _coerce_text(admin1) or infer_governorate(name),
        "level2": _coerce_text(admin2),
        "level3": _coerce_text(admin3),
    }
    location = Location(
        name=name,
        region=region or UNKNOWN_REGION,
        coordinates=_resolve_coordinates(raw, rule_set),
        admin_levels=admin_levels,
    )
    return location, found


def _resolve_coordinates(
    raw: Mapping[str, object],
    rule_set: RuleSet,
) -> tuple[float, float] | None:
    """Extract ``(longitude, latitude)`` from paired keys or a coordinates field."""
    _, latitude = _first_present(raw, rule_set.latitude_fields)
    _, longitude = _first_present(raw, rule_set.longitude_fields)
    lat_value = coerce_number(latitude, "amount", allow_negative=True)
    lon_value = coerce_number(longitude, "amount", allow_negative=True)
    if lat_value is not None and lon_value is not None:
        return float(lon_value), float(lat_value)
    coordinates = raw.get("coordinates")
    if isinstance(coordinates, Mapping):
        lat_value = coerce_number(coordinates.get("lat"), "amount", allow_negative=True)
        lon_value = coerce_number(coordinates.get("lon"), "amount", allow_negative=True)
        if lat_value is not None and lon_value is not None:
            return float(lon_value), float(lat_value)
        return None
    if isinstance(coordinates, (list, tuple)) and len(coordinates) == 2:
        lon_value = coerce_number(coordinates[0], "amount", allow_negative=True)
        lat_value = coerce_number(coordinates[1], "amount", allow_negative=True)
        if lat_value is not None and lon_value is not None:
            return float(lon_value), float(lat_value)
    return None


def _first_present(
    raw: Mapping[str, object],
    candidates: tuple[str, ...],
) -> tuple[str | None, object]:
    """Return the first candidate key holding a non-empty value."""
    for key in candidates:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return key, value
    return None, None


def _coerce_text(value: object) -> str | None:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return None
    text = str(value).strip()
    return text or None


def _add_excerpt(excerpt: dict[str, str], key: str, value: object) -> None:
    if len(excerpt) >= RAW_EXCERPT_MAX_FIELDS:
        return
    excerpt[key] = str(value)[:RAW_EXCERPT_MAX_CHARS]


def _year_start(year: int) -> date | None:
    return _safe_date(year, 1, 1)


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return _bounded(date(year, month, day))
    except ValueError:
        return None


def _bounded(parsed: date) -> date | None:
    """Reject dates outside the plausible reporting range."""
    if _MIN_YEAR <= parsed.year <= _MAX_YEAR:
        return parsed
    return None
