"""Record quality scoring.

This module computes completeness, consistency and accuracy sub-scores
for mapped records and combines them into one confidence score.
Scoring is pure: the same mapped fields and context give the same profile.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from core.constants import (
    ACCURACY_WEIGHT,
    COERCED_FIELD_PENALTY,
    COMPLETENESS_WEIGHT,
    CONSISTENCY_WEIGHT,
    COORDINATE_PENALTY,
    CORROBORATION_BONUS,
    FUTURE_DATE_PENALTY,
    IMPLAUSIBLE_COUNT_PENALTY,
    MAX_COERCED_PENALTY,
    MAX_CORROBORATION_COUNT,
    MAX_PLAUSIBLE_COUNT,
    SCORE_PRECISION,
)
from core.types import QualityProfile
from transforms.field_mapping import MappedFields, RuleSet


@dataclass(frozen=True)
class ScoringContext:
    """Inputs to scoring that do not come from the record itself.

    Attributes:
        prior: Source trust prior in [0, 1].
        verified: Whether the source is a verified organization.
        corroboration_count: Number of independent sources reporting the same fact.
        as_of: Optional reference date; later record dates are penalized.
    """

    prior: float
    verified: bool
    corroboration_count: int = 0
    as_of: date | None = None


def score_record(
    mapped: MappedFields,
    rule_set: RuleSet,
    context: ScoringContext,
) -> QualityProfile:
    """Score one mapped record.

    Args:
        mapped: Canonical fields produced by the field mapper.
        rule_set: Rule set defining the category schema.
        context: Source trust and reference date.

    Returns:
        Quality profile with ``score`` equal to ``confidence``.
    """
    completeness = _round(compute_completeness(mapped, rule_set))
    consistency = _round(compute_consistency(mapped, context.as_of))
    accuracy = _round(compute_accuracy(context.prior, context.corroboration_count))
    confidence = _combine(completeness, consistency, accuracy)
    return QualityProfile(
        score=confidence,
        completeness=completeness,
        consistency=consistency,
        accuracy=accuracy,
        confidence=confidence,
        verified=context.verified,
    )


def apply_corroboration(profile: QualityProfile, corroboration_count: int) -> QualityProfile:
    """Raise a profile's accuracy for corroborating sources found after scoring.

    ``profile.accuracy`` must hold the uncorroborated prior, as produced by
    :func:`score_record` with a zero corroboration count.
    """
    if corroboration_count <= 0:
        return profile
    accuracy = _round(compute_accuracy(profile.accuracy, corroboration_count))
    confidence = _combine(profile.completeness, profile.consistency, accuracy)
    return replace(profile, accuracy=accuracy, confidence=confidence, score=confidence)


def compute_completeness(mapped: MappedFields, rule_set: RuleSet) -> float:
    """Return the share of schema fields resolved from the raw record."""
    schema_fields = rule_set.schema_fields
    if not schema_fields:
        return 1.0
    present = sum(1 for name in schema_fields if name in mapped.resolved)
    return present / len(schema_fields)


def compute_consistency(mapped: MappedFields, as_of: date | None = None) -> float:
    """Return one minus penalties for contradictory or implausible values."""
    penalty = 0.0
    coordinates = mapped.location.coordinates
    if coordinates is not None and not _coordinates_in_range(coordinates):
        penalty += COORDINATE_PENALTY
    # Only integer counts are bounded; amounts such as currency are not.
    if any(
        isinstance(value, int) and value > MAX_PLAUSIBLE_COUNT
        for value in mapped.metrics.values()
    ):
        penalty += IMPLAUSIBLE_COUNT_PENALTY
    penalty += min(len(mapped.coerced) * COERCED_FIELD_PENALTY, MAX_COERCED_PENALTY)
    if as_of is not None and mapped.date > as_of:
        penalty += FUTURE_DATE_PENALTY
    return _clamp(1.0 - penalty)


def compute_accuracy(prior: float, corroboration_count: int = 0) -> float:
    """Return the trust prior adjusted by corroborating sources."""
    corroboration = max(0, min(corroboration_count, MAX_CORROBORATION_COUNT))
    return _clamp(prior + (CORROBORATION_BONUS * corroboration))


def _coordinates_in_range(coordinates: tuple[float, float]) -> bool:
    longitude, latitude = coordinates
    return -180.0 <= longitude <= 180.0 and -90.0 <= latitude <= 90.0


def _combine(completeness: float, consistency: float, accuracy: float) -> float:
    return _round(
        _clamp(
            (COMPLETENESS_WEIGHT * completeness)
            + (CONSISTENCY_WEIGHT * consistency)
            + (ACCURACY_WEIGHT * accuracy)
        )
    )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _round(value: float) -> float:
    return round(value, SCORE_PRECISION)
