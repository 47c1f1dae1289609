"""Source transformers producing unified records.

Each transformer maps one source family onto unified records: it runs the
field mapper with the family's rule table, enriches and scores each mapped
record, and counts records that could not be mapped. Transformers do no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Protocol, Sequence

from core.errors import CorpusIngestError, MappingError
from core.logging_config import get_logger
from core.source_trust import SourceTrustTable
from core.types import SourceInfo, SourceMetadata, TransformResult, UnifiedRecord
from transforms.enrichment import (
    detect_unrwa_data_type,
    enrich_common,
    enrich_conflict,
    enrich_health_indicator,
    enrich_infrastructure,
    enrich_water,
)
from transforms.field_mapping import MappedFields, RuleSet, map_record
from transforms.field_rules import (
    CONFLICT_RULES,
    DISPLACEMENT_RULES,
    EDUCATION_RULES,
    EMERGENCY_RULES,
    INFRASTRUCTURE_RULES,
    REFUGEE_RULES,
    UNRWA_HEALTH_RULES,
    WATER_RULES,
    WHO_HEALTH_RULES,
)
from transforms.quality_scoring import ScoringContext, score_record
from transforms.record_identity import build_record_id

_LOGGER = get_logger(__name__)

Enricher = Callable[[MappedFields], MappedFields]

SUPPORTED_TRANSFORMERS = ("conflict", "infrastructure", "water", "health", "unrwa")

_UNRWA_RULES = {
    "refugee": REFUGEE_RULES,
    "displacement": DISPLACEMENT_RULES,
    "education": EDUCATION_RULES,
    "health": UNRWA_HEALTH_RULES,
    "emergency": EMERGENCY_RULES,
}


class SourceTransformer(Protocol):
    """Protocol shared by all source transformers."""

    name: str

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        """Transform one raw batch into unified records."""


@dataclass(frozen=True)
class ConflictTransformer:
    """Conflict incident reports (ACLED-like, B'Tselem, news-derived)."""

    trust_table: SourceTrustTable = field(default_factory=SourceTrustTable)
    as_of: date | None = None
    name = "conflict"

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        return _transform_batch(
            self.name,
            raw_batch,
            metadata,
            CONFLICT_RULES,
            enrich_conflict,
            self.trust_table,
            self.as_of,
        )


@dataclass(frozen=True)
class InfrastructureTransformer:
    """Infrastructure damage summaries."""

    trust_table: SourceTrustTable = field(default_factory=SourceTrustTable)
    as_of: date | None = None
    name = "infrastructure"

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        return _transform_batch(
            self.name,
            raw_batch,
            metadata,
            INFRASTRUCTURE_RULES,
            enrich_infrastructure,
            self.trust_table,
            self.as_of,
        )


@dataclass(frozen=True)
class WaterTransformer:
    """Water and sanitation indicators."""

    trust_table: SourceTrustTable = field(default_factory=SourceTrustTable)
    as_of: date | None = None
    name = "water"

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        return _transform_batch(
            self.name, raw_batch, metadata, WATER_RULES, enrich_water, self.trust_table, self.as_of
        )


@dataclass(frozen=True)
class HealthTransformer:
    """WHO Global Health Observatory indicators."""

    trust_table: SourceTrustTable = field(default_factory=SourceTrustTable)
    as_of: date | None = None
    name = "health"

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        return _transform_batch(
            self.name,
            raw_batch,
            metadata,
            WHO_HEALTH_RULES,
            enrich_health_indicator,
            self.trust_table,
            self.as_of,
        )


@dataclass(frozen=True)
class UnrwaTransformer:
    """UNRWA situation data, routed to a category by dataset keywords."""

    trust_table: SourceTrustTable = field(default_factory=SourceTrustTable)
    as_of: date | None = None
    name = "unrwa"

    def transform(self, raw_batch: Sequence[object], metadata: SourceMetadata) -> TransformResult:
        data_type = detect_unrwa_data_type(metadata.title, metadata.description)
        return _transform_batch(
            self.name,
            raw_batch,
            metadata,
            _UNRWA_RULES[data_type],
            enrich_common,
            self.trust_table,
            self.as_of,
        )


def build_transformer(
    name: str,
    trust_table: SourceTrustTable | None = None,
    as_of: date | None = None,
) -> SourceTransformer:
    """Resolve a source transformer by name.

    Args:
        name: Transformer name, one of ``SUPPORTED_TRANSFORMERS``.
        trust_table: Source trust priors; built-in defaults when omitted.
        as_of: Optional reference date for future-date penalties.

    Returns:
        Configured transformer.

    Raises:
        CorpusIngestError: If the name is unknown.
    """
    table = trust_table or SourceTrustTable()
    normalized = name.strip().lower()
    if normalized == "conflict":
        return ConflictTransformer(table, as_of)
    if normalized == "infrastructure":
        return InfrastructureTransformer(table, as_of)
    if normalized == "water":
        return WaterTransformer(table, as_of)
    if normalized == "health":
        return HealthTransformer(table, as_of)
    if normalized == "unrwa":
        return UnrwaTransformer(table, as_of)
    supported = ", ".join(SUPPORTED_TRANSFORMERS)
    raise CorpusIngestError(f"Unsupported transformer '{name}'. Choose one of: {supported}.")


def _transform_batch(
    transformer_name: str,
    raw_batch: Sequence[object],
    metadata: SourceMetadata,
    rule_set: RuleSet,
    enrich: Enricher,
    trust_table: SourceTrustTable,
    as_of: date | None,
) -> TransformResult:
    """Map, score, and enrich every raw record of a batch."""
    trust = trust_table.lookup(metadata.name, metadata.organization)
    context = ScoringContext(prior=trust.prior, verified=trust.verified, as_of=as_of)
    source = SourceInfo(
        name=metadata.name,
        organization=metadata.organization,
        fetched_at=metadata.fetched_at,
        url=metadata.url,
    )
    records: list[UnifiedRecord] = []
    drop_reasons: list[str] = []
    for raw in raw_batch:
        try:
            mapped = map_record(raw, rule_set)
        except MappingError as error:
            drop_reasons.append(error.reason)
            continue
        quality = score_record(mapped, rule_set, context)
        enriched = enrich(mapped)
        records.append(
            UnifiedRecord(
                record_id=build_record_id(rule_set.category, metadata.name, raw),
                category=rule_set.category,
                date=enriched.date,
                location=enriched.location,
                metrics=enriched.metrics,
                attributes=enriched.attributes,
                source=source,
                quality=quality,
                raw_excerpt=enriched.raw_excerpt,
            )
        )
    _LOGGER.info(
        "transform_completed",
        transformer=transformer_name,
        rule_set=rule_set.name,
        source=metadata.name,
        input_count=len(raw_batch),
        output_count=len(records),
        dropped_count=len(drop_reasons),
    )
    return TransformResult(
        transformer=transformer_name,
        records=tuple(records),
        dropped_count=len(drop_reasons),
        drop_reasons=tuple(drop_reasons),
    )
