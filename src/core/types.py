"""Shared typed models.

This module defines immutable data models used by transforms, ingest,
store, and validation layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Mapping, Union

from core.constants import DEFAULT_CHUNK_SIZE

Category = Literal[
    "conflict",
    "infrastructure",
    "water",
    "health",
    "refugee",
    "displacement",
    "education",
    "emergency",
]
StrategyName = Literal["period", "chunk"]
MetricValue = Union[int, float]


@dataclass(frozen=True)
class Location:
    """Structured location of a unified record.

    Attributes:
        name: Location name as reported by the source.
        region: Classified region, ``"Unknown"`` when not recognizable.
        coordinates: Optional ``(longitude, latitude)`` pair.
        admin_levels: Administrative hierarchy keyed by ``level1..level3``.
    """

    name: str
    region: str
    coordinates: tuple[float, float] | None = None
    admin_levels: Mapping[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceMetadata:
    """Metadata describing the source of one raw batch.

    Attributes:
        name: Short source name, e.g. ``"WHO"``.
        organization: Publishing organization.
        url: Optional source URL.
        title: Optional dataset title, used for data-type routing.
        description: Optional dataset description.
        fetched_at: ISO timestamp of the fetch, when known.
    """

    name: str
    organization: str
    url: str | None = None
    title: str | None = None
    description: str | None = None
    fetched_at: str | None = None


@dataclass(frozen=True)
class SourceInfo:
    """Provenance attached to each unified record."""

    name: str
    organization: str
    fetched_at: str | None
    url: str | None


@dataclass(frozen=True)
class QualityProfile:
    """Reliability profile of one unified record.

    Attributes:
        score: Overall score in [0, 1], equal to ``confidence``.
        completeness: Share of category schema fields present.
        consistency: One minus penalties for contradictions.
        accuracy: Source trust prior adjusted by corroboration.
        confidence: Weighted combination of the three sub-scores.
        verified: Whether the source is a verified organization.
    """

    score: float
    completeness: float
    consistency: float
    accuracy: float
    confidence: float
    verified: bool


@dataclass(frozen=True)
class UnifiedRecord:
    """Canonical cross-source record.

    Attributes:
        record_id: Stable identifier, unique within its category.
        category: Record category.
        date: Calendar date of the observation.
        location: Structured location.
        metrics: Numeric fields, defaulted to 0 when absent.
        attributes: Descriptive string fields.
        source: Provenance of the record.
        quality: Quality profile.
        raw_excerpt: Bounded copy of ambiguous raw fields.
    """

    record_id: str
    category: str
    date: date
    location: Location
    metrics: Mapping[str, MetricValue]
    attributes: Mapping[str, str]
    source: SourceInfo
    quality: QualityProfile
    raw_excerpt: Mapping[str, str] | None = None


@dataclass(frozen=True)
class TransformResult:
    """Output of one source transformer run.

    Attributes:
        transformer: Transformer name.
        records: Emitted records in input order.
        dropped_count: Number of raw records that failed mapping.
        drop_reasons: Mapping failure reasons aligned to dropped records.
    """

    transformer: str
    records: tuple[UnifiedRecord, ...]
    dropped_count: int
    drop_reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; both ends ``None`` for empty collections."""

    start: date | None
    end: date | None


@dataclass(frozen=True)
class PartitionDescriptor:
    """One partition file entry in a partition index.

    Attributes:
        file_name: File name relative to the category directory.
        record_count: Number of records stored in the file.
        date_range: Date range of records in the file.
        period: Quarter key such as ``2023-Q4`` for period partitions.
        sequence: Zero-based chunk number for chunk partitions.
        first_id: Id of the first record in file order.
        last_id: Id of the last record in file order.
    """

    file_name: str
    record_count: int
    date_range: DateRange
    period: str | None = None
    sequence: int | None = None
    first_id: str | None = None
    last_id: str | None = None


@dataclass(frozen=True)
class RecentDescriptor:
    """Trailing-window file entry in a partition index."""

    file_name: str
    record_count: int
    window_days: int
    date_range: DateRange


@dataclass(frozen=True)
class PartitionIndex:
    """Per-category partition index.

    Attributes:
        category: Category name.
        strategy: Partitioning strategy used for the files.
        total_records: Declared total, equal to the sum of partition counts.
        date_range: Overall date range.
        partitions: Ordered partition descriptors.
        regions: Distinct regions across all records.
        sources: Distinct source names across all records.
        generated_at: UTC generation timestamp.
        recent: Optional trailing-window descriptor.
        chunk_size: Target chunk size for chunk partitions.
    """

    category: str
    strategy: StrategyName
    total_records: int
    date_range: DateRange
    partitions: tuple[PartitionDescriptor, ...]
    regions: tuple[str, ...]
    sources: tuple[str, ...]
    generated_at: datetime
    recent: RecentDescriptor | None = None
    chunk_size: int | None = None


@dataclass(frozen=True)
class ChunkMetadata:
    """Summary of a partition set viewed as a sequence of chunks."""

    total_records: int
    total_chunks: int
    chunk_size: int | None
    created_at: datetime


@dataclass(frozen=True)
class IngestSource:
    """One raw batch to ingest.

    Attributes:
        source_uri: Local path to a raw batch file.
        transformer: Transformer name used for this batch.
        source_name: Optional override for the metadata source name.
        organization: Optional override for the publishing organization.
        source_url: Optional override for the source URL.
        title: Optional override for the dataset title.
    """

    source_uri: str
    transformer: str
    source_name: str | None = None
    organization: str | None = None
    source_url: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class IngestOptions:
    """Ingest run options.

    Attributes:
        sources: Raw batches to ingest in this run.
        strategy: Partitioning strategy for every category of the run.
        chunk_size: Optional chunk size override for chunk partitioning.
        as_of: Reference date for future-date scoring and the recent window.
            Scoring falls back to the run date, the recent window to the
            latest record date.
    """

    sources: tuple[IngestSource, ...]
    strategy: StrategyName = "period"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    as_of: date | None = None


@dataclass(frozen=True)
class CategoryIngestResult:
    """Outcome of regenerating one category."""

    category: str
    committed: bool
    record_count: int
    partition_count: int
    duplicate_count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class IngestReport:
    """Outcome of one ingest run across categories."""

    input_count: int
    output_count: int
    dropped_count: int
    categories: tuple[CategoryIngestResult, ...]

    @property
    def failed_categories(self) -> tuple[str, ...]:
        """Return names of categories that were not committed."""
        return tuple(row.category for row in self.categories if not row.committed)
