"""Partition planning for unified records.

This module splits a category's records into ordered partition files,
either by calendar quarter or into fixed-size chunks, and builds the
matching partition index. Planning is pure; writing lives elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Union

from core.constants import CHUNK_FILE_PREFIX, DEFAULT_RECENT_DAYS, RECENT_FILE_NAME
from core.errors import CorpusStoreError
from core.types import (
    DateRange,
    PartitionDescriptor,
    PartitionIndex,
    RecentDescriptor,
    UnifiedRecord,
)


@dataclass(frozen=True)
class PeriodStrategy:
    """Quarterly partitions plus a trailing-window file.

    Attributes:
        recent_days: Width of the trailing window in days.
        as_of: Window anchor; the latest record date when omitted.
    """

    recent_days: int = DEFAULT_RECENT_DAYS
    as_of: date | None = None


@dataclass(frozen=True)
class ChunkStrategy:
    """Fixed-size chunks over date-sorted records."""

    chunk_size: int


PartitionStrategy = Union[PeriodStrategy, ChunkStrategy]


@dataclass(frozen=True)
class PartitionFile:
    """One planned partition file and its records in file order."""

    descriptor: PartitionDescriptor
    records: tuple[UnifiedRecord, ...]


@dataclass(frozen=True)
class RecentFile:
    """Planned trailing-window file."""

    descriptor: RecentDescriptor
    records: tuple[UnifiedRecord, ...]


@dataclass(frozen=True)
class PartitionPlan:
    """Complete partition set for one category.

    Attributes:
        category: Category name.
        files: Partition files in index order.
        index: Partition index describing the files.
        recent: Optional trailing-window file.
    """

    category: str
    files: tuple[PartitionFile, ...]
    index: PartitionIndex
    recent: RecentFile | None = None


def partition_records(
    category: str,
    records: Iterable[UnifiedRecord],
    strategy: PartitionStrategy,
    generated_at: datetime | None = None,
) -> PartitionPlan:
    """Plan the partition set for one category.

    Args:
        category: Category name.
        records: Category records in any order.
        strategy: Period or chunk strategy.
        generated_at: Index timestamp; current UTC time when omitted.

    Returns:
        Partition plan with records sorted by ``(date, id)`` in every file.

    Raises:
        CorpusStoreError: If the chunk size is not positive.
    """
    ordered = sort_records(records)
    timestamp = generated_at or datetime.now(timezone.utc)
    if isinstance(strategy, ChunkStrategy):
        files = _plan_chunks(ordered, strategy.chunk_size)
        recent = None
        strategy_name = "chunk"
        chunk_size: int | None = strategy.chunk_size
    else:
        files = _plan_periods(ordered)
        recent = _plan_recent(ordered, strategy)
        strategy_name = "period"
        chunk_size = None
    index = PartitionIndex(
        category=category,
        strategy=strategy_name,
        total_records=sum(item.descriptor.record_count for item in files),
        date_range=_date_range(ordered),
        partitions=tuple(item.descriptor for item in files),
        regions=tuple(sorted({record.location.region for record in ordered})),
        sources=tuple(sorted({record.source.name for record in ordered})),
        generated_at=timestamp,
        recent=recent.descriptor if recent else None,
        chunk_size=chunk_size,
    )
    return PartitionPlan(category=category, files=files, index=index, recent=recent)


def sort_records(records: Iterable[UnifiedRecord]) -> list[UnifiedRecord]:
    """Sort records by date, breaking ties by id."""
    return sorted(records, key=lambda record: (record.date, record.record_id))


def quarter_key(record_date: date) -> str:
    """Return the ``YYYY-Qn`` key of a date."""
    return f"{record_date.year}-Q{(record_date.month - 1) // 3 + 1}"


def chunk_file_name(sequence: int) -> str:
    return f"{CHUNK_FILE_PREFIX}{sequence:05d}.json"


def _plan_periods(ordered: list[UnifiedRecord]) -> tuple[PartitionFile, ...]:
    groups: dict[str, list[UnifiedRecord]] = {}
    for record in ordered:
        groups.setdefault(quarter_key(record.date), []).append(record)
    return tuple(
        _partition_file(f"{period}.json", group, period=period)
        for period, group in groups.items()
    )


def _plan_chunks(ordered: list[UnifiedRecord], chunk_size: int) -> tuple[PartitionFile, ...]:
    if chunk_size < 1:
        raise CorpusStoreError(
            f"Invalid chunk size {chunk_size}: expected value >= 1. "
            "Use --chunk-size with a positive integer."
        )
    files: list[PartitionFile] = []
    for offset in range(0, len(ordered), chunk_size):
        sequence = offset // chunk_size
        group = ordered[offset : offset + chunk_size]
        files.append(_partition_file(chunk_file_name(sequence), group, sequence=sequence))
    return tuple(files)


def _plan_recent(ordered: list[UnifiedRecord], strategy: PeriodStrategy) -> RecentFile | None:
    if not ordered:
        return None
    anchor = strategy.as_of or ordered[-1].date
    cutoff = anchor - timedelta(days=strategy.recent_days)
    window = [record for record in ordered if cutoff <= record.date <= anchor]
    if not window:
        return None
    descriptor = RecentDescriptor(
        file_name=RECENT_FILE_NAME,
        record_count=len(window),
        window_days=strategy.recent_days,
        date_range=_date_range(window),
    )
    return RecentFile(descriptor=descriptor, records=tuple(window))


def _partition_file(
    file_name: str,
    group: list[UnifiedRecord],
    period: str | None = None,
    sequence: int | None = None,
) -> PartitionFile:
    descriptor = PartitionDescriptor(
        file_name=file_name,
        record_count=len(group),
        date_range=_date_range(group),
        period=period,
        sequence=sequence,
        first_id=group[0].record_id,
        last_id=group[-1].record_id,
    )
    return PartitionFile(descriptor=descriptor, records=tuple(group))


def _date_range(ordered: list[UnifiedRecord]) -> DateRange:
    if not ordered:
        return DateRange(start=None, end=None)
    return DateRange(start=ordered[0].date, end=ordered[-1].date)
