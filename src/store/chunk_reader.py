"""Chunked access to committed partition sets.

Partition files of either strategy are read as an ordered sequence of
chunks, so callers can page or stream a category without loading it whole.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterator

from core.constants import INDEX_FILE_NAME
from core.errors import CorpusStoreError, OutOfRangeError
from core.types import ChunkMetadata, PartitionDescriptor, PartitionIndex, UnifiedRecord
from store.partition_index import read_index_file, read_partition_file
from store.record_payload import unified_record_from_payload


@dataclass(frozen=True)
class ChunkIndex:
    """Opened partition index and the directory holding its files."""

    directory: Path
    index: PartitionIndex

    @property
    def total_chunks(self) -> int:
        return len(self.index.partitions)


def open_index(path: Path) -> ChunkIndex:
    """Open a partition index.

    Args:
        path: Category directory or its ``index.json`` file.

    Returns:
        Opened chunk index.

    Raises:
        CorpusStoreError: If the index is missing or invalid.
    """
    index_path = path / INDEX_FILE_NAME if path.is_dir() else path
    return ChunkIndex(directory=index_path.parent, index=read_index_file(index_path))


def read_chunk(chunk_index: ChunkIndex, chunk_number: int) -> list[UnifiedRecord]:
    """Read the records of one chunk.

    Args:
        chunk_index: Opened chunk index.
        chunk_number: Zero-based chunk number.

    Returns:
        Records in file order.

    Raises:
        OutOfRangeError: If the chunk number is outside the index.
        CorpusStoreError: If the chunk file is missing or invalid.
    """
    if not 0 <= chunk_number < chunk_index.total_chunks:
        raise OutOfRangeError(
            f"Chunk {chunk_number} is out of range for category "
            f"'{chunk_index.index.category}': valid chunks are 0.."
            f"{chunk_index.total_chunks - 1}."
        )
    return _read_descriptor(chunk_index, chunk_index.index.partitions[chunk_number])


def iter_records(chunk_index: ChunkIndex) -> Iterator[UnifiedRecord]:
    """Yield every record, loading one chunk at a time."""
    for descriptor in chunk_index.index.partitions:
        yield from _read_descriptor(chunk_index, descriptor)


def read_date_range(
    chunk_index: ChunkIndex,
    start: date | None = None,
    end: date | None = None,
) -> list[UnifiedRecord]:
    """Read records whose date lies in ``[start, end]``.

    Chunks whose descriptor range does not overlap are skipped; inside
    overlapping chunks the date-sorted records are bisected.

    Args:
        chunk_index: Opened chunk index.
        start: Inclusive lower bound, unbounded when ``None``.
        end: Inclusive upper bound, unbounded when ``None``.

    Returns:
        Matching records in date order.
    """
    matches: list[UnifiedRecord] = []
    for descriptor in chunk_index.index.partitions:
        if not _overlaps(descriptor, start, end):
            continue
        records = _read_descriptor(chunk_index, descriptor)
        dates = [record.date for record in records]
        low = bisect.bisect_left(dates, start) if start is not None else 0
        high = bisect.bisect_right(dates, end) if end is not None else len(records)
        matches.extend(records[low:high])
    return matches


def chunk_metadata(chunk_index: ChunkIndex) -> ChunkMetadata:
    """Summarize a partition set as a sequence of chunks."""
    index = chunk_index.index
    return ChunkMetadata(
        total_records=sum(descriptor.record_count for descriptor in index.partitions),
        total_chunks=len(index.partitions),
        chunk_size=index.chunk_size,
        created_at=index.generated_at,
    )


def _read_descriptor(
    chunk_index: ChunkIndex,
    descriptor: PartitionDescriptor,
) -> list[UnifiedRecord]:
    partition_path = chunk_index.directory / descriptor.file_name
    payloads = read_partition_file(partition_path)
    try:
        return [unified_record_from_payload(payload) for payload in payloads]
    except (KeyError, TypeError, ValueError) as error:
        raise CorpusStoreError(
            f"Invalid record in partition file {partition_path}: {error}. "
            "Regenerate the category with ingest."
        ) from error


def _overlaps(descriptor: PartitionDescriptor, start: date | None, end: date | None) -> bool:
    date_range = descriptor.date_range
    if date_range.start is None or date_range.end is None:
        return True
    if start is not None and date_range.end < start:
        return False
    if end is not None and date_range.start > end:
        return False
    return True
