"""Unit tests for chunked partition reads."""

from __future__ import annotations

from datetime import date
import json
from pathlib import Path

import pytest

from core.errors import CorpusStoreError, OutOfRangeError
from store.chunk_reader import (
    chunk_metadata,
    iter_records,
    open_index,
    read_chunk,
    read_date_range,
)
from store.partition_writer import write_partition_set
from store.partitioner import ChunkStrategy, PeriodStrategy, partition_records
from tests.record_builders import build_record


def _write_chunks(unified_root: Path) -> Path:
    records = [
        build_record(f"conflict-{position:02d}", f"2023-11-{position + 1:02d}")
        for position in range(7)
    ]
    plan = partition_records("conflict", records, ChunkStrategy(chunk_size=3))
    return write_partition_set(unified_root, plan)


def test_read_chunk_returns_records_in_file_order(tmp_path: Path) -> None:
    """Chunks should read back with every record field intact."""
    chunk_index = open_index(_write_chunks(tmp_path))

    records = read_chunk(chunk_index, 2)

    assert chunk_index.total_chunks == 3
    assert [record.record_id for record in records] == ["conflict-06"]
    assert records[0] == build_record("conflict-06", "2023-11-07")


def test_read_chunk_raises_out_of_range(tmp_path: Path) -> None:
    """Chunk numbers outside the index should fail."""
    chunk_index = open_index(_write_chunks(tmp_path))

    with pytest.raises(OutOfRangeError, match="valid chunks are 0..2"):
        read_chunk(chunk_index, 3)
    with pytest.raises(OutOfRangeError):
        read_chunk(chunk_index, -1)


def test_iter_records_yields_every_record(tmp_path: Path) -> None:
    """Iteration should cover every chunk in order."""
    chunk_index = open_index(_write_chunks(tmp_path) / "index.json")

    record_ids = [record.record_id for record in iter_records(chunk_index)]

    assert record_ids == [f"conflict-{position:02d}" for position in range(7)]


def test_read_date_range_filters_inclusively(tmp_path: Path) -> None:
    """Date range reads should include both bounds."""
    chunk_index = open_index(_write_chunks(tmp_path))

    records = read_date_range(chunk_index, date(2023, 11, 3), date(2023, 11, 5))

    assert [record.date.day for record in records] == [3, 4, 5]
    assert len(read_date_range(chunk_index, end=date(2023, 11, 1))) == 1


def test_chunk_metadata_summarizes_period_partitions(tmp_path: Path) -> None:
    """Period partitions should read as chunks without a chunk size."""
    records = [build_record("conflict-a", "2023-10-07"), build_record("conflict-b", "2024-01-02")]
    write_partition_set(tmp_path, partition_records("conflict", records, PeriodStrategy()))

    metadata = chunk_metadata(open_index(tmp_path / "conflict"))

    assert metadata.total_records == 2
    assert metadata.total_chunks == 2
    assert metadata.chunk_size is None


def test_open_index_raises_for_missing_category(tmp_path: Path) -> None:
    """Opening a category without an index should fail."""
    with pytest.raises(CorpusStoreError, match="not found"):
        open_index(tmp_path / "water" / "index.json")


def test_read_chunk_raises_for_corrupt_file(tmp_path: Path) -> None:
    """A chunk file without a data list should fail."""
    category_dir = _write_chunks(tmp_path)
    (category_dir / "chunk-00000.json").write_text(json.dumps({"data": "x"}), encoding="utf-8")

    with pytest.raises(CorpusStoreError):
        read_chunk(open_index(category_dir), 0)
