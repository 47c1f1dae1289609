"""Partition index persistence helpers.

This module isolates JSON IO for per-category ``index.json`` files.
It keeps partition writing and reading focused on business flow.
"""

from __future__ import annotations

from datetime import date, datetime
import json
from pathlib import Path
from typing import Any

from core.constants import INDEX_FILE_NAME, SUPPORTED_STRATEGIES
from core.errors import CorpusStoreError
from core.types import DateRange, PartitionDescriptor, PartitionIndex, RecentDescriptor


def index_to_payload(index: PartitionIndex) -> dict[str, object]:
    """Serialize a partition index into a JSON-safe payload.

    Args:
        index: Partition index.

    Returns:
        Dictionary payload for JSON encoding.
    """
    payload: dict[str, object] = {
        "category": index.category,
        "strategy": index.strategy,
        "total_records": index.total_records,
        "date_range": _date_range_to_payload(index.date_range),
        "partitions": [_descriptor_to_payload(descriptor) for descriptor in index.partitions],
        "regions": list(index.regions),
        "sources": list(index.sources),
        "generated_at": index.generated_at.isoformat(),
        "chunk_size": index.chunk_size,
        "recent": None,
    }
    if index.recent is not None:
        payload["recent"] = {
            "file_name": index.recent.file_name,
            "record_count": index.recent.record_count,
            "window_days": index.recent.window_days,
            "date_range": _date_range_to_payload(index.recent.date_range),
        }
    return payload


def write_index_file(category_dir: Path, index: PartitionIndex) -> Path:
    """Write ``index.json`` into a category directory.

    Args:
        category_dir: Category directory.
        index: Partition index to persist.

    Returns:
        Written index path.
    """
    index_path = category_dir / INDEX_FILE_NAME
    index_path.write_text(json.dumps(index_to_payload(index), indent=2) + "\n", encoding="utf-8")
    return index_path


def read_index_file(index_path: Path) -> PartitionIndex:
    """Read and validate a partition index file.

    Args:
        index_path: Path to ``index.json``.

    Returns:
        Parsed partition index.

    Raises:
        CorpusStoreError: If the index is missing or invalid.
    """
    if not index_path.exists():
        raise CorpusStoreError(
            f"Partition index not found at {index_path}. "
            "Ingest the category before reading it."
        )
    try:
        payload = json.loads(index_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise CorpusStoreError(
            f"Failed to parse partition index at {index_path}: {error.msg}. "
            "Regenerate the category with ingest."
        ) from error
    except OSError as error:
        raise CorpusStoreError(
            f"Failed to read partition index at {index_path}: {error}."
        ) from error
    if not isinstance(payload, dict):
        raise CorpusStoreError(
            f"Failed to parse partition index at {index_path}: "
            "expected JSON object at top level. Regenerate the category with ingest."
        )
    try:
        return index_from_payload(payload)
    except (KeyError, TypeError, ValueError) as error:
        raise CorpusStoreError(
            f"Invalid partition index at {index_path}: {error}. "
            "Regenerate the category with ingest."
        ) from error


def read_partition_file(partition_path: Path) -> list[dict[str, Any]]:
    """Read the raw record payloads of one partition file.

    Args:
        partition_path: Partition, chunk, or recent file path.

    Returns:
        Record payloads in file order.

    Raises:
        CorpusStoreError: If the file is missing or invalid.
    """
    try:
        payload = json.loads(partition_path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise CorpusStoreError(
            f"Partition file not found at {partition_path}. "
            "Regenerate the category with ingest."
        ) from error
    except json.JSONDecodeError as error:
        raise CorpusStoreError(
            f"Failed to parse partition file at {partition_path}: {error.msg}. "
            "Regenerate the category with ingest."
        ) from error
    except OSError as error:
        raise CorpusStoreError(
            f"Failed to read partition file at {partition_path}: {error}."
        ) from error
    records = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(records, list) or not all(isinstance(item, dict) for item in records):
        raise CorpusStoreError(
            f"Invalid partition file at {partition_path}: expected object with a 'data' "
            "list of records. Regenerate the category with ingest."
        )
    return records


def index_from_payload(payload: dict[str, Any]) -> PartitionIndex:
    """Deserialize an index payload.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a value has the wrong shape.
    """
    strategy = str(payload["strategy"])
    if strategy not in SUPPORTED_STRATEGIES:
        raise ValueError(f"unsupported strategy '{strategy}'")
    recent_payload = payload.get("recent")
    recent = None
    if isinstance(recent_payload, dict):
        recent = RecentDescriptor(
            file_name=str(recent_payload["file_name"]),
            record_count=int(recent_payload["record_count"]),
            window_days=int(recent_payload["window_days"]),
            date_range=_date_range_from_payload(recent_payload.get("date_range")),
        )
    chunk_size = payload.get("chunk_size")
    return PartitionIndex(
        category=str(payload["category"]),
        strategy="chunk" if strategy == "chunk" else "period",
        total_records=int(payload["total_records"]),
        date_range=_date_range_from_payload(payload.get("date_range")),
        partitions=tuple(_descriptor_from_payload(item) for item in payload["partitions"]),
        regions=tuple(str(region) for region in payload.get("regions", [])),
        sources=tuple(str(source) for source in payload.get("sources", [])),
        generated_at=datetime.fromisoformat(str(payload["generated_at"])),
        recent=recent,
        chunk_size=int(chunk_size) if chunk_size is not None else None,
    )


def _descriptor_to_payload(descriptor: PartitionDescriptor) -> dict[str, object]:
    return {
        "file_name": descriptor.file_name,
        "record_count": descriptor.record_count,
        "date_range": _date_range_to_payload(descriptor.date_range),
        "period": descriptor.period,
        "sequence": descriptor.sequence,
        "first_id": descriptor.first_id,
        "last_id": descriptor.last_id,
    }


def _descriptor_from_payload(payload: object) -> PartitionDescriptor:
    if not isinstance(payload, dict):
        raise ValueError("partition descriptor must be a JSON object")
    sequence = payload.get("sequence")
    return PartitionDescriptor(
        file_name=str(payload["file_name"]),
        record_count=int(payload["record_count"]),
        date_range=_date_range_from_payload(payload.get("date_range")),
        period=_optional_str(payload.get("period")),
        sequence=int(sequence) if sequence is not None else None,
        first_id=_optional_str(payload.get("first_id")),
        last_id=_optional_str(payload.get("last_id")),
    )


def _date_range_to_payload(date_range: DateRange) -> dict[str, str | None]:
    return {
        "start": date_range.start.isoformat() if date_range.start else None,
        "end": date_range.end.isoformat() if date_range.end else None,
    }


def _date_range_from_payload(payload: object) -> DateRange:
    if not isinstance(payload, dict):
        return DateRange(start=None, end=None)
    start = payload.get("start")
    end = payload.get("end")
    return DateRange(
        start=date.fromisoformat(str(start)) if start else None,
        end=date.fromisoformat(str(end)) if end else None,
    )


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None
