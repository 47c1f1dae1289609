"""Stable record identity and in-run deduplication.

Record ids hash the source name with a canonical JSON rendering of the raw
record, so regenerating a category from the same input yields the same ids.
"""

from __future__ import annotations

import hashlib
import json
from typing import Iterable, Mapping

from core.constants import HASH_ALGORITHM, RECORD_ID_DIGEST_LENGTH
from core.types import UnifiedRecord


def build_record_id(category: str, source_name: str, raw: Mapping[str, object]) -> str:
    """Build a stable record id from source name and raw content.

    Args:
        category: Record category, used as id prefix.
        source_name: Source short name.
        raw: Original raw record.

    Returns:
        Id of the form ``<category>-<digest>``.
    """
    canonical = _canonical_json(raw)
    digest = _hash_text(f"{source_name.strip().lower()}|{canonical}")
    return f"{category}-{digest[:RECORD_ID_DIGEST_LENGTH]}"


def remove_duplicate_records(
    records: Iterable[UnifiedRecord],
) -> tuple[list[UnifiedRecord], int]:
    """Remove records whose id was already seen.

    Args:
        records: Records in arrival order.

    Returns:
        Unique records in arrival order and the number removed.
    """
    unique_records: list[UnifiedRecord] = []
    seen_ids: set[str] = set()
    duplicate_count = 0
    for record in records:
        if record.record_id in seen_ids:
            duplicate_count += 1
            continue
        seen_ids.add(record.record_id)
        unique_records.append(record)
    return unique_records, duplicate_count


def _canonical_json(raw: Mapping[str, object]) -> str:
    """Render a raw record with sorted keys and compact separators."""
    return json.dumps(
        _stringify_keys(raw),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def _stringify_keys(value: object) -> object:
    """Coerce mapping keys to strings so mixed-type keys sort."""
    if isinstance(value, Mapping):
        return {str(key): _stringify_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(item) for item in value]
    return value


def _hash_text(text: str) -> str:
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()
