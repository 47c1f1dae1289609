"""Unit tests for record identity and deduplication."""

from __future__ import annotations

from core.types import UnifiedRecord
from tests.record_builders import build_record
from transforms.record_identity import build_record_id, remove_duplicate_records


def test_build_record_id_ignores_key_order() -> None:
    """Equal raw content should give equal ids regardless of key order."""
    first = build_record_id("conflict", "ACLED", {"a": 1, "b": "x"})
    second = build_record_id("conflict", " acled ", {"b": "x", "a": 1})

    assert first == second
    assert first.startswith("conflict-")
    assert len(first) == len("conflict-") + 16


def test_build_record_id_differs_by_source() -> None:
    """The same raw record from two sources should get distinct ids."""
    raw = {"date": "2023-10-07"}

    assert build_record_id("conflict", "ACLED", raw) != build_record_id("conflict", "OCHA", raw)


def test_remove_duplicate_records_keeps_first() -> None:
    """Later records with a seen id should be removed and counted."""
    records: list[UnifiedRecord] = [
        build_record("conflict-1", "2023-10-07", location_name="first"),
        build_record("conflict-2", "2023-10-08"),
        build_record("conflict-1", "2023-10-07", location_name="second"),
    ]

    unique_records, duplicate_count = remove_duplicate_records(records)

    assert [record.record_id for record in unique_records] == ["conflict-1", "conflict-2"]
    assert unique_records[0].location.name == "first"
    assert duplicate_count == 1


def test_build_record_id_accepts_mixed_key_types() -> None:
    """Non-string keys at any depth should hash instead of failing to sort."""
    raw = {"date": "2023-10-07", 1: "x", "nested": {2: "y", "z": [{3: "w"}]}}

    record_id = build_record_id("conflict", "ACLED", raw)

    assert record_id.startswith("conflict-")
    assert record_id == build_record_id("conflict", "ACLED", dict(reversed(list(raw.items()))))
