"""Unit tests for the corpus search index."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import CorpusStoreError
from store.partition_writer import write_partition_set
from store.partitioner import PeriodStrategy, partition_records
from store.search_index import (
    build_entry,
    build_search_index,
    load_search_index,
    search,
    write_search_index,
)
from tests.record_builders import build_record


def _seed_corpus(unified_root: Path) -> None:
    conflict = [
        build_record("conflict-gaza", "2023-10-07"),
        build_record(
            "conflict-jenin",
            "2023-11-15",
            location_name="Jenin Camp",
            region="West Bank",
            attributes={"event_type": "raid", "description": "Overnight incursion"},
        ),
    ]
    health = [
        build_record(
            "health-1",
            "2023-01-01",
            category="health",
            location_name="Palestine",
            region="Palestine",
            source_name="WHO",
            attributes={"indicator_name": "Life expectancy at birth (years)"},
        )
    ]
    write_partition_set(unified_root, partition_records("conflict", conflict, PeriodStrategy()))
    write_partition_set(unified_root, partition_records("health", health, PeriodStrategy()))


def test_build_entry_collects_text_and_preview() -> None:
    """Entries should hold lowercase text and a readable preview."""
    entry = build_entry(build_record("conflict-1", "2023-10-07"))

    assert entry.text == "conflict gaza city gaza strip gaza airstrike acled"
    assert entry.preview.title == "airstrike"
    assert entry.preview.date == "2023-10-07"
    assert entry.preview.location == "Gaza City"


def test_build_entry_defaults_title_to_category() -> None:
    """Records without title attributes should get a category title."""
    entry = build_entry(build_record("water-1", "2024-01-01", category="water", attributes={}))

    assert entry.preview.title == "Water report"


def test_build_search_index_covers_committed_categories(tmp_path: Path) -> None:
    """Every record of every committed category should be indexed."""
    _seed_corpus(tmp_path)

    search_index = build_search_index(tmp_path)

    assert sorted(entry.record_id for entry in search_index.entries) == [
        "conflict-gaza",
        "conflict-jenin",
        "health-1",
    ]


def test_search_ranks_substring_matches_first(tmp_path: Path) -> None:
    """Substring matches should precede fuzzy matches."""
    _seed_corpus(tmp_path)
    search_index = build_search_index(tmp_path)

    assert [entry.record_id for entry in search(search_index, "Jenin  Camp")] == ["conflict-jenin"]
    assert [entry.record_id for entry in search(search_index, "jennin")] == ["conflict-jenin"]
    assert [entry.record_id for entry in search(search_index, "life expectancy")] == ["health-1"]


def test_search_filters_category_and_limit(tmp_path: Path) -> None:
    """Category filters and limits should bound results."""
    _seed_corpus(tmp_path)
    search_index = build_search_index(tmp_path)

    assert [entry.category for entry in search(search_index, "gaza", category="conflict")] == [
        "conflict",
        "conflict",
    ]
    assert search(search_index, "raid", category="health") == []
    assert len(search(search_index, "gaza", limit=1)) == 1
    assert search(search_index, "   ") == []


def test_search_index_round_trips_through_file(tmp_path: Path) -> None:
    """A persisted index should load back with identical entries."""
    _seed_corpus(tmp_path)
    search_index = build_search_index(tmp_path)

    index_path = write_search_index(tmp_path, search_index)

    assert index_path.name == "search-index.json"
    assert load_search_index(index_path) == search_index


def test_load_search_index_raises_when_missing(tmp_path: Path) -> None:
    """Loading a missing index should point at the build command."""
    with pytest.raises(CorpusStoreError, match="search-index"):
        load_search_index(tmp_path / "search-index.json")


def test_search_fuzzy_matches_require_every_token_close(tmp_path: Path) -> None:
    """Fuzzy hits should need every query token within the edit-ratio threshold."""
    _seed_corpus(tmp_path)
    search_index = build_search_index(tmp_path)

    assert [entry.record_id for entry in search(search_index, "jennin camp")] == ["conflict-jenin"]
    assert search(search_index, "jenin qqqqqq") == []
    assert search(search_index, "zzzzz") == []
