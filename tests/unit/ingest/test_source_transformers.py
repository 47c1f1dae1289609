"""Unit tests for source transformers."""

from __future__ import annotations

from datetime import date

import pytest

from core.errors import CorpusIngestError
from core.source_trust import SourceTrustTable
from core.types import SourceMetadata
from ingest.input_reader import read_raw_batch
from ingest.source_transformers import (
    ConflictTransformer,
    HealthTransformer,
    UnrwaTransformer,
    build_transformer,
)
from tests.fixture_paths import fixture_path


def _metadata(name: str = "ACLED", **overrides: str) -> SourceMetadata:
    return SourceMetadata(name=name, organization=overrides.pop("organization", name), **overrides)


def test_conflict_transformer_defaults_invalid_metric() -> None:
    """An invalid count should default to 0 and lower consistency."""
    raw_batch = [
        {"date": "2023-10-07", "location": "Gaza", "fatalities": 5},
        {"date": "2023-10-09", "fatalities": "bad"},
    ]

    result = ConflictTransformer().transform(raw_batch, _metadata())

    assert len(result.records) == 2
    assert result.dropped_count == 0
    first, second = result.records
    assert first.metrics["fatalities"] == 5
    assert first.location.region == "Gaza Strip"
    assert second.metrics["fatalities"] == 0
    assert second.quality.consistency == pytest.approx(0.9)
    assert second.quality.completeness < 1.0
    assert second.raw_excerpt == {"fatalities": "bad"}


def test_conflict_transformer_drops_undated_records() -> None:
    """Records without a usable date should be dropped and counted."""
    raw_batch = [
        {"date": "2023-10-07", "location": "Gaza", "fatalities": 5},
        {"location": "Rafah", "fatalities": 2},
        "not-a-record",
    ]

    result = ConflictTransformer().transform(raw_batch, _metadata())

    assert len(result.records) == 1
    assert result.dropped_count == 2
    assert "no date field present" in result.drop_reasons[0]


def test_conflict_transformer_keeps_batch_with_mixed_key_record() -> None:
    """A record with non-string keys should not abort its batch."""
    raw_batch = [{"date": "2023-10-07", 1: "x"}, {"date": "2023-10-08"}]

    result = ConflictTransformer().transform(raw_batch, _metadata())

    assert [record.date for record in result.records] == [date(2023, 10, 7), date(2023, 10, 8)]
    assert result.dropped_count == 0


def test_conflict_transformer_enriches_fixture_batch() -> None:
    """The conflict fixture should map, enrich, and score every dated record."""
    batch = read_raw_batch(fixture_path("raw/conflict.json"))

    result = ConflictTransformer().transform(batch.records, batch.metadata)

    assert len(result.records) == 4
    assert result.dropped_count == 1
    strike = result.records[0]
    assert strike.category == "conflict"
    assert strike.attributes["event_type"] == "airstrike"
    assert strike.metrics["severity_index"] == 10
    assert strike.location.coordinates == (34.47, 31.5)
    assert strike.source.name == "ACLED"
    assert strike.quality.accuracy == 0.8
    assert result.records[1].metrics["injuries"] == 1204
    assert result.records[2].date == date(2023, 10, 9)


def test_transformer_ids_are_stable_across_runs() -> None:
    """Transforming the same batch twice should give the same ids."""
    raw_batch = [{"date": "2023-10-07", "location": "Gaza", "fatalities": 5}]

    first = ConflictTransformer().transform(raw_batch, _metadata())
    second = ConflictTransformer().transform(raw_batch, _metadata())

    assert first.records[0].record_id == second.records[0].record_id


def test_transformer_uses_trust_table() -> None:
    """Trust priors should come from the supplied table."""
    table = SourceTrustTable(default_prior=0.3, priors={})

    result = ConflictTransformer(trust_table=table).transform(
        [{"date": "2023-10-07"}], _metadata("local")
    )

    assert result.records[0].quality.accuracy == 0.3
    assert result.records[0].quality.verified is False


def test_transformer_penalizes_dates_after_reference() -> None:
    """Records dated after the reference date should lose consistency."""
    result = ConflictTransformer(as_of=date(2023, 1, 1)).transform(
        [{"date": "2023-10-07"}], _metadata()
    )

    assert result.records[0].quality.consistency == pytest.approx(0.8)


def test_health_transformer_reads_indicator_rows() -> None:
    """WHO rows should become health records with inferred units."""
    batch = read_raw_batch(fixture_path("raw/who_health.json"))

    result = HealthTransformer().transform(batch.records, batch.metadata)

    assert len(result.records) == 2
    assert result.dropped_count == 1
    expectancy = result.records[0]
    assert expectancy.category == "health"
    assert expectancy.location.region == "Palestine"
    assert expectancy.attributes["unit"] == "years"
    assert expectancy.attributes["indicator_family"] == "mortality"
    assert expectancy.quality.verified is True


def test_unrwa_transformer_routes_by_title() -> None:
    """UNRWA batches should route to a category from their metadata."""
    batch = read_raw_batch(fixture_path("raw/unrwa_displacement.json"))

    result = UnrwaTransformer().transform(batch.records, batch.metadata)

    assert {record.category for record in result.records} == {"displacement"}
    assert result.records[0].metrics["displaced_persons"] == 1000000
    assert result.records[1].metrics["displaced_persons"] == 250000


def test_unrwa_transformer_defaults_to_refugee() -> None:
    """UNRWA batches without routing keywords should become refugee records."""
    result = UnrwaTransformer().transform(
        [{"date": "2023-12-01", "location": "Jenin"}], _metadata("UNRWA", title="Annual data")
    )

    assert result.records[0].category == "refugee"
    assert result.records[0].record_id.startswith("refugee-")


def test_build_transformer_resolves_names() -> None:
    """Known names should resolve case-insensitively."""
    assert build_transformer(" Conflict ").name == "conflict"
    assert build_transformer("unrwa").name == "unrwa"


def test_build_transformer_raises_for_unknown_name() -> None:
    """Unknown transformer names should fail with the supported list."""
    with pytest.raises(CorpusIngestError, match="Choose one of"):
        build_transformer("news")
