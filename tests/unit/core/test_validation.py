"""Unit tests for corpus validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
import json
from pathlib import Path

from core.config import CorpusConfig
from core.validation import (
    discover_categories,
    render_validation_report,
    save_validation_report,
    validate_corpus,
)
from core.validation_types import ValidationReport
from store.partition_writer import write_partition_set
from store.partitioner import ChunkStrategy, PeriodStrategy, partition_records
from tests.record_builders import build_record


def _config(tmp_path: Path, **overrides: object) -> CorpusConfig:
    config = replace(
        CorpusConfig.from_env(),
        unified_root=tmp_path,
        baseline_start=date(2023, 10, 7),
        baseline_end=None,
    )
    return replace(config, **overrides)


def _write_chunked_conflict(unified_root: Path) -> Path:
    records = [
        build_record(f"conflict-{position}", f"2023-10-{position + 10}") for position in range(6)
    ]
    return write_partition_set(
        unified_root, partition_records("conflict", records, ChunkStrategy(chunk_size=2))
    )


def _failed_ids(report: ValidationReport) -> list[str]:
    return [row.check_id for row in report.checks if row.status == "failed"]


def test_validate_corpus_passes_healthy_corpus(tmp_path: Path) -> None:
    """A freshly written corpus should pass every check."""
    _write_chunked_conflict(tmp_path)
    write_partition_set(
        tmp_path,
        partition_records("water", [build_record("water-1", "2024-01-01")], PeriodStrategy()),
    )

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert report.status == "passed"
    assert report.total_count == 13
    assert report.success_rate == 100.0
    assert report.failures == ()


def test_validate_corpus_reports_missing_partition_file(tmp_path: Path) -> None:
    """Deleting one of three listed files should fail only the existence check."""
    category_dir = _write_chunked_conflict(tmp_path)
    (category_dir / "chunk-00001.json").unlink()

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert _failed_ids(report) == ["C002"]
    assert len(report.failures) == 1
    assert "chunk-00001.json" in report.failures[0].message
    assert report.failures[0].category == "conflict"
    assert report.status == "failed"


def test_validate_corpus_reports_dates_outside_window(tmp_path: Path) -> None:
    """Records dated before the baseline should fail the window check."""
    records = [
        build_record("conflict-old", "2023-01-01"),
        build_record("conflict-new", "2023-11-01"),
    ]
    write_partition_set(tmp_path, partition_records("conflict", records, PeriodStrategy()))

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert _failed_ids(report) == ["C004"]
    assert any("conflict-old" in failure.message for failure in report.failures)


def test_validate_corpus_honors_baseline_end(tmp_path: Path) -> None:
    """A closed window should reject records after its end."""
    _write_chunked_conflict(tmp_path)

    report = validate_corpus(tmp_path, _config(tmp_path, baseline_end=date(2023, 10, 12)))

    assert _failed_ids(report) == ["C004"]
    assert len(report.failures) == 3


def test_validate_corpus_reports_count_mismatch(tmp_path: Path) -> None:
    """A declared total that differs from the descriptor sum should fail."""
    category_dir = _write_chunked_conflict(tmp_path)
    index_path = category_dir / "index.json"
    payload = json.loads(index_path.read_text(encoding="utf-8"))
    payload["total_records"] = 99
    index_path.write_text(json.dumps(payload), encoding="utf-8")

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert _failed_ids(report) == ["C003"]


def test_validate_corpus_reports_truncated_chunk_file(tmp_path: Path) -> None:
    """A chunk holding fewer records than its descriptor should fail the count check."""
    category_dir = _write_chunked_conflict(tmp_path)
    chunk_path = category_dir / "chunk-00001.json"
    payload = json.loads(chunk_path.read_text(encoding="utf-8"))
    payload["data"] = payload["data"][:1]
    chunk_path.write_text(json.dumps(payload), encoding="utf-8")

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert _failed_ids(report) == ["C003"]
    assert any(
        "chunk-00001.json holds 1 records" in failure.message for failure in report.failures
    )



def test_validate_corpus_reports_oversized_files(tmp_path: Path) -> None:
    """Files above the size ceiling should fail the size check."""
    _write_chunked_conflict(tmp_path)

    report = validate_corpus(tmp_path, _config(tmp_path, max_file_bytes=64))

    assert _failed_ids(report) == ["C005"]


def test_validate_corpus_reports_out_of_order_records(tmp_path: Path) -> None:
    """A file whose records go back in time should fail the ordering check."""
    category_dir = _write_chunked_conflict(tmp_path)
    chunk_path = category_dir / "chunk-00000.json"
    payload = json.loads(chunk_path.read_text(encoding="utf-8"))
    payload["data"].reverse()
    chunk_path.write_text(json.dumps(payload), encoding="utf-8")

    report = validate_corpus(tmp_path, _config(tmp_path))

    assert _failed_ids(report) == ["C006"]


def test_validate_corpus_skips_checks_without_index(tmp_path: Path) -> None:
    """An unreadable index should fail C001 and skip the remaining checks."""
    (tmp_path / "health").mkdir()

    report = validate_corpus(tmp_path, _config(tmp_path))

    statuses = {row.check_id: row.status for row in report.checks if row.category == "health"}
    assert statuses["C001"] == "failed"
    assert {statuses[check_id] for check_id in ("C002", "C003", "C004", "C005", "C006")} == {
        "skipped"
    }
    assert report.total_count == 2
    assert report.success_rate == 50.0


def test_validate_corpus_fails_for_missing_root(tmp_path: Path) -> None:
    """A missing unified root should fail the root check."""
    missing_root = tmp_path / "missing"

    report = validate_corpus(missing_root, _config(missing_root))

    assert _failed_ids(report) == ["R001"]
    assert "does not exist" in report.failures[0].message


def test_discover_categories_skips_hidden_directories(tmp_path: Path) -> None:
    """Staging and previous directories should not be validated."""
    (tmp_path / "conflict").mkdir()
    (tmp_path / ".staging-conflict-1234abcd").mkdir()
    (tmp_path / ".previous-water").mkdir()
    (tmp_path / "unified-manifest.json").write_text("{}", encoding="utf-8")

    assert discover_categories(tmp_path) == ["conflict"]


def test_save_validation_report_writes_summary(tmp_path: Path) -> None:
    """The saved report should carry the summary, errors, and check rows."""
    category_dir = _write_chunked_conflict(tmp_path)
    (category_dir / "chunk-00002.json").unlink()
    report = validate_corpus(tmp_path, _config(tmp_path))

    report_path = save_validation_report(report)

    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert report_path == tmp_path / "validation-report.json"
    assert payload["summary"] == {
        "total_tests": 7,
        "passed": 6,
        "failed": 1,
        "success_rate": 85.71,
        "status": "failed",
    }
    assert payload["errors"][0]["check_id"] == "C002"
    assert len(payload["checks"]) == 7


def test_render_validation_report_lists_rows(tmp_path: Path) -> None:
    """Rendered text should include one line per check and the status."""
    _write_chunked_conflict(tmp_path)
    report = validate_corpus(tmp_path, _config(tmp_path))

    rendered = render_validation_report(report)

    assert "[PASSED] conflict C001 Index readable" in rendered
    assert rendered.endswith("status=passed")
