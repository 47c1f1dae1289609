"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUMCORPUS_LOG_LEVEL", "ERROR")


def _ingest_conflict(unified_root: Path) -> int:
    return main(
        [
            "--unified-root",
            str(unified_root),
            "ingest",
            str(fixture_path("raw/conflict.json")),
            "--transformer",
            "conflict",
        ]
    )


def test_cli_ingest_prints_category_rows(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """CLI ingest should print per-category rows and run totals."""
    exit_code = _ingest_conflict(tmp_path)
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "conflict\t4\t2\t0\tcommitted" in output
    assert "input=5" in output
    assert "dropped=1" in output


def test_cli_ingest_chunk_strategy(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """CLI ingest should honor the chunk strategy and size."""
    exit_code = main(
        [
            "--unified-root",
            str(tmp_path),
            "ingest",
            str(fixture_path("raw/conflict.json")),
            "--transformer",
            "conflict",
            "--strategy",
            "chunk",
            "--chunk-size",
            "1",
        ]
    )
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "conflict\t4\t4\t0\tcommitted" in output
    assert (tmp_path / "conflict" / "chunk-00003.json").is_file()


def test_cli_ingest_rejects_zero_chunk_size(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """An explicit zero chunk size should fail the category instead of using the default."""
    exit_code = main(
        [
            "--unified-root",
            str(tmp_path),
            "ingest",
            str(fixture_path("raw/conflict.json")),
            "--transformer",
            "conflict",
            "--strategy",
            "chunk",
            "--chunk-size",
            "0",
        ]
    )
    output = capsys.readouterr().out

    assert exit_code == 1
    assert "Invalid chunk size 0" in output
    assert not (tmp_path / "conflict").exists()


def test_cli_ingest_as_of_anchors_recent_window(tmp_path: Path) -> None:
    """--as-of should anchor the recent window at the given date."""
    exit_code = main(
        [
            "--unified-root",
            str(tmp_path),
            "ingest",
            str(fixture_path("raw/conflict.json")),
            "--transformer",
            "conflict",
            "--as-of",
            "2023-11-01",
        ]
    )

    assert exit_code == 0
    recent_payload = json.loads((tmp_path / "conflict" / "recent.json").read_text(encoding="utf-8"))
    assert recent_payload["record_count"] == 2



def test_cli_manifest_and_search(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Manifest, search-index, and search commands should chain."""
    _ingest_conflict(tmp_path)
    capsys.readouterr()

    assert main(["--unified-root", str(tmp_path), "manifest"]) == 0
    assert "total_records=4" in capsys.readouterr().out
    assert main(["--unified-root", str(tmp_path), "search-index"]) == 0
    assert "entries=4" in capsys.readouterr().out
    assert main(["--unified-root", str(tmp_path), "search", "jenin"]) == 0
    search_output = capsys.readouterr().out
    assert "Jenin Camp" in search_output
    assert "Gaza City" not in search_output


def test_cli_read_chunk_prints_json_lines(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """read-chunk should print one JSON record per line."""
    _ingest_conflict(tmp_path)
    capsys.readouterr()

    exit_code = main(["--unified-root", str(tmp_path), "read-chunk", "conflict", "0"])
    lines = capsys.readouterr().out.splitlines()

    records = [json.loads(line) for line in lines if line.startswith("{") and '"id"' in line]
    assert exit_code == 0
    assert [record["date"] for record in records] == ["2023-10-07", "2023-10-09", "2023-11-15"]


def test_cli_read_chunk_reports_out_of_range(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """An out-of-range chunk should print an error and exit non-zero."""
    _ingest_conflict(tmp_path)
    capsys.readouterr()

    exit_code = main(["--unified-root", str(tmp_path), "read-chunk", "conflict", "9"])

    assert exit_code == 1
    assert "error=Chunk 9 is out of range" in capsys.readouterr().out


def test_cli_search_without_index_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Searching before building the index should fail cleanly."""
    exit_code = main(["--unified-root", str(tmp_path), "search", "gaza"])

    assert exit_code == 1
    assert "error=Search index not found" in capsys.readouterr().out


def test_cli_validate_reports_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """validate should print check rows and write the report."""
    _ingest_conflict(tmp_path)
    capsys.readouterr()

    exit_code = main(["--unified-root", str(tmp_path), "validate"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "status=passed" in output
    assert (tmp_path / "validation-report.json").is_file()


def test_cli_validate_fails_for_broken_category(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """validate should exit non-zero when a check fails."""
    _ingest_conflict(tmp_path)
    (tmp_path / "conflict" / "2024-Q1.json").unlink()
    capsys.readouterr()

    exit_code = main(["--unified-root", str(tmp_path), "validate"])

    assert exit_code == 1
    assert "[FAILED] conflict C002" in capsys.readouterr().out


def test_cli_rejects_unknown_transformer(tmp_path: Path) -> None:
    """argparse should reject transformer names outside the supported set."""
    with pytest.raises(SystemExit):
        main(["--unified-root", str(tmp_path), "ingest", "x.json", "--transformer", "news"])
