"""Corpus validation orchestration and report formatting."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Callable

from core.config import CorpusConfig
from core.constants import VALIDATION_REPORT_FILE_NAME
from core.errors import CorpusValidationError
from core.logging_config import get_logger
from core.validation_checks import build_category_checks, check_root_file_sizes
from core.validation_types import (
    CategoryRuntime,
    ValidationCheckResult,
    ValidationFailure,
    ValidationReport,
    ValidationStatus,
)

__all__ = [
    "ValidationCheckResult",
    "ValidationFailure",
    "ValidationReport",
    "discover_categories",
    "render_validation_report",
    "save_validation_report",
    "validate_corpus",
]

_LOGGER = get_logger(__name__)
_ROOT_CATEGORY = "_root"


def validate_corpus(unified_root: Path, config: CorpusConfig) -> ValidationReport:
    """Run every check against a unified root and return a report.

    Failures accumulate as report rows; this function does not raise.
    """
    results: list[ValidationCheckResult] = []
    failures: list[ValidationFailure] = []
    root_runtime = CategoryRuntime(
        category=_ROOT_CATEGORY, category_dir=unified_root, config=config
    )
    root_row = ("R001", "Root files within size limit", check_root_file_sizes)
    _run_check(root_row, root_runtime, results, failures)
    for category in discover_categories(unified_root):
        runtime = CategoryRuntime(
            category=category, category_dir=unified_root / category, config=config
        )
        for check_row in build_category_checks():
            if runtime.index is None and check_row[0] != "C001":
                results.append(_skipped_row(check_row, category))
                continue
            _run_check(check_row, runtime, results, failures)
    report = ValidationReport(
        unified_root=str(unified_root),
        checks=tuple(results),
        failures=tuple(failures),
    )
    _LOGGER.info(
        "validation_completed",
        unified_root=str(unified_root),
        status=report.status,
        passed=report.passed_count,
        failed=report.failed_count,
    )
    return report


def discover_categories(unified_root: Path) -> list[str]:
    """Return category directory names under the root, skipping staging dirs."""
    if not unified_root.is_dir():
        return []
    return sorted(
        path.name
        for path in unified_root.iterdir()
        if path.is_dir() and not path.name.startswith(".")
    )


def _run_check(
    check_row: tuple[str, str, Callable[[CategoryRuntime], str]],
    runtime: CategoryRuntime,
    results: list[ValidationCheckResult],
    failures: list[ValidationFailure],
) -> None:
    check_id, title, check_fn = check_row
    started_at = time.monotonic()
    status, details, messages = _run_single_check(check_fn, runtime)
    results.append(
        ValidationCheckResult(
            check_id=check_id,
            title=title,
            category=runtime.category,
            status=status,
            details=details,
            duration_seconds=round(time.monotonic() - started_at, 3),
        )
    )
    failures.extend(
        ValidationFailure(category=runtime.category, check_id=check_id, message=message)
        for message in messages
    )


def _run_single_check(
    check_fn: Callable[[CategoryRuntime], str],
    runtime: CategoryRuntime,
) -> tuple[ValidationStatus, str, tuple[str, ...]]:
    try:
        details = str(check_fn(runtime))
        return "passed", details, ()
    except CorpusValidationError as error:
        return "failed", str(error), error.messages
    except Exception as error:
        return "failed", str(error), (str(error),)


def _skipped_row(
    check_row: tuple[str, str, Callable[[CategoryRuntime], str]],
    category: str,
) -> ValidationCheckResult:
    check_id, title, _ = check_row
    return ValidationCheckResult(
        check_id=check_id,
        title=title,
        category=category,
        status="skipped",
        details="index not readable",
        duration_seconds=0.0,
    )


def render_validation_report(report: ValidationReport) -> str:
    """Render report into stable multi-line text for CLI output."""
    lines = [f"unified_root={report.unified_root}"]
    for row in report.checks:
        lines.append(
            f"[{row.status.upper()}] {row.category} {row.check_id} {row.title} "
            f"({row.duration_seconds:.3f}s) :: {row.details}"
        )
    lines.append(f"passed={report.passed_count}")
    lines.append(f"failed={report.failed_count}")
    lines.append(f"status={report.status}")
    return "\n".join(lines)


def save_validation_report(report: ValidationReport, report_path: Path | None = None) -> Path:
    """Persist report JSON, by default as ``validation-report.json`` in the root."""
    target = report_path or Path(report.unified_root) / VALIDATION_REPORT_FILE_NAME
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "unified_root": report.unified_root,
        "summary": {
            "total_tests": report.total_count,
            "passed": report.passed_count,
            "failed": report.failed_count,
            "success_rate": report.success_rate,
            "status": report.status,
        },
        "errors": [
            {"category": failure.category, "check_id": failure.check_id, "message": failure.message}
            for failure in report.failures
        ],
        "checks": [
            {
                "check_id": row.check_id,
                "title": row.title,
                "category": row.category,
                "status": row.status,
                "details": row.details,
                "duration_seconds": row.duration_seconds,
            }
            for row in report.checks
        ],
    }
    target.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return target
