"""Typed models for corpus validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from core.config import CorpusConfig
from core.types import PartitionIndex

ValidationStatus = Literal["passed", "failed", "skipped"]


@dataclass(frozen=True)
class ValidationFailure:
    """One problem found by a check."""

    category: str
    check_id: str
    message: str


@dataclass(frozen=True)
class ValidationCheckResult:
    """One validation check result row."""

    check_id: str
    title: str
    category: str
    status: ValidationStatus
    details: str
    duration_seconds: float


@dataclass(frozen=True)
class ValidationReport:
    """Final validation report for a unified root."""

    unified_root: str
    checks: tuple[ValidationCheckResult, ...]
    failures: tuple[ValidationFailure, ...]

    @property
    def failed_count(self) -> int:
        """Count failed checks in this report."""
        return sum(1 for check in self.checks if check.status == "failed")

    @property
    def passed_count(self) -> int:
        """Count passed checks in this report."""
        return sum(1 for check in self.checks if check.status == "passed")

    @property
    def total_count(self) -> int:
        """Count checks that ran, excluding skipped ones."""
        return self.passed_count + self.failed_count

    @property
    def success_rate(self) -> float:
        """Return passed checks as a percentage of checks that ran."""
        if self.total_count == 0:
            return 100.0
        return round(100.0 * self.passed_count / self.total_count, 2)

    @property
    def status(self) -> str:
        return "passed" if self.failed_count == 0 else "failed"


@dataclass
class CategoryRuntime:
    """Shared mutable state used by the checks of one category."""

    category: str
    category_dir: Path
    config: CorpusConfig
    index: PartitionIndex | None = None
