"""Runtime configuration model for humcorpus.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BASELINE_START,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_RECENT_DAYS,
    DEFAULT_UNIFIED_ROOT,
)
from core.errors import CorpusConfigError

_SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class CorpusConfig:
    """Validated runtime configuration.

    Attributes:
        unified_root: Root directory of the unified corpus.
        baseline_start: First date accepted by corpus validation.
        baseline_end: Optional last date accepted by corpus validation.
        max_file_bytes: Size ceiling for any corpus file.
        recent_days: Width of the trailing-window file in days.
        chunk_size: Default target size for chunk partitioning.
        source_trust_file: Optional YAML file with source trust priors.
        log_level: Minimum level for structured logs.
    """

    unified_root: Path
    baseline_start: date
    baseline_end: date | None
    max_file_bytes: int
    recent_days: int
    chunk_size: int
    source_trust_file: Path | None
    log_level: str

    @classmethod
    def from_env(cls) -> "CorpusConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CorpusConfigError: If environment values are invalid.
        """
        unified_root_value = os.getenv("HUMCORPUS_UNIFIED_ROOT", str(DEFAULT_UNIFIED_ROOT))
        baseline_start = _parse_date(
            "HUMCORPUS_BASELINE_START",
            os.getenv("HUMCORPUS_BASELINE_START", DEFAULT_BASELINE_START),
        )
        baseline_end_value = os.getenv("HUMCORPUS_BASELINE_END")
        baseline_end = (
            _parse_date("HUMCORPUS_BASELINE_END", baseline_end_value)
            if baseline_end_value
            else None
        )
        if baseline_end is not None and baseline_end < baseline_start:
            raise CorpusConfigError(
                f"Invalid baseline window: HUMCORPUS_BASELINE_END ({baseline_end}) is before "
                f"HUMCORPUS_BASELINE_START ({baseline_start}). Fix the window bounds."
            )
        trust_file_value = os.getenv("HUMCORPUS_SOURCE_TRUST_FILE")
        return cls(
            unified_root=Path(unified_root_value).expanduser().resolve(),
            baseline_start=baseline_start,
            baseline_end=baseline_end,
            max_file_bytes=_parse_positive_int(
                "HUMCORPUS_MAX_FILE_BYTES",
                os.getenv("HUMCORPUS_MAX_FILE_BYTES", str(DEFAULT_MAX_FILE_BYTES)),
            ),
            recent_days=_parse_positive_int(
                "HUMCORPUS_RECENT_DAYS",
                os.getenv("HUMCORPUS_RECENT_DAYS", str(DEFAULT_RECENT_DAYS)),
            ),
            chunk_size=_parse_positive_int(
                "HUMCORPUS_CHUNK_SIZE",
                os.getenv("HUMCORPUS_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)),
            ),
            source_trust_file=(
                Path(trust_file_value).expanduser().resolve() if trust_file_value else None
            ),
            log_level=_parse_log_level(os.getenv("HUMCORPUS_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )


def _parse_date(variable_name: str, raw_value: str) -> date:
    """Parse an ISO date environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed calendar date.

    Raises:
        CorpusConfigError: If value is not an ISO date.
    """
    try:
        return date.fromisoformat(raw_value.strip())
    except ValueError as error:
        raise CorpusConfigError(
            f"Invalid {variable_name} value: expected YYYY-MM-DD, got '{raw_value}'. "
            f"Set {variable_name} to an ISO calendar date."
        ) from error


def _parse_positive_int(variable_name: str, raw_value: str) -> int:
    """Parse a positive integer environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        CorpusConfigError: If value is not a positive integer.
    """
    try:
        parsed = int(raw_value)
    except ValueError as error:
        raise CorpusConfigError(
            f"Invalid {variable_name} value: expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a numeric value."
        ) from error
    if parsed < 1:
        raise CorpusConfigError(
            f"Invalid {variable_name} value: expected value >= 1, got {parsed}."
        )
    return parsed


def _parse_log_level(raw_value: str) -> str:
    normalized = raw_value.strip().upper()
    if normalized not in _SUPPORTED_LOG_LEVELS:
        supported = ", ".join(_SUPPORTED_LOG_LEVELS)
        raise CorpusConfigError(
            f"Invalid HUMCORPUS_LOG_LEVEL value '{raw_value}'. Choose one of: {supported}."
        )
    return normalized
