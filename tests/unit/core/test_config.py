"""Unit tests for core config parsing."""

from __future__ import annotations

from datetime import date

import pytest

from core.config import CorpusConfig
from core.errors import CorpusConfigError


def test_from_env_reads_unified_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve the unified root from environment."""
    monkeypatch.setenv("HUMCORPUS_UNIFIED_ROOT", "./.tmp-unified")

    config = CorpusConfig.from_env()

    assert config.unified_root.name == ".tmp-unified"


def test_from_env_uses_defaults() -> None:
    """Config should fall back to built-in defaults when unset."""
    config = CorpusConfig.from_env()

    assert config.baseline_start == date(2023, 10, 7)
    assert config.baseline_end is None
    assert config.recent_days == 30
    assert config.source_trust_file is None
    assert config.log_level == "INFO"


def test_from_env_raises_for_invalid_chunk_size(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric chunk size."""
    monkeypatch.setenv("HUMCORPUS_CHUNK_SIZE", "not-a-number")

    with pytest.raises(CorpusConfigError, match="HUMCORPUS_CHUNK_SIZE"):
        CorpusConfig.from_env()


def test_from_env_raises_for_zero_recent_days(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject non-positive trailing windows."""
    monkeypatch.setenv("HUMCORPUS_RECENT_DAYS", "0")

    with pytest.raises(CorpusConfigError, match=">= 1"):
        CorpusConfig.from_env()


def test_from_env_raises_for_inverted_baseline(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject a window ending before it starts."""
    monkeypatch.setenv("HUMCORPUS_BASELINE_START", "2024-01-01")
    monkeypatch.setenv("HUMCORPUS_BASELINE_END", "2023-12-31")

    with pytest.raises(CorpusConfigError, match="baseline window"):
        CorpusConfig.from_env()


def test_from_env_raises_for_bad_baseline_date(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject non-ISO baseline dates."""
    monkeypatch.setenv("HUMCORPUS_BASELINE_START", "07/10/2023")

    with pytest.raises(CorpusConfigError, match="YYYY-MM-DD"):
        CorpusConfig.from_env()


def test_from_env_normalizes_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should accept lowercase log levels."""
    monkeypatch.setenv("HUMCORPUS_LOG_LEVEL", "debug")

    config = CorpusConfig.from_env()

    assert config.log_level == "DEBUG"


def test_from_env_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unsupported log levels."""
    monkeypatch.setenv("HUMCORPUS_LOG_LEVEL", "chatty")

    with pytest.raises(CorpusConfigError):
        CorpusConfig.from_env()
