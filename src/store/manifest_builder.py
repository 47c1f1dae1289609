"""Corpus manifest generation.

The manifest summarizes every category from its partition index alone,
without reading partition data files.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Literal, Sequence

from core.constants import INDEX_FILE_NAME, MANIFEST_FILE_NAME, SUPPORTED_CATEGORIES
from core.errors import CorpusStoreError
from core.logging_config import get_logger
from core.types import DateRange
from store.partition_index import read_index_file

_LOGGER = get_logger(__name__)

ManifestStatus = Literal["ok", "empty", "missing_index", "invalid_index"]


@dataclass(frozen=True)
class CategorySummary:
    """Manifest entry for one category.

    Attributes:
        category: Category name.
        status: ``ok``, ``empty``, ``missing_index`` or ``invalid_index``.
        count: Declared record total, 0 unless the index is readable.
        date_range: Overall date range of the category.
        regions: Distinct regions.
        sources: Distinct source names.
        last_updated: Index generation timestamp.
        strategy: Partitioning strategy.
        partition_count: Number of partition files.
    """

    category: str
    status: ManifestStatus
    count: int = 0
    date_range: DateRange = DateRange(start=None, end=None)
    regions: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    last_updated: datetime | None = None
    strategy: str | None = None
    partition_count: int = 0


@dataclass(frozen=True)
class Manifest:
    """Corpus-wide summary across categories."""

    generated_at: datetime
    total_records: int
    categories: tuple[CategorySummary, ...]


def build_manifest(
    unified_root: Path,
    categories: Sequence[str] = SUPPORTED_CATEGORIES,
) -> Manifest:
    """Summarize every category from its index.

    Args:
        unified_root: Root directory of the unified corpus.
        categories: Categories to include; each appears even without an index.

    Returns:
        Corpus manifest.
    """
    summaries = tuple(_summarize_category(unified_root, category) for category in categories)
    return Manifest(
        generated_at=datetime.now(timezone.utc),
        total_records=sum(summary.count for summary in summaries),
        categories=summaries,
    )


def write_manifest(unified_root: Path, manifest: Manifest) -> Path:
    """Persist the manifest as ``unified-manifest.json``.

    Args:
        unified_root: Root directory of the unified corpus.
        manifest: Manifest to persist.

    Returns:
        Written manifest path.

    Raises:
        CorpusStoreError: If the file cannot be written.
    """
    manifest_path = unified_root / MANIFEST_FILE_NAME
    try:
        unified_root.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(
            json.dumps(manifest_to_payload(manifest), indent=2) + "\n", encoding="utf-8"
        )
    except OSError as error:
        raise CorpusStoreError(
            f"Failed to write manifest at {manifest_path}: {error}. "
            "Check write permissions and retry."
        ) from error
    _LOGGER.info(
        "manifest_written",
        manifest_path=str(manifest_path),
        total_records=manifest.total_records,
        category_count=len(manifest.categories),
    )
    return manifest_path


def manifest_to_payload(manifest: Manifest) -> dict[str, object]:
    """Serialize a manifest into a JSON-safe payload."""
    return {
        "generated_at": manifest.generated_at.isoformat(),
        "total_records": manifest.total_records,
        "sources": sorted(
            {source for summary in manifest.categories for source in summary.sources}
        ),
        "categories": {
            summary.category: {
                "status": summary.status,
                "count": summary.count,
                "date_range": _date_range_payload(summary.date_range),
                "regions": list(summary.regions),
                "sources": list(summary.sources),
                "last_updated": summary.last_updated.isoformat() if summary.last_updated else None,
                "strategy": summary.strategy,
                "partition_count": summary.partition_count,
            }
            for summary in manifest.categories
        },
    }


def _summarize_category(unified_root: Path, category: str) -> CategorySummary:
    index_path = unified_root / category / INDEX_FILE_NAME
    if not index_path.exists():
        return CategorySummary(category=category, status="missing_index")
    try:
        index = read_index_file(index_path)
    except CorpusStoreError as error:
        _LOGGER.warning("manifest_index_invalid", category=category, error=str(error))
        return CategorySummary(category=category, status="invalid_index")
    return CategorySummary(
        category=category,
        status="ok" if index.total_records > 0 else "empty",
        count=index.total_records,
        date_range=index.date_range,
        regions=index.regions,
        sources=index.sources,
        last_updated=index.generated_at,
        strategy=index.strategy,
        partition_count=len(index.partitions),
    )


def _date_range_payload(date_range: DateRange) -> dict[str, str | None]:
    return {
        "start": date_range.start.isoformat() if date_range.start else None,
        "end": date_range.end.isoformat() if date_range.end else None,
    }
