"""Python SDK for unified corpus operations.

This module exposes high-level APIs for ingest, chunked reads, manifest
and search index generation, search, and validation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Iterator

from core.config import CorpusConfig
from core.constants import DEFAULT_SEARCH_LIMIT, SEARCH_INDEX_FILE_NAME
from core.types import ChunkMetadata, IngestOptions, IngestReport, UnifiedRecord
from core.validation import save_validation_report, validate_corpus
from core.validation_types import ValidationReport
from ingest.pipeline import ingest_sources
from store.chunk_reader import (
    ChunkIndex,
    chunk_metadata,
    iter_records,
    open_index,
    read_chunk,
    read_date_range,
)
from store.manifest_builder import Manifest, build_manifest, write_manifest
from store.search_index import (
    SearchEntry,
    SearchIndex,
    build_search_index,
    load_search_index,
    search,
    write_search_index,
)


class CorpusClient:
    """Primary SDK entry point for corpus workflows."""

    def __init__(self, config: CorpusConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or CorpusConfig.from_env()

    @property
    def config(self) -> CorpusConfig:
        return self._config

    def with_unified_root(self, unified_root: str) -> "CorpusClient":
        """Return a client bound to another unified root."""
        resolved = Path(unified_root).expanduser().resolve()
        return CorpusClient(replace(self._config, unified_root=resolved))

    def ingest(self, options: IngestOptions) -> IngestReport:
        """Ingest raw batches and regenerate their categories.

        Args:
            options: Ingest options.

        Returns:
            Ingest report with per-category outcomes.

        Raises:
            CorpusIngestError: If a raw batch cannot be read.
        """
        return ingest_sources(options, self._config)

    def category(self, category: str) -> "Category":
        """Get a handle on one committed category.

        Args:
            category: Category name.

        Returns:
            Category handle.
        """
        return Category(category, self._config.unified_root / category)

    def build_manifest(self) -> Manifest:
        """Build and persist the corpus manifest."""
        manifest = build_manifest(self._config.unified_root)
        write_manifest(self._config.unified_root, manifest)
        return manifest

    def build_search_index(self) -> SearchIndex:
        """Build and persist the corpus search index."""
        search_index = build_search_index(self._config.unified_root)
        write_search_index(self._config.unified_root, search_index)
        return search_index

    def search(
        self,
        query: str,
        category: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[SearchEntry]:
        """Search the persisted search index.

        Raises:
            CorpusStoreError: If the search index is missing or invalid.
        """
        search_index = load_search_index(self._config.unified_root / SEARCH_INDEX_FILE_NAME)
        return search(search_index, query, category=category, limit=limit)

    def validate(self) -> tuple[ValidationReport, Path]:
        """Validate the corpus and persist the report.

        Returns:
            Validation report and written report path.
        """
        report = validate_corpus(self._config.unified_root, self._config)
        return report, save_validation_report(report)


class Category:
    """Read handle over one committed category."""

    def __init__(self, name: str, category_dir: Path) -> None:
        self._name = name
        self._category_dir = category_dir

    @property
    def name(self) -> str:
        return self._name

    def open(self) -> ChunkIndex:
        """Open the category index.

        Raises:
            CorpusStoreError: If the index is missing or invalid.
        """
        return open_index(self._category_dir)

    def metadata(self) -> ChunkMetadata:
        return chunk_metadata(self.open())

    def read_chunk(self, chunk_number: int) -> list[UnifiedRecord]:
        """Read one chunk of the category.

        Raises:
            OutOfRangeError: If the chunk number is outside the index.
        """
        return read_chunk(self.open(), chunk_number)

    def records(self) -> Iterator[UnifiedRecord]:
        """Yield every record one chunk at a time."""
        return iter_records(self.open())

    def between(self, start: date | None = None, end: date | None = None) -> list[UnifiedRecord]:
        """Read records dated inside ``[start, end]``."""
        return read_date_range(self.open(), start, end)
