"""Ingest orchestration for the unified corpus.

This module coordinates raw batch loading, source transforms, in-run
deduplication, cross-source corroboration, partition planning, and atomic
partition writes. Each category is regenerated independently; one failing
category does not stop the others.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

from core.config import CorpusConfig
from core.errors import CorpusStoreError
from core.logging_config import get_logger
from core.source_trust import SourceTrustTable, load_source_trust_table
from core.types import (
    CategoryIngestResult,
    IngestOptions,
    IngestReport,
    IngestSource,
    SourceMetadata,
    UnifiedRecord,
)
from ingest.input_reader import RawBatch, read_raw_batches
from ingest.source_transformers import build_transformer
from store.partition_writer import write_partition_set
from store.partitioner import ChunkStrategy, PartitionStrategy, PeriodStrategy, partition_records
from transforms.corroboration import corroborate_records
from transforms.record_identity import remove_duplicate_records

_LOGGER = get_logger(__name__)


class IngestPipelineRunner:
    """Runner for one ingest execution across categories."""

    def __init__(
        self,
        options: IngestOptions,
        config: CorpusConfig,
        trust_table: SourceTrustTable | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._trust_table = trust_table or load_source_trust_table(config.source_trust_file)

    def run(self) -> IngestReport:
        """Execute the pipeline and return per-category outcomes."""
        input_count = 0
        dropped_count = 0
        records_by_category: dict[str, list[UnifiedRecord]] = {}
        for source in self._options.sources:
            transformer = build_transformer(
                source.transformer, self._trust_table, self._scoring_date()
            )
            for batch in read_raw_batches(source.source_uri):
                metadata = _apply_overrides(batch, source)
                result = transformer.transform(batch.records, metadata)
                input_count += len(batch.records)
                dropped_count += result.dropped_count
                for record in result.records:
                    records_by_category.setdefault(record.category, []).append(record)
        category_results = tuple(
            self._commit_category(category, records)
            for category, records in sorted(records_by_category.items())
        )
        report = IngestReport(
            input_count=input_count,
            output_count=sum(row.record_count for row in category_results if row.committed),
            dropped_count=dropped_count,
            categories=category_results,
        )
        _log_ingest_completion(self._options, report)
        return report

    def _commit_category(self, category: str, records: list[UnifiedRecord]) -> CategoryIngestResult:
        unique_records, duplicate_count = remove_duplicate_records(records)
        unique_records = corroborate_records(unique_records)
        try:
            plan = partition_records(category, unique_records, self._strategy())
            write_partition_set(self._config.unified_root, plan)
        except CorpusStoreError as error:
            _LOGGER.error(
                "category_ingest_failed",
                category=category,
                record_count=len(unique_records),
                error=str(error),
            )
            return CategoryIngestResult(
                category=category,
                committed=False,
                record_count=len(unique_records),
                partition_count=0,
                duplicate_count=duplicate_count,
                error=str(error),
            )
        return CategoryIngestResult(
            category=category,
            committed=True,
            record_count=plan.index.total_records,
            partition_count=len(plan.files),
            duplicate_count=duplicate_count,
        )

    def _strategy(self) -> PartitionStrategy:
        if self._options.strategy == "chunk":
            return ChunkStrategy(chunk_size=self._options.chunk_size)
        return PeriodStrategy(recent_days=self._config.recent_days, as_of=self._options.as_of)

    def _scoring_date(self) -> date:
        return self._options.as_of or datetime.now(timezone.utc).date()


def ingest_sources(
    options: IngestOptions,
    config: CorpusConfig,
    trust_table: SourceTrustTable | None = None,
) -> IngestReport:
    """Run the ingest pipeline and commit every produced category.

    Args:
        options: Ingest request options.
        config: Runtime configuration.
        trust_table: Optional source trust table; loaded from config when omitted.

    Returns:
        Ingest report with per-category outcomes.

    Raises:
        CorpusIngestError: If a raw batch cannot be read or a transformer is unknown.
        CorpusConfigError: If the source trust file is invalid.
    """
    runner = IngestPipelineRunner(options, config, trust_table)
    return runner.run()


def _apply_overrides(batch: RawBatch, source: IngestSource) -> SourceMetadata:
    """Apply command-line metadata overrides to a batch's metadata."""
    metadata = batch.metadata
    return replace(
        metadata,
        name=source.source_name or metadata.name,
        organization=source.organization or metadata.organization,
        url=source.source_url or metadata.url,
        title=source.title or metadata.title,
    )


def _log_ingest_completion(options: IngestOptions, report: IngestReport) -> None:
    """Log pipeline completion with contextual metadata."""
    _LOGGER.info(
        "ingest_completed",
        source_count=len(options.sources),
        strategy=options.strategy,
        input_count=report.input_count,
        output_count=report.output_count,
        dropped_count=report.dropped_count,
        failed_categories=list(report.failed_categories),
    )
