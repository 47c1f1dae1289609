"""Public SDK surface for humcorpus.

This module provides a stable import path for corpus users.
It re-exports the primary client and typed option models.
"""

from __future__ import annotations

from core.config import CorpusConfig
from core.types import (
    IngestOptions,
    IngestReport,
    IngestSource,
    Location,
    SourceMetadata,
    UnifiedRecord,
)
from ingest.source_transformers import SUPPORTED_TRANSFORMERS, build_transformer
from store.corpus_sdk import Category, CorpusClient
from store.partitioner import ChunkStrategy, PeriodStrategy, partition_records

__all__ = [
    "Category",
    "ChunkStrategy",
    "CorpusClient",
    "CorpusConfig",
    "IngestOptions",
    "IngestReport",
    "IngestSource",
    "Location",
    "PeriodStrategy",
    "SUPPORTED_TRANSFORMERS",
    "SourceMetadata",
    "UnifiedRecord",
    "build_transformer",
    "partition_records",
]
