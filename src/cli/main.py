"""humcorpus CLI entry points.
This module exposes commands for ingest, corpus indexes, reads and validation.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import date
import json
from pathlib import Path
from typing import Any, Sequence

from core.config import CorpusConfig
from core.constants import DEFAULT_SEARCH_LIMIT, SUPPORTED_CATEGORIES, SUPPORTED_STRATEGIES
from core.errors import CorpusError
from core.logging_config import configure_logging
from core.types import IngestOptions, IngestSource
from core.validation import render_validation_report
from ingest.source_transformers import SUPPORTED_TRANSFORMERS
from store.corpus_sdk import CorpusClient
from store.record_payload import unified_record_to_payload


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="humcorpus", description="Humanitarian corpus CLI")
    parser.add_argument("--unified-root", help="Override HUMCORPUS_UNIFIED_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    subparsers.add_parser("manifest", help="Build unified-manifest.json from category indexes")
    subparsers.add_parser("search-index", help="Build search-index.json over all records")
    _add_search_command(subparsers)
    _add_read_chunk_command(subparsers)
    subparsers.add_parser("validate", help="Validate the unified corpus and write a report")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the humcorpus CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.unified_root)
        return _dispatch(parser, client, args)
    except CorpusError as error:
        print(f"error={error}")
        return 1


def _dispatch(
    parser: argparse.ArgumentParser,
    client: CorpusClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "ingest":
        return _run_ingest_command(client, args)
    if args.command == "manifest":
        return _run_manifest_command(client)
    if args.command == "search-index":
        return _run_search_index_command(client)
    if args.command == "search":
        return _run_search_command(client, args)
    if args.command == "read-chunk":
        return _run_read_chunk_command(client, args)
    if args.command == "validate":
        return _run_validate_command(client)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(unified_root: str | None) -> CorpusClient:
    """Build SDK client with optional unified-root override.

    Args:
        unified_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = CorpusConfig.from_env()
    configure_logging(config.log_level)
    if unified_root:
        config = replace(config, unified_root=Path(unified_root).expanduser().resolve())
    return CorpusClient(config)


def _run_ingest_command(client: CorpusClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code, 1 when any category failed to commit.
    """
    sources = tuple(
        IngestSource(
            source_uri=source,
            transformer=args.transformer,
            source_name=args.source_name,
            organization=args.organization,
            source_url=args.source_url,
            title=args.title,
        )
        for source in args.sources
    )
    options = IngestOptions(
        sources=sources,
        strategy=args.strategy,
        chunk_size=client.config.chunk_size if args.chunk_size is None else args.chunk_size,
        as_of=args.as_of,
    )
    report = client.ingest(options)
    for row in report.categories:
        state = "committed" if row.committed else f"failed ({row.error})"
        print(
            f"{row.category}\t{row.record_count}\t{row.partition_count}\t"
            f"{row.duplicate_count}\t{state}"
        )
    print(f"input={report.input_count}")
    print(f"output={report.output_count}")
    print(f"dropped={report.dropped_count}")
    return 0 if not report.failed_categories else 1


def _run_manifest_command(client: CorpusClient) -> int:
    manifest = client.build_manifest()
    for summary in manifest.categories:
        print(f"{summary.category}\t{summary.status}\t{summary.count}")
    print(f"total_records={manifest.total_records}")
    return 0


def _run_search_index_command(client: CorpusClient) -> int:
    search_index = client.build_search_index()
    print(f"entries={len(search_index.entries)}")
    return 0


def _run_search_command(client: CorpusClient, args: argparse.Namespace) -> int:
    results = client.search(args.query, category=args.category, limit=args.limit)
    for entry in results:
        print(
            f"{entry.record_id}\t{entry.category}\t{entry.preview.date or '-'}\t"
            f"{entry.preview.location or '-'}\t{entry.preview.title}"
        )
    return 0


def _run_read_chunk_command(client: CorpusClient, args: argparse.Namespace) -> int:
    records = client.category(args.category).read_chunk(args.chunk)
    for record in records:
        print(json.dumps(unified_record_to_payload(record), sort_keys=True))
    return 0


def _run_validate_command(client: CorpusClient) -> int:
    report, report_path = client.validate()
    print(render_validation_report(report))
    print(f"report_path={report_path}")
    return 0 if report.failed_count == 0 else 1


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest raw batch files into the corpus")
    parser.add_argument("sources", nargs="+", help="Raw batch files or directories")
    parser.add_argument(
        "--transformer",
        required=True,
        choices=SUPPORTED_TRANSFORMERS,
        help="Source transformer applied to every batch",
    )
    parser.add_argument(
        "--strategy",
        default="period",
        choices=SUPPORTED_STRATEGIES,
        help="Partitioning strategy",
    )
    parser.add_argument("--chunk-size", type=int, help="Records per chunk for chunk strategy")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Reference date (YYYY-MM-DD) for future-date scoring and the recent window",
    )
    parser.add_argument("--source-name", help="Override the source name of every batch")
    parser.add_argument("--organization", help="Override the publishing organization")
    parser.add_argument("--source-url", help="Override the source URL")
    parser.add_argument("--title", help="Override the dataset title used for routing")


def _add_search_command(subparsers: Any) -> None:
    """Register search subcommand."""
    parser = subparsers.add_parser("search", help="Search the persisted search index")
    parser.add_argument("query", help="Free-text query")
    parser.add_argument("--category", choices=SUPPORTED_CATEGORIES, help="Restrict to one category")
    parser.add_argument("--limit", type=int, default=DEFAULT_SEARCH_LIMIT, help="Maximum results")


def _add_read_chunk_command(subparsers: Any) -> None:
    """Register read-chunk subcommand."""
    parser = subparsers.add_parser("read-chunk", help="Print one chunk of a category as JSON lines")
    parser.add_argument("category", help="Category name")
    parser.add_argument("chunk", type=int, help="Zero-based chunk number")
