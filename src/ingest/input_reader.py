"""Raw batch readers for ingestion.

This module loads raw humanitarian records from local JSON or JSONL files.
It normalizes the supported batch layouts into typed raw batches.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from core.constants import SUPPORTED_RAW_EXTENSIONS
from core.errors import CorpusIngestError
from core.types import SourceMetadata


@dataclass(frozen=True)
class RawBatch:
    """Raw records of one source file with their metadata.

    Attributes:
        source_uri: File the batch was read from.
        records: Raw records in file order.
        metadata: Source metadata from the file envelope or defaults.
    """

    source_uri: str
    records: tuple[object, ...]
    metadata: SourceMetadata


def read_raw_batches(source_uri: str) -> list[RawBatch]:
    """Load raw batches from a local file or directory.

    Args:
        source_uri: Local file or directory path.

    Returns:
        One batch per readable file, in sorted path order.

    Raises:
        CorpusIngestError: If the path is missing, unreadable, or malformed.
    """
    source_path = Path(source_uri).expanduser()
    if not source_path.exists():
        raise CorpusIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return [read_raw_batch(source_path)]
    batches = [
        read_raw_batch(file_path)
        for file_path in sorted(source_path.rglob("*"))
        if file_path.is_file() and _is_supported_file(file_path)
    ]
    if not batches:
        raise CorpusIngestError(
            f"No raw batch files found under {source_path}. "
            f"Supported extensions: {SUPPORTED_RAW_EXTENSIONS}."
        )
    return batches


def read_raw_batch(file_path: Path) -> RawBatch:
    """Read one raw batch file.

    Accepted layouts: a ``{"metadata": ..., "data": [...]}`` envelope,
    a bare JSON list, the ``{"data": {"csv": [...]}}`` indicator export,
    and JSONL with one record per line.

    Args:
        file_path: Path to a ``.json`` or ``.jsonl`` file.

    Returns:
        Parsed raw batch.

    Raises:
        CorpusIngestError: If the file cannot be read or parsed.
    """
    if not _is_supported_file(file_path):
        raise CorpusIngestError(
            f"Unsupported raw batch file {file_path}. "
            f"Supported extensions: {SUPPORTED_RAW_EXTENSIONS}."
        )
    text = _read_text(file_path)
    if file_path.suffix.lower() == ".jsonl":
        records = _parse_jsonl_records(file_path, text)
        return RawBatch(
            source_uri=str(file_path),
            records=tuple(records),
            metadata=_default_metadata(file_path),
        )
    payload = _parse_json(file_path, text)
    records, metadata_payload = _unwrap_payload(file_path, payload)
    return RawBatch(
        source_uri=str(file_path),
        records=tuple(records),
        metadata=_build_metadata(file_path, metadata_payload),
    )


def _read_text(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise CorpusIngestError(
            f"Failed to read raw batch at {file_path}: {error}. "
            "Check file permissions and encoding, then retry ingest."
        ) from error


def _parse_json(file_path: Path, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise CorpusIngestError(
            f"Failed to parse raw batch at {file_path}: {error.msg} (line {error.lineno}). "
            "Fix the JSON syntax and retry ingest."
        ) from error


def _parse_jsonl_records(file_path: Path, text: str) -> list[object]:
    """Parse JSONL rows; blank lines are skipped."""
    records: list[object] = []
    for line_number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as error:
            raise CorpusIngestError(
                f"Failed to parse JSONL record at {file_path}:{line_number}: "
                f"{error.msg}. Fix the JSON syntax and retry ingest."
            ) from error
    return records


def _unwrap_payload(
    file_path: Path,
    payload: Any,
) -> tuple[list[object], Mapping[str, Any]]:
    """Split a parsed payload into raw records and envelope metadata."""
    if isinstance(payload, list):
        return payload, {}
    if not isinstance(payload, dict):
        raise CorpusIngestError(
            f"Invalid raw batch at {file_path}: expected JSON list or object, "
            f"got {type(payload).__name__}."
        )
    metadata = payload.get("metadata")
    metadata_payload = metadata if isinstance(metadata, dict) else {}
    data = payload.get("data")
    if isinstance(data, list):
        return data, metadata_payload
    if isinstance(data, dict) and isinstance(data.get("csv"), list):
        return data["csv"], metadata_payload
    for key in ("records", "results"):
        if isinstance(payload.get(key), list):
            return payload[key], metadata_payload
    raise CorpusIngestError(
        f"Invalid raw batch at {file_path}: no record list found under 'data', "
        "'data.csv', 'records', or 'results'. Wrap records in a 'data' list."
    )


def _build_metadata(file_path: Path, payload: Mapping[str, Any]) -> SourceMetadata:
    defaults = _default_metadata(file_path)
    name = _optional_text(payload.get("name")) or _optional_text(payload.get("source"))
    return SourceMetadata(
        name=name or defaults.name,
        organization=_optional_text(payload.get("organization")) or name or defaults.organization,
        url=_optional_text(payload.get("url")) or _optional_text(payload.get("source_url")),
        title=_optional_text(payload.get("title")),
        description=_optional_text(payload.get("description")),
        fetched_at=(
            _optional_text(payload.get("fetched_at")) or _optional_text(payload.get("fetchedAt"))
        ),
    )


def _default_metadata(file_path: Path) -> SourceMetadata:
    return SourceMetadata(name=file_path.stem, organization=file_path.stem)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_supported_file(file_path: Path) -> bool:
    """Return whether a local file extension is supported."""
    return file_path.suffix.lower() in SUPPORTED_RAW_EXTENSIONS
