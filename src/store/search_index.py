"""Full-corpus search index.

This module builds a compact text index over all committed records and
answers free-text queries with substring matches first, then fuzzy
token matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, Sequence

import Levenshtein

from core.constants import (
    DEFAULT_SEARCH_LIMIT,
    INDEX_FILE_NAME,
    SEARCH_FUZZY_THRESHOLD,
    SEARCH_INDEX_FILE_NAME,
    SEARCH_TEXT_MAX_CHARS,
    SUPPORTED_CATEGORIES,
)
from core.errors import CorpusStoreError
from core.logging_config import get_logger
from core.types import UnifiedRecord
from store.chunk_reader import iter_records, open_index

_LOGGER = get_logger(__name__)

_TEXT_ATTRIBUTES = (
    "event_type",
    "indicator_name",
    "description",
    "actor1",
    "actor2",
    "structure_type",
    "status",
    "camp_name",
    "facility_type",
    "sector",
    "assistance_type",
)
_TITLE_ATTRIBUTES = ("indicator_name", "event_type", "camp_name", "structure_type", "sector")


@dataclass(frozen=True)
class SearchPreview:
    """Display fields shown next to a search hit."""

    title: str
    date: str | None
    location: str | None


@dataclass(frozen=True)
class SearchEntry:
    """One searchable record reference."""

    record_id: str
    category: str
    text: str
    preview: SearchPreview


@dataclass(frozen=True)
class SearchIndex:
    """Persisted search entries with their build timestamp."""

    generated_at: datetime
    entries: tuple[SearchEntry, ...]


def build_search_index(
    unified_root: Path,
    categories: Sequence[str] = SUPPORTED_CATEGORIES,
) -> SearchIndex:
    """Build a search index over every committed category.

    Categories without a readable index are skipped with a warning.

    Args:
        unified_root: Root directory of the unified corpus.
        categories: Categories to index.

    Returns:
        Search index with one entry per record.
    """
    entries: list[SearchEntry] = []
    for category in categories:
        index_path = unified_root / category / INDEX_FILE_NAME
        if not index_path.exists():
            continue
        try:
            chunk_index = open_index(index_path)
            entries.extend(build_entry(record) for record in iter_records(chunk_index))
        except CorpusStoreError as error:
            _LOGGER.warning("search_index_category_skipped", category=category, error=str(error))
    return SearchIndex(generated_at=datetime.now(timezone.utc), entries=tuple(entries))


def build_entry(record: UnifiedRecord) -> SearchEntry:
    """Build the search entry of one record."""
    tokens = [record.category, record.location.name, record.location.region]
    governorate = record.location.admin_levels.get("level1")
    if governorate:
        tokens.append(governorate)
    tokens.extend(
        record.attributes[name] for name in _TEXT_ATTRIBUTES if record.attributes.get(name)
    )
    tokens.append(record.source.name)
    text = " ".join(_dedupe(tokens)).lower()[:SEARCH_TEXT_MAX_CHARS]
    title = next(
        (record.attributes[name] for name in _TITLE_ATTRIBUTES if record.attributes.get(name)),
        f"{record.category.title()} report",
    )
    return SearchEntry(
        record_id=record.record_id,
        category=record.category,
        text=text,
        preview=SearchPreview(
            title=title,
            date=record.date.isoformat(),
            location=record.location.name,
        ),
    )


def write_search_index(unified_root: Path, search_index: SearchIndex) -> Path:
    """Persist the index as ``search-index.json``.

    Raises:
        CorpusStoreError: If the file cannot be written.
    """
    index_path = unified_root / SEARCH_INDEX_FILE_NAME
    payload = {
        "generated_at": search_index.generated_at.isoformat(),
        "total_entries": len(search_index.entries),
        "entries": [_entry_to_payload(entry) for entry in search_index.entries],
    }
    try:
        unified_root.mkdir(parents=True, exist_ok=True)
        index_path.write_text(json.dumps(payload) + "\n", encoding="utf-8")
    except OSError as error:
        raise CorpusStoreError(
            f"Failed to write search index at {index_path}: {error}. "
            "Check write permissions and retry."
        ) from error
    _LOGGER.info(
        "search_index_written",
        index_path=str(index_path),
        entry_count=len(search_index.entries),
    )
    return index_path


def load_search_index(index_path: Path) -> SearchIndex:
    """Load a persisted search index.

    Raises:
        CorpusStoreError: If the file is missing or invalid.
    """
    if not index_path.exists():
        raise CorpusStoreError(
            f"Search index not found at {index_path}. Run 'humcorpus search-index' first."
        )
    try:
        payload = json.loads(index_path.read_text(encoding="utf-8"))
        return SearchIndex(
            generated_at=datetime.fromisoformat(str(payload["generated_at"])),
            entries=tuple(_entry_from_payload(item) for item in payload["entries"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as error:
        raise CorpusStoreError(
            f"Failed to parse search index at {index_path}: {error}. "
            "Rebuild it with 'humcorpus search-index'."
        ) from error


def search(
    search_index: SearchIndex,
    query: str,
    category: str | None = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[SearchEntry]:
    """Search entries by free text.

    Entries containing the whole query come first, in index order; then
    entries where every query token fuzzily matches a text token, best
    ratio first.

    Args:
        search_index: Loaded search index.
        query: Free-text query.
        category: Optional category filter.
        limit: Maximum number of results.

    Returns:
        Ranked matching entries.
    """
    normalized_query = " ".join(query.lower().split())
    if not normalized_query or limit < 1:
        return []
    query_tokens = normalized_query.split()
    exact: list[SearchEntry] = []
    fuzzy: list[tuple[float, int, SearchEntry]] = []
    for position, entry in enumerate(search_index.entries):
        if category is not None and entry.category != category:
            continue
        if normalized_query in entry.text:
            exact.append(entry)
            continue
        ratio = _fuzzy_ratio(query_tokens, entry.text.split())
        if ratio >= SEARCH_FUZZY_THRESHOLD:
            fuzzy.append((-ratio, position, entry))
    fuzzy.sort(key=lambda item: (item[0], item[1]))
    ranked = exact + [entry for _, _, entry in fuzzy]
    return ranked[:limit]


def _fuzzy_ratio(query_tokens: list[str], text_tokens: list[str]) -> float:
    """Return the weakest best Levenshtein ratio over all query tokens."""
    if not text_tokens:
        return 0.0
    weakest = 1.0
    for query_token in query_tokens:
        best = max(Levenshtein.ratio(query_token, token) for token in text_tokens)
        weakest = min(weakest, best)
    return weakest


def _dedupe(tokens: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for token in tokens:
        key = token.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(token)
    return unique


def _entry_to_payload(entry: SearchEntry) -> dict[str, object]:
    return {
        "id": entry.record_id,
        "category": entry.category,
        "text": entry.text,
        "preview": {
            "title": entry.preview.title,
            "date": entry.preview.date,
            "location": entry.preview.location,
        },
    }


def _entry_from_payload(payload: dict[str, Any]) -> SearchEntry:
    preview = payload.get("preview") or {}
    return SearchEntry(
        record_id=str(payload["id"]),
        category=str(payload["category"]),
        text=str(payload["text"]),
        preview=SearchPreview(
            title=str(preview.get("title", "")),
            date=preview.get("date"),
            location=preview.get("location"),
        ),
    )
