"""Validation check implementations for a unified corpus.

Each check returns a details string when it passes and raises
CorpusValidationError listing every problem when it fails.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable

from core.config import CorpusConfig
from core.constants import INDEX_FILE_NAME
from core.errors import CorpusStoreError, CorpusValidationError
from core.types import PartitionIndex
from core.validation_types import CategoryRuntime
from store.partition_index import read_index_file, read_partition_file

CheckCallable = Callable[[CategoryRuntime], str]
CheckRow = tuple[str, str, CheckCallable]


def build_category_checks() -> tuple[CheckRow, ...]:
    """Build the ordered checks run for every category.

    The first check loads the index; the rest need it.
    """
    return (
        ("C001", "Index readable", check_index_readable),
        ("C002", "Partition files exist", check_partition_files_exist),
        ("C003", "Record counts match", check_record_counts),
        ("C004", "Dates inside baseline window", check_dates_in_window),
        ("C005", "File sizes within limit", check_file_sizes),
        ("C006", "Records ordered by date", check_record_ordering),
    )


def check_index_readable(runtime: CategoryRuntime) -> str:
    """Load and parse the category index."""
    try:
        runtime.index = read_index_file(runtime.category_dir / INDEX_FILE_NAME)
    except CorpusStoreError as error:
        raise CorpusValidationError([str(error)]) from error
    return f"strategy={runtime.index.strategy} partitions={len(runtime.index.partitions)}"


def check_partition_files_exist(runtime: CategoryRuntime) -> str:
    """Every file listed in the index exists on disk."""
    index = _require_index(runtime)
    missing = [
        f"Partition file {runtime.category_dir / file_name} listed in index is missing."
        for file_name in _listed_files(index)
        if not (runtime.category_dir / file_name).is_file()
    ]
    if missing:
        raise CorpusValidationError(missing)
    return f"files={len(_listed_files(index))}"


def check_record_counts(runtime: CategoryRuntime) -> str:
    """Descriptor counts sum to the total and match each file's records."""
    index = _require_index(runtime)
    problems: list[str] = []
    descriptor_total = sum(descriptor.record_count for descriptor in index.partitions)
    if descriptor_total != index.total_records:
        problems.append(
            f"Index declares {index.total_records} records but partitions sum to "
            f"{descriptor_total}."
        )
    described: list[tuple[str, int]] = [
        (descriptor.file_name, descriptor.record_count) for descriptor in index.partitions
    ]
    if index.recent is not None:
        described.append((index.recent.file_name, index.recent.record_count))
    for file_name, record_count in described:
        partition_path = runtime.category_dir / file_name
        if not partition_path.is_file():
            continue
        stored = len(_read_payloads(partition_path, problems))
        if stored != record_count:
            problems.append(
                f"File {file_name} holds {stored} records but the index declares "
                f"{record_count}."
            )
    if problems:
        raise CorpusValidationError(problems)
    return f"total_records={index.total_records}"


def check_dates_in_window(runtime: CategoryRuntime) -> str:
    """Every record date parses and lies inside the baseline window."""
    config = runtime.config
    problems: list[str] = []
    checked = 0
    for partition_path in _existing_files(runtime):
        for payload in _read_payloads(partition_path, problems):
            checked += 1
            record_date = _parse_record_date(payload.get("date"))
            record_id = payload.get("id", "?")
            if record_date is None:
                problems.append(
                    f"Record {record_id} in {partition_path.name} has invalid date "
                    f"{payload.get('date')!r}."
                )
            elif not _inside_window(record_date, config):
                problems.append(
                    f"Record {record_id} in {partition_path.name} dated {record_date} is "
                    f"outside the baseline window {_window_label(config)}."
                )
    if problems:
        raise CorpusValidationError(problems)
    return f"records={checked} window={_window_label(config)}"


def check_file_sizes(runtime: CategoryRuntime) -> str:
    """No file in the category directory exceeds the size ceiling."""
    limit = runtime.config.max_file_bytes
    problems = [
        f"File {file_path} is {file_path.stat().st_size} bytes, above the limit of {limit}."
        for file_path in sorted(runtime.category_dir.glob("*.json"))
        if file_path.stat().st_size > limit
    ]
    if problems:
        raise CorpusValidationError(problems)
    return f"limit_bytes={limit}"


def check_record_ordering(runtime: CategoryRuntime) -> str:
    """Records inside each file are non-decreasing by date."""
    problems: list[str] = []
    for partition_path in _existing_files(runtime):
        previous: date | None = None
        for position, payload in enumerate(_read_payloads(partition_path, problems)):
            record_date = _parse_record_date(payload.get("date"))
            if record_date is None:
                continue
            if previous is not None and record_date < previous:
                problems.append(
                    f"File {partition_path.name} is out of date order at position {position} "
                    f"({record_date} after {previous})."
                )
                break
            previous = record_date
    if problems:
        raise CorpusValidationError(problems)
    return "ordered"


def check_root_file_sizes(runtime: CategoryRuntime) -> str:
    """Root-level JSON files stay within the size ceiling."""
    unified_root = runtime.category_dir
    config = runtime.config
    if not unified_root.is_dir():
        raise CorpusValidationError([f"Unified root {unified_root} does not exist."])
    limit = config.max_file_bytes
    root_files = sorted(unified_root.glob("*.json"))
    problems = [
        f"File {file_path} is {file_path.stat().st_size} bytes, above the limit of {limit}."
        for file_path in root_files
        if file_path.stat().st_size > limit
    ]
    if problems:
        raise CorpusValidationError(problems)
    return f"files={len(root_files)} limit_bytes={limit}"


def _require_index(runtime: CategoryRuntime) -> PartitionIndex:
    if runtime.index is None:
        raise CorpusValidationError(["Index not loaded."])
    return runtime.index


def _listed_files(index: PartitionIndex) -> list[str]:
    files = [descriptor.file_name for descriptor in index.partitions]
    if index.recent is not None:
        files.append(index.recent.file_name)
    return files


def _existing_files(runtime: CategoryRuntime) -> list[Path]:
    """Return listed files present on disk; missing ones belong to C002."""
    index = _require_index(runtime)
    paths = [runtime.category_dir / file_name for file_name in _listed_files(index)]
    return [path for path in paths if path.is_file()]


def _read_payloads(partition_path: Path, problems: list[str]) -> list[dict[str, object]]:
    try:
        return read_partition_file(partition_path)
    except CorpusStoreError as error:
        problems.append(str(error))
        return []


def _parse_record_date(value: object) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _inside_window(record_date: date, config: CorpusConfig) -> bool:
    if record_date < config.baseline_start:
        return False
    return config.baseline_end is None or record_date <= config.baseline_end


def _window_label(config: CorpusConfig) -> str:
    end = config.baseline_end.isoformat() if config.baseline_end else "open"
    return f"[{config.baseline_start.isoformat()}, {end}]"
