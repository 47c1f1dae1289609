"""Atomic persistence of partition plans.

A category is written into a staging directory (data files first, index
last) and swapped into place only when complete, so readers never see a
partially written partition set.
"""

from __future__ import annotations

import json
from pathlib import Path
import shutil
import uuid

from core.constants import PREVIOUS_DIR_PREFIX, STAGING_DIR_PREFIX
from core.errors import PartitionWriteError
from core.logging_config import get_logger
from core.types import DateRange, UnifiedRecord
from store.partition_index import write_index_file
from store.partitioner import PartitionPlan
from store.record_payload import unified_record_to_payload

_LOGGER = get_logger(__name__)


def write_partition_set(unified_root: Path, plan: PartitionPlan) -> Path:
    """Write a partition plan and swap it into place.

    Args:
        unified_root: Root directory of the unified corpus.
        plan: Planned partition set for one category.

    Returns:
        Committed category directory.

    Raises:
        PartitionWriteError: If any file operation fails. The previously
            committed category directory is left in place.
    """
    category_dir = unified_root / plan.category
    staging_dir = unified_root / f"{STAGING_DIR_PREFIX}{plan.category}-{uuid.uuid4().hex[:8]}"
    previous_dir = unified_root / f"{PREVIOUS_DIR_PREFIX}{plan.category}"
    try:
        unified_root.mkdir(parents=True, exist_ok=True)
        staging_dir.mkdir()
        _write_plan_files(staging_dir, plan)
        write_index_file(staging_dir, plan.index)
        _swap_into_place(staging_dir, category_dir, previous_dir)
    except OSError as error:
        shutil.rmtree(staging_dir, ignore_errors=True)
        _restore_previous(category_dir, previous_dir)
        raise PartitionWriteError(
            f"Failed to write partition set for category '{plan.category}' "
            f"under {unified_root}: {error}. Check write permissions and retry."
        ) from error
    shutil.rmtree(previous_dir, ignore_errors=True)
    _LOGGER.info(
        "partition_set_committed",
        category=plan.category,
        strategy=plan.index.strategy,
        record_count=plan.index.total_records,
        partition_count=len(plan.files),
        category_dir=str(category_dir),
    )
    return category_dir


def _write_plan_files(staging_dir: Path, plan: PartitionPlan) -> None:
    for partition in plan.files:
        descriptor = partition.descriptor
        header: dict[str, object] = {"category": plan.category}
        if descriptor.period is not None:
            header["period"] = descriptor.period
        if descriptor.sequence is not None:
            header["sequence"] = descriptor.sequence
        _write_records_file(
            staging_dir / descriptor.file_name,
            header,
            descriptor.date_range,
            partition.records,
        )
    if plan.recent is not None:
        recent = plan.recent.descriptor
        _write_records_file(
            staging_dir / recent.file_name,
            {"category": plan.category, "window_days": recent.window_days},
            recent.date_range,
            plan.recent.records,
        )


def _write_records_file(
    file_path: Path,
    header: dict[str, object],
    date_range: DateRange,
    records: tuple[UnifiedRecord, ...],
) -> None:
    payload = dict(header)
    payload["record_count"] = len(records)
    payload["date_range"] = {
        "start": date_range.start.isoformat() if date_range.start else None,
        "end": date_range.end.isoformat() if date_range.end else None,
    }
    payload["data"] = [unified_record_to_payload(record) for record in records]
    file_path.write_text(json.dumps(payload, sort_keys=True) + "\n", encoding="utf-8")


def _swap_into_place(staging_dir: Path, category_dir: Path, previous_dir: Path) -> None:
    if previous_dir.exists():
        shutil.rmtree(previous_dir)
    if category_dir.exists():
        category_dir.rename(previous_dir)
    staging_dir.rename(category_dir)


def _restore_previous(category_dir: Path, previous_dir: Path) -> None:
    """Move the previous category directory back if the swap was interrupted."""
    if category_dir.exists() or not previous_dir.exists():
        return
    try:
        previous_dir.rename(category_dir)
    except OSError as error:
        _LOGGER.error(
            "partition_restore_failed",
            category_dir=str(category_dir),
            previous_dir=str(previous_dir),
            error=str(error),
        )
