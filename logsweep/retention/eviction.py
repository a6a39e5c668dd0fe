"""
Size budget enforcement.

Deletes the oldest candidate across all levels, one file at a time, until the
directory is under budget. The directory is re-scanned after every deletion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from loguru import logger

from logsweep.retention.policy import delete_log_file
from logsweep.retention.scanner import scan

GIB = 1 << 30


@dataclass
class EvictionResult:
    """
    Outcome of a size budget pass.

    Attributes:
        deleted: Paths removed oldest first (or that would be, in dry run)
        total_size_bytes: Directory size when the loop stopped
        over_budget: True if the loop ran out of candidates while still over budget
    """

    deleted: list[Path] = field(default_factory=list)
    total_size_bytes: int = 0
    over_budget: bool = False


def enforce_size_budget(
    directory: str | Path,
    max_bytes: int,
    dry_run: bool = False,
    deleted: Iterable[Path] = (),
    compressed: Iterable[Path] = (),
) -> EvictionResult:
    """
    Delete the oldest log files until the directory is below ``max_bytes``.

    Args:
        directory: Log directory
        max_bytes: Size budget; the loop stops once total size is strictly below it
        dry_run: If True, simulate the loop on a single scan
        deleted: Dry run only. Files an earlier pass would already have removed
        compressed: Dry run only. ``.gz`` paths an earlier pass would have produced

    Returns:
        EvictionResult

    Raises:
        ScanError: If the directory cannot be listed
        DeletionError: If a file cannot be removed
    """
    directory = Path(directory)
    logger.debug(f"Applying size limit of {max_bytes} bytes to {directory}")

    if dry_run:
        return _simulate(directory, max_bytes, set(deleted), set(compressed))

    result = EvictionResult()
    while True:
        current = scan(directory)
        result.total_size_bytes = current.total_size_bytes

        if not current.files:
            result.over_budget = current.total_size_bytes >= max_bytes
            logger.debug("Nothing to delete")
            break

        if current.total_size_bytes < max_bytes:
            logger.debug(f"Delete by size not required. Total size: {current.total_size_bytes} bytes")
            break

        oldest = current.files[-1]
        logger.debug(
            f"Delete by size required. Total size: {current.total_size_bytes} bytes, "
            f"deleting oldest file {oldest}"
        )
        delete_log_file(oldest)
        result.deleted.append(oldest.path)

    if result.over_budget:
        logger.warning(
            f"{directory} is still {result.total_size_bytes} bytes "
            f"(budget {max_bytes}) but has no deletable files left"
        )
    return result


def _simulate(
    directory: Path,
    max_bytes: int,
    deleted: set[Path],
    compressed: set[Path],
) -> EvictionResult:
    current = scan(directory)
    result = EvictionResult(total_size_bytes=current.total_size_bytes)

    files = []
    for log_file in current.files:
        if log_file.path in deleted:
            result.total_size_bytes -= log_file.size_bytes
        elif log_file.compressed_path() in compressed:
            files.append(log_file.as_compressed())
        else:
            files.append(log_file)

    while files and result.total_size_bytes >= max_bytes:
        oldest = files.pop()
        delete_log_file(oldest, dry_run=True)
        result.deleted.append(oldest.path)
        result.total_size_bytes -= oldest.size_bytes

    result.over_budget = result.total_size_bytes >= max_bytes
    return result
