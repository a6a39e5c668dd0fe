"""
Age-based retention policy for glog files.

Each level keeps its files for a configurable age. The walk compresses
everything it passes and stops at the first file past the age limit: that
boundary file is kept, everything older than it is deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger

from logsweep.retention.compress import Compressor, gzip_file
from logsweep.retention.errors import CompressionError, DeletionError
from logsweep.retention.files import LogFile, LogLevel

DEFAULT_INFO_MAX_AGE = timedelta(days=2 * 30)
DEFAULT_ERROR_MAX_AGE = timedelta(days=6 * 30)


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Maximum file age per level.

    WARNING has its own tier; ERROR and FATAL share one.
    """

    info_max_age: timedelta = DEFAULT_INFO_MAX_AGE
    warning_max_age: timedelta = DEFAULT_ERROR_MAX_AGE
    error_max_age: timedelta = DEFAULT_ERROR_MAX_AGE

    def __post_init__(self) -> None:
        for name in ("info_max_age", "warning_max_age", "error_max_age"):
            if getattr(self, name) <= timedelta(0):
                raise ValueError(f"{name} must be positive")

    def max_age_for(self, level: LogLevel) -> timedelta:
        """Retention age for a level."""
        if level == LogLevel.INFO:
            return self.info_max_age
        if level == LogLevel.WARNING:
            return self.warning_max_age
        return self.error_max_age


DEFAULT_POLICY = RetentionPolicy()


@dataclass
class LevelRetention:
    """
    Outcome of one retention pass over a level.

    Attributes:
        level: Level processed
        retained: Files kept, newest first, with post-compression paths
        compressed: Paths of the .gz files produced (or that would be, in dry run)
        compression_failures: Files the compressor could not handle
        deleted: Files removed (or that would be, in dry run)
        boundary: The newest file past the age limit, if any
    """

    level: LogLevel
    retained: list[LogFile] = field(default_factory=list)
    compressed: list[Path] = field(default_factory=list)
    compression_failures: list[Path] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    boundary: LogFile | None = None


def delete_log_file(log_file: LogFile, dry_run: bool = False) -> None:
    """
    Remove a log file.

    Raises:
        DeletionError: If the file cannot be removed
    """
    if dry_run:
        logger.debug(f"[dry run] would delete {log_file}")
        return

    logger.debug(f"delete {log_file}")
    try:
        log_file.path.unlink()
    except OSError as e:
        raise DeletionError(f"Cannot delete {log_file}: {e}", path=log_file.path) from e


def apply_retention(
    level: LogLevel,
    files: list[LogFile],
    max_age: timedelta,
    now: datetime | None = None,
    compress: Compressor = gzip_file,
    dry_run: bool = False,
) -> LevelRetention:
    """
    Compress and age out the files of one level.

    Args:
        level: Level being processed
        files: The level's files, newest first
        max_age: Files created before ``now - max_age`` are past the limit
        now: Reference time (defaults to the current local time)
        compress: Compressor used for uncompressed files
        dry_run: If True, only report what would be done

    Returns:
        LevelRetention describing the pass

    Raises:
        DeletionError: If an expired file cannot be removed
    """
    now = now or datetime.now()
    cutoff = now - max_age
    outcome = LevelRetention(level=level)

    logger.debug(f"Cleaning {level.value}: {len(files)} files, cutoff {cutoff:%Y-%m-%d %H:%M:%S}")

    cut_index: int | None = None
    for i, log_file in enumerate(files):
        current = log_file
        if not log_file.compressed:
            if dry_run:
                logger.debug(f"[dry run] would gzip {log_file}")
                current = log_file.as_compressed()
                outcome.compressed.append(current.path)
            else:
                try:
                    compress(log_file.path)
                except CompressionError as e:
                    # no cutoff check; the next older file can become the boundary
                    logger.warning(f"Compression failed, leaving file as is: {e}")
                    outcome.compression_failures.append(log_file.path)
                    outcome.retained.append(log_file)
                    continue
                current = log_file.as_compressed()
                outcome.compressed.append(current.path)

        outcome.retained.append(current)

        if log_file.created_at < cutoff:
            cut_index = i
            outcome.boundary = current
            break

    if cut_index is None or cut_index + 1 == len(files):
        logger.debug(f"Nothing to delete for {level.value}")
        return outcome

    for log_file in files[cut_index + 1:]:
        delete_log_file(log_file, dry_run=dry_run)
        outcome.deleted.append(log_file.path)

    logger.info(
        f"{level.value}: kept {len(outcome.retained)}, deleted {len(outcome.deleted)} "
        f"older than {outcome.boundary}"
    )
    return outcome
