"""
Rotation orchestrator.

Runs the full retention pipeline for every configured log directory:
scan and classify, age retention per level, then size eviction. Directories
are processed one after another and a failure in one does not stop the rest.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from logsweep.config import RotationConfig
from logsweep.retention.compress import Compressor, gzip_file
from logsweep.retention.errors import RotationError
from logsweep.retention.eviction import enforce_size_budget
from logsweep.retention.files import LEVEL_ORDER
from logsweep.retention.policy import apply_retention
from logsweep.retention.scanner import classify, scan


@dataclass
class RotationResult:
    """
    Result of rotating one log directory.

    Attributes:
        log_name: Configured log name
        directory: Directory that was processed
        dry_run: Whether this was a dry run
        compressed: Paths of .gz files produced
        deleted_by_age: Files removed by age retention
        deleted_by_size: Files removed to satisfy the size budget
        compression_failures: Files the compressor could not handle
        total_size_bytes: Directory size after the run
        duration_seconds: Time taken
        errors: Error messages; a non-empty list means the run was aborted
    """

    log_name: str
    directory: Path
    dry_run: bool = False
    compressed: list[Path] = field(default_factory=list)
    deleted_by_age: list[Path] = field(default_factory=list)
    deleted_by_size: list[Path] = field(default_factory=list)
    compression_failures: list[Path] = field(default_factory=list)
    total_size_bytes: int = 0
    duration_seconds: float = 0.0
    errors: list[str] | None = None

    def __post_init__(self):
        """Initialize errors list if None."""
        if self.errors is None:
            self.errors = []

    @property
    def success(self) -> bool:
        """Check if the directory was processed to completion."""
        return len(self.errors) == 0

    @property
    def deleted(self) -> list[Path]:
        return self.deleted_by_age + self.deleted_by_size

    def summary(self) -> str:
        """One-line human readable summary."""
        status = "ok" if self.success else f"aborted ({self.errors[0]})"
        prefix = "[dry run] " if self.dry_run else ""
        return (
            f"{prefix}{self.log_name}: compressed={len(self.compressed)}, "
            f"deleted_by_age={len(self.deleted_by_age)}, "
            f"deleted_by_size={len(self.deleted_by_size)}, "
            f"total_size={self.total_size_bytes} bytes, {status}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "log_name": self.log_name,
            "directory": str(self.directory),
            "dry_run": self.dry_run,
            "compressed": [str(p) for p in self.compressed],
            "deleted_by_age": [str(p) for p in self.deleted_by_age],
            "deleted_by_size": [str(p) for p in self.deleted_by_size],
            "compression_failures": [str(p) for p in self.compression_failures],
            "total_size_bytes": self.total_size_bytes,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
        }


class LogRotator:
    """
    Applies compression, age retention and the size budget to log directories.
    """

    def __init__(
        self,
        config: RotationConfig,
        compress: Compressor = gzip_file,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the rotator.

        Args:
            config: Run configuration
            compress: Compressor for uncompressed files (defaults to external gzip)
            clock: Source of the reference time for age retention
        """
        self._config = config
        self._policy = config.policy()
        self._compress = compress
        self._clock = clock

    def run(self) -> dict[str, RotationResult]:
        """
        Rotate every configured log directory.

        Returns:
            Dictionary mapping log name to RotationResult
        """
        logger.info(
            f"Running rotation (dry_run={self._config.dry_run}) for "
            f"{len(self._config.log_names)} log directories under {self._config.base_dir}"
        )

        results = {}
        for log_name, directory in self._config.directories():
            result = self.rotate(directory, log_name=log_name)
            results[log_name] = result
            logger.info(f"Cleanup of '{log_name}' finished: {result.summary()}")

        return results

    def rotate(self, directory: str | Path, log_name: str | None = None) -> RotationResult:
        """
        Run the retention pipeline on one directory.

        Errors are logged and recorded on the result rather than raised.

        Args:
            directory: Log directory
            log_name: Name to report (defaults to the directory name)

        Returns:
            RotationResult for the directory
        """
        directory = Path(directory)
        result = RotationResult(
            log_name=log_name or directory.name,
            directory=directory,
            dry_run=self._config.dry_run,
        )

        start_time = time.time()
        try:
            self._rotate(directory, result)
        except RotationError as e:
            logger.error(f"Error rotating {directory}: {e}")
            result.errors.append(str(e))
        result.duration_seconds = time.time() - start_time

        return result

    def _rotate(self, directory: Path, result: RotationResult) -> None:
        dry_run = self._config.dry_run
        now = self._clock()

        by_level = classify(scan(directory).files)

        for level in LEVEL_ORDER:
            files = by_level.get(level)
            if not files:
                continue

            outcome = apply_retention(
                level,
                files,
                self._policy.max_age_for(level),
                now=now,
                compress=self._compress,
                dry_run=dry_run,
            )
            result.compressed.extend(outcome.compressed)
            result.compression_failures.extend(outcome.compression_failures)
            result.deleted_by_age.extend(outcome.deleted)

        eviction = enforce_size_budget(
            directory,
            self._config.max_total_bytes,
            dry_run=dry_run,
            deleted=result.deleted_by_age,
            compressed=result.compressed,
        )
        result.deleted_by_size.extend(eviction.deleted)
        result.total_size_bytes = eviction.total_size_bytes
