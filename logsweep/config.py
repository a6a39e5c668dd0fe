"""
Configuration for logsweep runs.

A RotationConfig is built once at startup (from the environment, then
overridden by CLI flags) and handed to the LogRotator.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from logsweep.retention.eviction import GIB
from logsweep.retention.policy import (
    DEFAULT_ERROR_MAX_AGE,
    DEFAULT_INFO_MAX_AGE,
    RetentionPolicy,
)

DEFAULT_BASE_DIR = Path("/var/log/")
DEFAULT_MAX_TOTAL_BYTES = 2 * GIB

_DURATION_PART_RE = re.compile(r"(?P<value>\d+(?:\.\d+)?)(?P<unit>[smhdw])")
_DURATION_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}

_SIZE_RE = re.compile(r"^(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>[KMGT]?)(?:I?B)?$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "K": 1 << 10, "M": 1 << 20, "G": 1 << 30, "T": 1 << 40}

_TRUTHY = {"1", "true", "yes", "on"}


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as ``720h``, ``30d``, ``1h30m`` or ``2w``.

    Raises:
        ValueError: If the string is not a sequence of <number><unit> parts
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("duration must not be empty")

    total = timedelta(0)
    pos = 0
    for m in _DURATION_PART_RE.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group("value")) * _DURATION_UNITS[m.group("unit")]
        pos = m.end()

    if pos != len(text):
        raise ValueError(
            f"Invalid duration {value!r}: expected e.g. 720h, 30d, 1h30m (units s, m, h, d, w)"
        )
    return total


def parse_size(value: str) -> int:
    """
    Parse a byte size such as ``2G``, ``512M``, ``1.5GiB`` or ``1048576``.

    Suffixes are binary (K = 1024).

    Raises:
        ValueError: If the string is not a size
    """
    m = _SIZE_RE.match(value.strip())
    if not m:
        raise ValueError(f"Invalid size {value!r}: expected e.g. 2G, 512M or a byte count")
    return int(float(m.group("value")) * _SIZE_UNITS[m.group("unit").upper()])


@dataclass
class RotationConfig:
    """
    Settings for a logsweep run.

    Attributes:
        base_dir: Directory holding the per-program log directories
        log_names: Subdirectories of base_dir to process
        info_max_age: Retention age for INFO files
        warning_max_age: Retention age for WARNING files
        error_max_age: Retention age for ERROR and FATAL files
        max_total_bytes: Size budget per directory
        dry_run: Report actions without touching the filesystem
    """

    base_dir: Path = DEFAULT_BASE_DIR
    log_names: list[str] = field(default_factory=list)
    info_max_age: timedelta = DEFAULT_INFO_MAX_AGE
    warning_max_age: timedelta = DEFAULT_ERROR_MAX_AGE
    error_max_age: timedelta = DEFAULT_ERROR_MAX_AGE
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES
    dry_run: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.base_dir = Path(self.base_dir)
        for name in ("info_max_age", "warning_max_age", "error_max_age"):
            if getattr(self, name) <= timedelta(0):
                raise ValueError(f"{name} must be positive")
        if self.max_total_bytes <= 0:
            raise ValueError("max_total_bytes must be positive")

    def policy(self) -> RetentionPolicy:
        """Per-level retention policy for this configuration."""
        return RetentionPolicy(
            info_max_age=self.info_max_age,
            warning_max_age=self.warning_max_age,
            error_max_age=self.error_max_age,
        )

    def directories(self) -> Iterator[tuple[str, Path]]:
        """Yield (log_name, directory) pairs in configured order."""
        for name in self.log_names:
            yield name, self.base_dir / name

    @classmethod
    def from_env(cls, log_names: list[str] | None = None) -> RotationConfig:
        """
        Build a configuration from LOGSWEEP_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        kwargs: dict = {"log_names": list(log_names or [])}

        base_dir = os.getenv("LOGSWEEP_BASE_DIR")
        if base_dir:
            kwargs["base_dir"] = Path(base_dir).expanduser()

        for env_var, key in (
            ("LOGSWEEP_INFO_MAX_AGE", "info_max_age"),
            ("LOGSWEEP_WARNING_MAX_AGE", "warning_max_age"),
            ("LOGSWEEP_ERROR_MAX_AGE", "error_max_age"),
        ):
            value = os.getenv(env_var)
            if value:
                try:
                    kwargs[key] = parse_duration(value)
                except ValueError as e:
                    raise ValueError(f"{env_var}: {e}") from e

        max_size = os.getenv("LOGSWEEP_MAX_SIZE")
        if max_size:
            try:
                kwargs["max_total_bytes"] = parse_size(max_size)
            except ValueError as e:
                raise ValueError(f"LOGSWEEP_MAX_SIZE: {e}") from e

        dry_run = os.getenv("LOGSWEEP_DRY_RUN")
        if dry_run:
            kwargs["dry_run"] = dry_run.strip().lower() in _TRUTHY

        return cls(**kwargs)
