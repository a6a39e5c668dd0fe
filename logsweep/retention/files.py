"""
Log file records parsed from glog-style filenames.

glog names its files ``<program>.<host>.<user>.log.<LEVEL>.<YYYYMMDD-HHMMSS>.<pid>``,
for example ``one.rz-reqmngt1-eu.root.log.ERROR.20150320-103857.29198``. Once
compressed the same name carries a trailing ``.gz``. The level and timestamp
are read from the name only; file contents are never opened.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path

from loguru import logger

GZIP_SUFFIX = ".gz"

# Zero timestamp for names whose date field does not parse; sorts as oldest.
UNKNOWN_CREATION = datetime.min

_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class LogLevel(str, Enum):
    """Severity levels glog encodes in filenames."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


# Fixed processing order for per-level retention.
LEVEL_ORDER: tuple[LogLevel, ...] = (
    LogLevel.INFO,
    LogLevel.WARNING,
    LogLevel.ERROR,
    LogLevel.FATAL,
)

_LOG_NAME_RE = re.compile(
    r"^(?P<prefix>.+)\."
    r"(?P<level>INFO|WARNING|ERROR|FATAL)\."
    r"(?P<stamp>\d{8}-\d{6})\."
    r"(?P<pid>\d+)"
    r"(?P<gz>\.gz)?$"
)


@dataclass(frozen=True)
class LogFile:
    """
    One on-disk log file as seen by a single scan.

    Attributes:
        path: Path of the file inside the scanned directory
        level: Severity level from the filename
        created_at: Creation time from the filename (UNKNOWN_CREATION if unparseable)
        size_bytes: File size at scan time
        compressed: Whether the filename carries the .gz suffix
    """

    path: Path
    level: LogLevel
    created_at: datetime
    size_bytes: int = 0
    compressed: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    def compressed_path(self) -> Path:
        """Path the compressor produces for this file."""
        if self.compressed:
            return self.path
        return self.path.with_name(self.path.name + GZIP_SUFFIX)

    def as_compressed(self) -> LogFile:
        """Record for the .gz sibling; level and creation time carry over."""
        return replace(self, path=self.compressed_path(), compressed=True)

    def __str__(self) -> str:
        return str(self.path)


def parse_creation(stamp: str) -> datetime:
    """
    Parse a ``YYYYMMDD-HHMMSS`` field.

    Falls back to the date part alone when the time part is invalid, and to
    UNKNOWN_CREATION when the date is invalid too.
    """
    try:
        return datetime.strptime(stamp, _TIMESTAMP_FORMAT)
    except ValueError:
        pass

    day = stamp.split("-", 1)[0]
    try:
        return datetime.strptime(day, "%Y%m%d")
    except ValueError:
        logger.debug(f"Invalid date in log filename field: {stamp!r}")
        return UNKNOWN_CREATION


def parse_log_file(path: Path, size_bytes: int = 0) -> LogFile | None:
    """
    Build a LogFile from a path.

    Args:
        path: File path; only the final name component is parsed
        size_bytes: Size to record on the returned LogFile

    Returns:
        LogFile, or None if the name is not a glog log filename
    """
    match = _LOG_NAME_RE.match(path.name)
    if match is None:
        return None

    return LogFile(
        path=path,
        level=LogLevel(match.group("level")),
        created_at=parse_creation(match.group("stamp")),
        size_bytes=size_bytes,
        compressed=match.group("gz") is not None,
    )
