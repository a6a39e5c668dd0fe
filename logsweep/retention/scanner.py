"""
Directory scanning and level classification.

A scan lists one log directory (non-recursively), sums the size of every
regular file in it and returns the glog files that are safe to touch, newest
first. Files that a symlink points at are the ones glog is currently writing
to, so they are left out of the candidate set along with the symlinks.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from logsweep.retention.errors import ScanError, StatError
from logsweep.retention.files import LogFile, LogLevel, parse_log_file


@dataclass
class ScanResult:
    """
    Result of scanning one directory.

    Attributes:
        directory: Scanned directory
        files: Candidate log files, newest first
        total_size_bytes: Size of every regular file in the directory
        protected: Resolved symlink targets excluded from the candidates
        skipped: Regular files whose names are not glog log names
    """

    directory: Path
    files: list[LogFile] = field(default_factory=list)
    total_size_bytes: int = 0
    protected: set[Path] = field(default_factory=set)
    skipped: list[Path] = field(default_factory=list)

    @property
    def oldest(self) -> LogFile | None:
        return self.files[-1] if self.files else None


def _list_entries(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir())
    except OSError as e:
        raise ScanError(f"Cannot list log directory {directory}: {e}", path=directory) from e


def _stat(entry: Path) -> os.stat_result:
    try:
        return entry.stat()
    except OSError as e:
        raise StatError(f"Cannot stat {entry}: {e}", path=entry) from e


def _resolve(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        # Symlink loop; fall back to a lexical join of the link target.
        if path.is_symlink():
            return Path(os.path.abspath(path.parent / os.readlink(path)))
        return Path(os.path.abspath(path))


def scan(directory: str | Path) -> ScanResult:
    """
    Scan a log directory.

    Args:
        directory: Directory holding glog files

    Returns:
        ScanResult with candidates sorted by creation time, newest first

    Raises:
        ScanError: If the directory cannot be listed
    """
    directory = Path(directory)
    logger.debug(f"Scanning {directory}/*")

    result = ScanResult(directory=directory)
    found: list[tuple[LogFile, Path]] = []

    for entry in _list_entries(directory):
        if entry.is_symlink():
            # Symlink to the file glog is currently writing to.
            target = _resolve(entry)
            result.protected.add(target)
            logger.debug(f"Protecting symlink target {target} ({entry.name})")
            continue

        try:
            st = _stat(entry)
        except StatError as e:
            logger.warning(str(e))
            continue

        if stat.S_ISDIR(st.st_mode):
            continue

        result.total_size_bytes += st.st_size

        log_file = parse_log_file(entry, size_bytes=st.st_size)
        if log_file is None:
            logger.debug(f"Skipping non-log file {entry}")
            result.skipped.append(entry)
            continue

        found.append((log_file, _resolve(entry)))

    candidates = [f for f, resolved in found if resolved not in result.protected]

    # list.sort is stable, so equal timestamps keep listing order
    candidates.sort(key=lambda f: f.created_at, reverse=True)
    result.files = candidates

    logger.debug(
        f"Scanned {directory}: {len(candidates)} candidates, "
        f"{len(result.protected)} protected, {result.total_size_bytes} bytes total"
    )
    return result


def classify(files: list[LogFile]) -> dict[LogLevel, list[LogFile]]:
    """
    Group scanned files by level.

    Args:
        files: Scanner output, newest first

    Returns:
        Mapping of level to that level's files, newest first
    """
    by_level: dict[LogLevel, list[LogFile]] = {}
    for f in files:
        by_level.setdefault(f.level, []).append(f)
    return by_level
