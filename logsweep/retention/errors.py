"""
Error taxonomy for the retention engine.

Every failure is local to one file or one directory; the orchestrator catches
RotationError per directory and moves on to the next one.
"""

from __future__ import annotations

from pathlib import Path


class RotationError(Exception):
    """Base class for retention engine failures."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ScanError(RotationError):
    """The directory could not be listed."""


class StatError(RotationError):
    """A single entry could not be stat'ed (usually deleted mid-scan)."""


class CompressionError(RotationError):
    """The compressor failed; the original file is left in place."""


class DeletionError(RotationError):
    """A file could not be removed."""
