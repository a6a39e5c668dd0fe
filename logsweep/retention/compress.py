"""
Compression collaborator.

Compression is delegated to the system ``gzip`` binary, which replaces
``path`` with ``path.gz`` in place and leaves the original untouched when it
fails. Any callable with the same contract can be handed to the engine.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

from loguru import logger

from logsweep.retention.errors import CompressionError

Compressor = Callable[[Path], None]

GZIP_TIMEOUT_SECONDS = 600


def gzip_file(path: Path) -> None:
    """
    Compress a file in place with the external gzip program.

    Args:
        path: File to compress

    Raises:
        CompressionError: If gzip is missing, times out or exits non-zero
    """
    gzip_bin = shutil.which("gzip")
    if gzip_bin is None:
        raise CompressionError("gzip executable not found on PATH", path=path)

    logger.debug(f"gzipping {path}")
    try:
        result = subprocess.run(
            [gzip_bin, str(path)],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=GZIP_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise CompressionError(f"gzip {path}: {e}", path=path) from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise CompressionError(
            f"gzip {path} exited with {result.returncode}: {stderr}", path=path
        )
