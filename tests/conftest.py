"""
Shared fixtures for logsweep tests.

Log directories are built under tmp_path with glog-style names. Engine tests
use a fake compressor that renames files to .gz so they do not depend on the
gzip binary.
"""

from pathlib import Path

import pytest
from loguru import logger

from tests.fixtures import FakeCompressor


@pytest.fixture
def log_dir(tmp_path):
    """Empty log directory."""
    path = tmp_path / "reg"
    path.mkdir()
    return path


@pytest.fixture
def make_log(log_dir):
    """Factory writing a log file of a given size into log_dir."""

    def _make(name: str, size: int = 10) -> Path:
        path = log_dir / name
        path.write_bytes(b"x" * size)
        return path

    return _make


@pytest.fixture
def fake_gzip():
    """Fake compressor that always succeeds."""
    return FakeCompressor()


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
