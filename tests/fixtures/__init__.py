"""Test fixtures and log directory builders."""

from tests.fixtures.logs import FakeCompressor, glog_name

__all__ = [
    "FakeCompressor",
    "glog_name",
]
