"""
Retention engine for glog log directories.

Usage:
    from logsweep.retention import scan, classify, apply_retention, enforce_size_budget

    result = scan("/var/log/reg")
    for level, files in classify(result.files).items():
        apply_retention(level, files, DEFAULT_POLICY.max_age_for(level))

    enforce_size_budget("/var/log/reg", max_bytes=2 * GIB)

The orchestrator that runs all of this per configured directory lives in
logsweep.retention.rotator.
"""

from logsweep.retention.errors import (
    CompressionError,
    DeletionError,
    RotationError,
    ScanError,
    StatError,
)
from logsweep.retention.eviction import GIB, EvictionResult, enforce_size_budget
from logsweep.retention.files import LEVEL_ORDER, LogFile, LogLevel, parse_log_file
from logsweep.retention.policy import (
    DEFAULT_POLICY,
    LevelRetention,
    RetentionPolicy,
    apply_retention,
)
from logsweep.retention.scanner import ScanResult, classify, scan

__all__ = [
    "CompressionError",
    "DeletionError",
    "RotationError",
    "ScanError",
    "StatError",
    "GIB",
    "EvictionResult",
    "enforce_size_budget",
    "LEVEL_ORDER",
    "LogFile",
    "LogLevel",
    "parse_log_file",
    "DEFAULT_POLICY",
    "LevelRetention",
    "RetentionPolicy",
    "apply_retention",
    "ScanResult",
    "classify",
    "scan",
]
