"""
logsweep - retention manager for glog-style log directories.

Compresses aging log files, deletes files past a per-level retention age and
evicts the oldest files when a directory grows past its size budget.
"""

try:
    from importlib.metadata import version

    __version__ = version("logsweep")
except Exception:
    __version__ = "0.0.0"  # Fallback for development
