"""
Tests for age-based retention.

Tests cover:
- RetentionPolicy tiers and validation
- Boundary file retention and deletion of older files
- Compression of retained files, including compressor failures
- No-op cases (nothing expired, boundary is the oldest file)
- Dry-run mode and deletion failures
"""

from datetime import datetime, timedelta

import pytest

from logsweep.retention.errors import DeletionError
from logsweep.retention.files import LogLevel
from logsweep.retention.policy import (
    DEFAULT_ERROR_MAX_AGE,
    DEFAULT_INFO_MAX_AGE,
    DEFAULT_POLICY,
    RetentionPolicy,
    apply_retention,
)
from logsweep.retention.scanner import scan
from tests.fixtures import FakeCompressor, glog_name

NOW = datetime(2015, 3, 30, 13, 10, 0)
THIRTY_DAYS = timedelta(hours=720)

EXAMPLE_DATES = [
    datetime(2015, 3, 30, 13, 8, 0),
    datetime(2015, 3, 25),
    datetime(2015, 3, 20),
    datetime(2015, 3, 15),
    datetime(2015, 3, 10),
    datetime(2015, 3, 5),
    datetime(2015, 3, 1),
    datetime(2015, 2, 27),  # first file past the 30 day cutoff
    datetime(2015, 2, 15),
    datetime(2015, 2, 1),
    datetime(2015, 1, 1),
]


@pytest.fixture
def info_files(log_dir, make_log):
    """Eleven INFO files, newest first, one per EXAMPLE_DATES entry."""
    for i, created in enumerate(EXAMPLE_DATES):
        make_log(glog_name("INFO", created, pid=100 + i))
    return scan(log_dir).files


class TestRetentionPolicy:
    """Tests for RetentionPolicy."""

    def test_defaults(self):
        """INFO keeps two months, the other levels six."""
        assert DEFAULT_POLICY.max_age_for(LogLevel.INFO) == DEFAULT_INFO_MAX_AGE
        assert DEFAULT_POLICY.max_age_for(LogLevel.WARNING) == DEFAULT_ERROR_MAX_AGE
        assert DEFAULT_POLICY.max_age_for(LogLevel.ERROR) == DEFAULT_ERROR_MAX_AGE
        assert DEFAULT_POLICY.max_age_for(LogLevel.FATAL) == DEFAULT_ERROR_MAX_AGE

    def test_warning_tier_is_independent(self):
        policy = RetentionPolicy(
            info_max_age=timedelta(days=1),
            warning_max_age=timedelta(days=7),
            error_max_age=timedelta(days=30),
        )

        assert policy.max_age_for(LogLevel.INFO) == timedelta(days=1)
        assert policy.max_age_for(LogLevel.WARNING) == timedelta(days=7)
        assert policy.max_age_for(LogLevel.ERROR) == timedelta(days=30)
        assert policy.max_age_for(LogLevel.FATAL) == timedelta(days=30)

    def test_rejects_non_positive_age(self):
        with pytest.raises(ValueError):
            RetentionPolicy(info_max_age=timedelta(0))


class TestApplyRetention:
    """Tests for apply_retention()."""

    def test_thirty_day_example(self, log_dir, info_files, fake_gzip):
        """Files older than the boundary go, everything else is kept and compressed."""
        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )

        remaining = sorted(p.name for p in log_dir.iterdir())
        expected_kept = sorted(
            glog_name("INFO", created, pid=100 + i) + ".gz"
            for i, created in enumerate(EXAMPLE_DATES[:8])
        )
        assert remaining == expected_kept
        assert len(outcome.deleted) == 3
        assert len(outcome.retained) == 8
        assert all(f.compressed for f in outcome.retained)

    def test_boundary_file_is_retained(self, info_files, fake_gzip):
        """The first file past the cutoff triggers deletion but is itself kept."""
        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )

        assert outcome.boundary is not None
        assert outcome.boundary.created_at == datetime(2015, 2, 27)
        assert outcome.boundary.path.exists()
        assert outcome.retained[-1] == outcome.boundary

    def test_deleted_files_are_strictly_older_than_boundary(self, info_files, fake_gzip):
        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )

        deleted = [f for f in info_files if f.path in outcome.deleted]
        assert all(f.created_at < outcome.boundary.created_at for f in deleted)
        assert all(not p.exists() for p in outcome.deleted)

    def test_expired_files_are_not_compressed(self, info_files, fake_gzip):
        """The walk stops at the boundary; older files are deleted without gzip."""
        apply_retention(LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip)

        assert len(fake_gzip.calls) == 8

    def test_nothing_expired(self, log_dir, info_files, fake_gzip):
        """With a long retention nothing is deleted but everything is compressed."""
        outcome = apply_retention(
            LogLevel.INFO, info_files, timedelta(days=365), now=NOW, compress=fake_gzip
        )

        assert outcome.deleted == []
        assert outcome.boundary is None
        assert len(list(log_dir.iterdir())) == 11
        assert all(p.name.endswith(".gz") for p in log_dir.iterdir())

    def test_boundary_is_oldest_file(self, log_dir, info_files, fake_gzip):
        """When only the oldest file is past the cutoff there is nothing to delete."""
        age = NOW - datetime(2015, 1, 15)

        outcome = apply_retention(LogLevel.INFO, info_files, age, now=NOW, compress=fake_gzip)

        assert outcome.deleted == []
        assert outcome.boundary.created_at == datetime(2015, 1, 1)
        assert len(list(log_dir.iterdir())) == 11

    def test_newest_file_is_boundary(self, log_dir, info_files, fake_gzip):
        """If every file is expired the newest one is kept and the rest deleted."""
        outcome = apply_retention(
            LogLevel.INFO, info_files, timedelta(minutes=1), now=NOW, compress=fake_gzip
        )

        assert len(outcome.retained) == 1
        assert len(outcome.deleted) == 10
        assert [p.name for p in log_dir.iterdir()] == [
            glog_name("INFO", EXAMPLE_DATES[0], pid=100) + ".gz"
        ]

    def test_already_compressed_files_are_left_alone(self, log_dir, make_log, fake_gzip):
        make_log(glog_name("ERROR", datetime(2015, 3, 29)) + ".gz")
        make_log(glog_name("ERROR", datetime(2015, 3, 28), pid=2))
        files = scan(log_dir).files

        outcome = apply_retention(
            LogLevel.ERROR, files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )

        assert [p.name for p in fake_gzip.calls] == [glog_name("ERROR", datetime(2015, 3, 28), pid=2)]
        assert len(outcome.compressed) == 1

    def test_compression_failure_is_not_fatal(self, log_dir, info_files, log_messages):
        """A failing file stays uncompressed and the walk moves on."""
        failing = glog_name("INFO", EXAMPLE_DATES[2], pid=102)
        compressor = FakeCompressor(fail_on={failing})

        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=compressor
        )

        assert (log_dir / failing).exists()
        assert outcome.compression_failures == [log_dir / failing]
        assert len(outcome.compressed) == 7
        assert len(outcome.deleted) == 3
        assert any("Compression failed" in m for m in log_messages)

    def test_failed_file_is_retained_uncompressed(self, info_files):
        failing = glog_name("INFO", EXAMPLE_DATES[0], pid=100)
        compressor = FakeCompressor(fail_on={failing})

        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=compressor
        )

        assert outcome.retained[0].compressed is False
        assert outcome.retained[0].path.name == failing

    def test_failed_boundary_candidate_moves_boundary(self, log_dir, info_files):
        """A first expired file that fails to compress is kept and the next older one bounds."""
        failing = glog_name("INFO", EXAMPLE_DATES[7], pid=107)
        compressor = FakeCompressor(fail_on={failing})

        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=compressor
        )

        assert (log_dir / failing).exists()
        assert outcome.boundary.created_at == EXAMPLE_DATES[8]
        assert [p.name for p in outcome.deleted] == [
            glog_name("INFO", EXAMPLE_DATES[9], pid=109),
            glog_name("INFO", EXAMPLE_DATES[10], pid=110),
        ]
        assert len(outcome.retained) == 9

    def test_empty_level(self, fake_gzip):
        outcome = apply_retention(LogLevel.FATAL, [], THIRTY_DAYS, now=NOW, compress=fake_gzip)

        assert outcome.retained == []
        assert outcome.deleted == []

    def test_dry_run_changes_nothing(self, log_dir, info_files, fake_gzip):
        before = sorted(p.name for p in log_dir.iterdir())

        outcome = apply_retention(
            LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip, dry_run=True
        )

        assert sorted(p.name for p in log_dir.iterdir()) == before
        assert fake_gzip.calls == []
        assert len(outcome.compressed) == 8
        assert len(outcome.deleted) == 3

    def test_deletion_failure_raises(self, info_files, fake_gzip):
        """A file that cannot be removed aborts the pass."""
        info_files[-1].path.unlink()

        with pytest.raises(DeletionError) as exc_info:
            apply_retention(
                LogLevel.INFO, info_files, THIRTY_DAYS, now=NOW, compress=fake_gzip
            )

        assert exc_info.value.path == info_files[-1].path

    def test_second_pass_is_a_no_op(self, log_dir, fake_gzip):
        """Re-running on the retained files compresses and deletes nothing."""
        for i, created in enumerate(EXAMPLE_DATES):
            (log_dir / glog_name("INFO", created, pid=100 + i)).write_bytes(b"x")
        apply_retention(
            LogLevel.INFO, scan(log_dir).files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )
        fake_gzip.calls.clear()

        outcome = apply_retention(
            LogLevel.INFO, scan(log_dir).files, THIRTY_DAYS, now=NOW, compress=fake_gzip
        )

        assert fake_gzip.calls == []
        assert outcome.deleted == []
