# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for log text suppliers."""

import os
import unittest
from datetime import datetime, timedelta, timezone

from buildtime.scan.supplier import (
    DerivedDataSupplier,
    is_fresh,
    LogFileSupplier,
    StaticTextSupplier,
)
from tests.test_base import BaseBuildtimeTest, SAMPLE_LOG


def _set_mtime(path, when: datetime) -> None:
    timestamp = when.timestamp()
    os.utime(path, (timestamp, timestamp))


class StaticTextSupplierTest(unittest.TestCase):
    """Tests for StaticTextSupplier."""

    def test_returns_text(self):
        self.assertEqual(StaticTextSupplier("abc").log_text("App"), "abc")

    def test_returns_none(self):
        self.assertIsNone(StaticTextSupplier(None).log_text("App"))


class IsFreshTest(BaseBuildtimeTest):
    """Tests for is_fresh function."""

    def test_no_completion_date(self):
        path = self.create_temp_file("build.log", "")
        self.assertTrue(is_fresh(path, None))

    def test_newer_and_older(self):
        path = self.create_temp_file("build.log", "")
        written = datetime(2024, 5, 1, 12, 0, 0)
        _set_mtime(path, written)

        self.assertTrue(is_fresh(path, written - timedelta(minutes=1)))
        self.assertFalse(is_fresh(path, written + timedelta(minutes=1)))

    def test_timezone_aware_date(self):
        """Test aware completion dates are compared in UTC."""
        path = self.create_temp_file("build.log", "")
        written = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        _set_mtime(path, written)

        self.assertTrue(is_fresh(path, written - timedelta(seconds=5)))
        self.assertFalse(is_fresh(path, written + timedelta(seconds=5)))


class LogFileSupplierTest(BaseBuildtimeTest):
    """Tests for LogFileSupplier."""

    def test_reads_plain_log(self):
        path = self.create_temp_file("build.log", SAMPLE_LOG)
        self.assertEqual(LogFileSupplier(path).log_text("App"), SAMPLE_LOG)

    def test_reads_activity_log(self):
        path = self.create_gzip_file("build.xcactivitylog", SAMPLE_LOG)
        self.assertEqual(LogFileSupplier(path).log_text("App"), SAMPLE_LOG)

    def test_stale_log_gives_none(self):
        path = self.create_temp_file("build.log", SAMPLE_LOG)
        _set_mtime(path, datetime(2024, 5, 1, 12, 0, 0))

        supplier = LogFileSupplier(path)
        self.assertIsNone(supplier.log_text("App", datetime(2024, 5, 2)))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            LogFileSupplier(self.temp_dir / "missing.log")


class DerivedDataSupplierTest(BaseBuildtimeTest):
    """Tests for DerivedDataSupplier."""

    def _add_log(self, product_dir: str, name: str, content: str, when: datetime):
        path = self.create_gzip_file(
            f"DerivedData/{product_dir}/Logs/Build/{name}.xcactivitylog", content
        )
        _set_mtime(path, when)
        return path

    def setUp(self):
        super().setUp()
        self.older = self._add_log(
            "MyApp-abc123", "OLD", "old log\r", datetime(2024, 5, 1, 10, 0)
        )
        self.newer = self._add_log(
            "MyApp-abc123", "NEW", SAMPLE_LOG, datetime(2024, 5, 1, 11, 0)
        )
        self._add_log("Other-def456", "X", "other\r", datetime(2024, 5, 1, 12, 0))
        self.supplier = DerivedDataSupplier(self.temp_dir / "DerivedData")

    def test_find_build_logs_newest_first(self):
        logs = self.supplier.find_build_logs("MyApp")
        self.assertEqual(logs, [self.newer, self.older])

    def test_log_text_uses_latest(self):
        self.assertEqual(self.supplier.log_text("MyApp"), SAMPLE_LOG)

    def test_unknown_product(self):
        self.assertIsNone(self.supplier.log_text("Missing"))

    def test_latest_log_too_old(self):
        self.assertIsNone(self.supplier.log_text("MyApp", datetime(2024, 5, 1, 11, 30)))

    def test_completion_date_before_latest(self):
        path = self.supplier.latest_build_log("MyApp", datetime(2024, 5, 1, 10, 30))
        self.assertEqual(path, self.newer)

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            DerivedDataSupplier(self.temp_dir / "nope")


if __name__ == "__main__":
    unittest.main()
