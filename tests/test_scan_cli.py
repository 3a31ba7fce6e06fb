# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Unit tests for scan CLI command.
"""

import csv
import io
import json
import unittest
from pathlib import Path

import zstandard as zstd
from buildtime.cli import main
from buildtime.scan import ScanController, StaticTextSupplier
from click.testing import CliRunner
from tests.test_base import BaseBuildtimeTest, ManualTicker, SAMPLE_LOG, SAMPLE_LOG_RANKED


class TestScanCommand(BaseBuildtimeTest):
    """Tests for scan CLI command."""

    def setUp(self):
        super().setUp()
        self.runner = CliRunner()
        self.log_file = self.create_temp_file("build.log", SAMPLE_LOG)

    def _scan(self, *args):
        return self.runner.invoke(main, ["scan", str(self.log_file), *args])

    def test_scan_help(self):
        """Test scan --help shows usage information."""
        result = self.runner.invoke(main, ["scan", "--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Extract ranked compile timings", result.output)
        self.assertIn("--product", result.output)
        self.assertIn("--threshold", result.output)

    def test_scan_table(self):
        """Test default table output is ranked by time."""
        result = self._scan()
        self.assertEqual(result.exit_code, 0)
        lines = [line for line in result.output.strip().split("\n") if line]
        self.assertEqual(len(lines), 3)  # header + 2 data rows
        self.assertIn("TIME", lines[0])
        self.assertIn("134.7ms", lines[1])
        self.assertIn("Model.swift:12", lines[1])
        self.assertIn("View.swift:8", lines[2])
        self.assertIn("func render( frame: CGRect)", lines[2])

    def test_scan_json(self):
        """Test JSON output matches the expected ranking."""
        result = self._scan("--format", "json")
        self.assertEqual(result.exit_code, 0)
        data = json.loads(result.output)
        self.assertEqual(
            [(d["file_and_line"], d["time"], d["code"]) for d in data],
            [(key, time, code) for key, time, code in SAMPLE_LOG_RANKED],
        )

    def test_scan_csv(self):
        """Test CSV output keeps multiline code in one field."""
        result = self._scan("--format", "csv")
        self.assertEqual(result.exit_code, 0)
        rows = list(csv.reader(io.StringIO(result.output)))
        self.assertEqual(rows[0], ["time", "file_and_line", "code"])
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[2][2], "func render(\n  frame: CGRect)")

    def test_scan_ndjson_details(self):
        """Test NDJSON output with location details."""
        result = self._scan("--format", "ndjson", "--details")
        self.assertEqual(result.exit_code, 0)
        lines = result.output.strip().split("\n")
        self.assertEqual(len(lines), 2)
        record = json.loads(lines[0])
        self.assertEqual(record["filename"], "Model.swift")
        self.assertEqual(record["line"], 12)
        self.assertEqual(record["column"], 10)

    def test_scan_top(self):
        """Test --top limits the number of rows."""
        result = self._scan("--top", "1", "--no-header")
        self.assertEqual(result.exit_code, 0)
        lines = [line for line in result.output.strip().split("\n") if line]
        self.assertEqual(len(lines), 1)
        self.assertIn("Model.swift:12", lines[0])

    def test_scan_threshold(self):
        """Test --threshold overrides the default minimum."""
        result = self._scan("--threshold", "100", "--format", "json")
        self.assertEqual(result.exit_code, 0)
        data = json.loads(result.output)
        self.assertEqual(len(data), 1)

    def test_scan_negative_threshold(self):
        result = self._scan("--threshold", "-1")
        self.assertEqual(result.exit_code, 2)

    def test_scan_config_file(self):
        """Test a config file supplies threshold and prefixes."""
        config = self.create_temp_file(
            "scan.json", json.dumps({"threshold": 40, "prefixes": ["final "]})
        )
        result = self._scan("--config", str(config), "--format", "json")
        self.assertEqual(result.exit_code, 0)
        data = json.loads(result.output)
        self.assertEqual(len(data), 1)
        # "@objc " is no longer stripped
        self.assertEqual(data[0]["code"], "@objc func load()")

    def test_scan_invalid_config(self):
        """Test an invalid config file is reported as an error."""
        config = self.create_temp_file("scan.json", json.dumps({"interval": -1}))
        result = self._scan("--config", str(config))
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid scan config", result.output)

    def test_scan_gzip_activity_log(self):
        """Test scanning a gzip .xcactivitylog."""
        path = self.create_gzip_file("build.xcactivitylog", SAMPLE_LOG)
        result = self.runner.invoke(main, ["scan", str(path), "--format", "json"])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(len(json.loads(result.output)), len(SAMPLE_LOG_RANKED))

    def test_scan_stale_log(self):
        """Test a log older than --since yields no timings."""
        result = self._scan("--since", "2999-01-01")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("No timings found.", result.output)

    def test_scan_directory_requires_product(self):
        """Test a DerivedData directory without --product is a usage error."""
        result = self.runner.invoke(main, ["scan", str(self.temp_dir)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--product", result.output)

    def test_scan_derived_data(self):
        """Test scanning the latest log of a product in DerivedData."""
        self.create_gzip_file(
            "DerivedData/MyApp-abc123/Logs/Build/LOG.xcactivitylog", SAMPLE_LOG
        )
        result = self.runner.invoke(
            main,
            [
                "scan",
                str(self.temp_dir / "DerivedData"),
                "--product",
                "MyApp",
                "--format",
                "json",
            ],
        )
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(len(json.loads(result.output)), len(SAMPLE_LOG_RANKED))

    def test_scan_nonexistent_file(self):
        result = self.runner.invoke(main, ["scan", str(self.temp_dir / "nope.log")])
        self.assertNotEqual(result.exit_code, 0)

    def test_scan_output_file(self):
        """Test writing output to a file."""
        output = self.temp_dir / "out" / "timings.json"
        result = self._scan("--format", "json", "--output", str(output))
        self.assertEqual(result.exit_code, 0)
        self.assertIn("2 timings written to", result.output)
        data = json.loads(output.read_text())
        self.assertEqual(len(data), 2)

    def test_scan_compressed_output(self):
        """Test --compress writes Zstd output."""
        output = self.temp_dir / "timings.ndjson.zst"
        result = self._scan("--format", "ndjson", "-o", str(output), "--compress")
        self.assertEqual(result.exit_code, 0)

        text = zstd.ZstdDecompressor().decompress(output.read_bytes()).decode("utf-8")
        self.assertEqual(len(text.strip().split("\n")), 2)

    def test_scan_compress_requires_output(self):
        result = self._scan("--compress")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("--compress requires --output", result.output)


def test_scan_activity_log_fixture(sample_activity_log: Path) -> None:
    """Test the fixture log through the CLI."""
    result = CliRunner().invoke(
        main, ["scan", str(sample_activity_log), "--format", "json", "-q"]
    )
    assert result.exit_code == 0
    assert json.loads(result.output)[0]["time"] == SAMPLE_LOG_RANKED[0][1]


def test_controller_with_fixture_ticker(manual_ticker: ManualTicker) -> None:
    """Test a scan through the controller API with the fixture ticker."""
    controller = ScanController(StaticTextSupplier(SAMPLE_LOG), ticker=manual_ticker)
    result = controller.run("App")
    assert result.did_complete
    assert manual_ticker.stop_count == 1


if __name__ == "__main__":
    unittest.main()
