# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pytest configuration and shared fixtures for buildtime tests.
"""

import gzip
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tests.test_base import ManualTicker, SAMPLE_LOG


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_log_file(temp_dir: Path) -> Path:
    """Create a plain text build log."""
    filepath = temp_dir / "build.log"
    filepath.write_bytes(SAMPLE_LOG.encode("utf-8"))
    return filepath


@pytest.fixture
def sample_activity_log(temp_dir: Path) -> Path:
    """Create a gzip-compressed .xcactivitylog."""
    filepath = temp_dir / "build.xcactivitylog"
    filepath.write_bytes(gzip.compress(SAMPLE_LOG.encode("utf-8")))
    return filepath


@pytest.fixture
def manual_ticker() -> ManualTicker:
    """Ticker that fires only when the test says so."""
    return ManualTicker()
