# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Log text suppliers.

A supplier produces the full build log text for a product, or None when
no log is available. ScanController only consumes this result and does
not know how the text was located.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from buildtime.scan.compression import read_log_text

logger = logging.getLogger(__name__)

# Xcode build logs, relative to a product's DerivedData folder
BUILD_LOGS_SUBDIR = Path("Logs") / "Build"
BUILD_LOG_PATTERN = "*.xcactivitylog"


def _modification_date(path: Path, aware: bool = False) -> datetime:
    if aware:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return datetime.fromtimestamp(path.stat().st_mtime)


def is_fresh(path: Path, build_completion_date: Optional[datetime]) -> bool:
    """
    Check that a log was written no earlier than the build completed.

    Args:
        path: Log file
        build_completion_date: Completion time of the build of interest,
            or None to accept any log

    Returns:
        True if the log can belong to that build
    """
    if build_completion_date is None:
        return True
    aware = build_completion_date.tzinfo is not None
    return _modification_date(path, aware) >= build_completion_date


class TextSupplier(ABC):
    """Source of build log text for a product."""

    @abstractmethod
    def log_text(
        self, product_name: str, build_completion_date: Optional[datetime] = None
    ) -> Optional[str]:
        """
        Return the full log text, or None if no log is available.

        Args:
            product_name: Build artifact identifier
            build_completion_date: Optional completion time of the build
        """


class StaticTextSupplier(TextSupplier):
    """Supplier returning fixed text, regardless of product."""

    def __init__(self, text: Optional[str]) -> None:
        self.text = text

    def log_text(
        self, product_name: str, build_completion_date: Optional[datetime] = None
    ) -> Optional[str]:
        return self.text


class LogFileSupplier(TextSupplier):
    """
    Supplier reading one log file (plain, gzip or Zstd).

    Example:
        >>> supplier = LogFileSupplier("build.xcactivitylog")
        >>> text = supplier.log_text("MyApp")
    """

    def __init__(self, file_path: Union[str, Path]) -> None:
        """
        Args:
            file_path: Path to the log file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {self.file_path}")

    def log_text(
        self, product_name: str, build_completion_date: Optional[datetime] = None
    ) -> Optional[str]:
        if not is_fresh(self.file_path, build_completion_date):
            logger.info(
                "Log %s predates build completion at %s",
                self.file_path,
                build_completion_date,
            )
            return None

        logger.info("Reading build log %s", self.file_path)
        return read_log_text(self.file_path)


class DerivedDataSupplier(TextSupplier):
    """
    Supplier locating the latest build log in an Xcode DerivedData folder.

    Products live in "<root>/<ProductName>-<hash>/"; their build logs in
    "Logs/Build/*.xcactivitylog" beneath that. The most recently modified
    log that is not older than the build completion date is used.
    """

    def __init__(self, derived_data_dir: Union[str, Path]) -> None:
        """
        Args:
            derived_data_dir: DerivedData root directory

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        self.derived_data_dir = Path(derived_data_dir)

        if not self.derived_data_dir.is_dir():
            raise FileNotFoundError(f"Directory not found: {self.derived_data_dir}")

    def find_build_logs(self, product_name: str) -> list[Path]:
        """
        List build logs for a product, newest first.

        Args:
            product_name: Product name as used in DerivedData folder names

        Returns:
            Log paths sorted by modification time, descending
        """
        logs: list[Path] = []
        for product_dir in self.derived_data_dir.glob(f"{product_name}-*"):
            logs_dir = product_dir / BUILD_LOGS_SUBDIR
            if logs_dir.is_dir():
                logs.extend(logs_dir.glob(BUILD_LOG_PATTERN))
        return sorted(logs, key=lambda p: p.stat().st_mtime, reverse=True)

    def latest_build_log(
        self, product_name: str, build_completion_date: Optional[datetime] = None
    ) -> Optional[Path]:
        """Return the newest fresh build log for a product, if any."""
        logs = self.find_build_logs(product_name)
        if not logs:
            logger.info(
                "No build logs for %s in %s", product_name, self.derived_data_dir
            )
            return None

        latest = logs[0]
        if not is_fresh(latest, build_completion_date):
            logger.info(
                "Latest log %s predates build completion at %s",
                latest,
                build_completion_date,
            )
            return None
        return latest

    def log_text(
        self, product_name: str, build_completion_date: Optional[datetime] = None
    ) -> Optional[str]:
        log_path = self.latest_build_log(product_name, build_completion_date)
        if log_path is None:
            return None

        logger.info("Reading build log %s", log_path)
        return read_log_text(log_path)
