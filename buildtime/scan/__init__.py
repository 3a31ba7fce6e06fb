# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Build log scanning.

This module provides the scan orchestration and its collaborators:
- ScanController: Background scan with periodic progress snapshots
- TextSupplier implementations: Locate and read build logs
- Ticker implementations: Periodic snapshot triggers
- ScanConfig / load_scan_config: Scan configuration
"""

from .config import load_scan_config, SCAN_CONFIG_SCHEMA, ScanConfig
from .controller import ScanController, ScanInProgressError
from .supplier import (
    DerivedDataSupplier,
    LogFileSupplier,
    StaticTextSupplier,
    TextSupplier,
)
from .ticker import IntervalTicker, Ticker

__all__ = [
    "DerivedDataSupplier",
    "IntervalTicker",
    "load_scan_config",
    "LogFileSupplier",
    "SCAN_CONFIG_SCHEMA",
    "ScanConfig",
    "ScanController",
    "ScanInProgressError",
    "StaticTextSupplier",
    "TextSupplier",
    "Ticker",
]
