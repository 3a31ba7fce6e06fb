# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
buildtime: per-symbol compile timing extraction from build logs.
"""

from buildtime.measure import CompileMeasure, RawMeasure, ScanResult
from buildtime.scan import ScanConfig, ScanController, ScanInProgressError

__all__ = [
    "CompileMeasure",
    "RawMeasure",
    "ScanConfig",
    "ScanController",
    "ScanInProgressError",
    "ScanResult",
]
