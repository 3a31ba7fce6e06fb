# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Compile timing measures.

This module provides the parsing pipeline for build logs:
- iter_segments / match_timing_line: Split log text and recognize timing lines
- collect_raw_measures: Accumulate durations per value above a threshold
- parse_raw_measures: Structure raw measures into CompileMeasure objects
- group_by_source_line / rank_measures: Merge per source line and rank
"""

from .grouper import build_snapshot, group_by_source_line, rank_measures
from .models import CompileMeasure, file_and_line, RawMeasure, ScanResult, ScanState
from .parser import (
    DECLARATION_PREFIXES,
    parse_raw_measure,
    parse_raw_measures,
    split_measure_text,
    trim_prefixes,
)
from .reader import (
    accumulate_timings,
    collect_raw_measures,
    filter_raw_measures,
    iter_segments,
    match_timing_line,
    MINIMUM_DURATION_MS,
)

__all__ = [
    "accumulate_timings",
    "build_snapshot",
    "collect_raw_measures",
    "CompileMeasure",
    "DECLARATION_PREFIXES",
    "file_and_line",
    "filter_raw_measures",
    "group_by_source_line",
    "iter_segments",
    "match_timing_line",
    "MINIMUM_DURATION_MS",
    "parse_raw_measure",
    "parse_raw_measures",
    "rank_measures",
    "RawMeasure",
    "ScanResult",
    "ScanState",
    "split_measure_text",
    "trim_prefixes",
]
