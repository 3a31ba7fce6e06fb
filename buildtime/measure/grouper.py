# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Grouping and ranking of compile measures.

The compiler can emit several measures for one source line (e.g. type
checking and code generation); they are merged by file-and-line key and
ranked by total time.
"""

from dataclasses import replace
from operator import attrgetter
from typing import Iterable

from buildtime.measure.models import CompileMeasure, RawMeasure
from buildtime.measure.parser import DECLARATION_PREFIXES, parse_raw_measures


def group_by_source_line(measures: Iterable[CompileMeasure]) -> list[CompileMeasure]:
    """
    Merge measures sharing a file-and-line key.

    The first measure seen for a key provides path and code; later ones
    only add their time. Input measures are not modified.

    Args:
        measures: Parsed compile measures

    Returns:
        One merged measure per distinct file-and-line key
    """
    grouped: dict[str, CompileMeasure] = {}

    for measure in measures:
        key = measure.file_and_line
        existing = grouped.get(key)
        if existing is None:
            grouped[key] = replace(measure)
        else:
            existing.time += measure.time

    return list(grouped.values())


def rank_measures(measures: Iterable[CompileMeasure]) -> list[CompileMeasure]:
    """
    Sort measures by time, slowest first.

    Order among measures with equal time is unspecified.
    """
    return sorted(measures, key=attrgetter("time"), reverse=True)


def build_snapshot(
    raws: Iterable[RawMeasure], prefixes: Iterable[str] = DECLARATION_PREFIXES
) -> list[CompileMeasure]:
    """Parse, group and rank raw measures into one result snapshot."""
    return rank_measures(group_by_source_line(parse_raw_measures(raws, prefixes)))
