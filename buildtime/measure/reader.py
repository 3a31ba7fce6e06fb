# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Timing line reader for build logs.

This module splits raw log text into records, recognizes timing lines
and accumulates their durations into raw measures.

Records in the log are not newline-delimited: code fragments embedded in
a record may themselves contain raw newlines, so records are cut at
carriage returns and double quotes instead.
"""

import logging
import re
from typing import Callable, Iterable, Iterator, Optional

from buildtime.measure.models import RawMeasure

logger = logging.getLogger(__name__)

# Characters that terminate a log record
SEGMENT_SEPARATORS = "\r\""

# Duration in milliseconds, a tab, then an absolute path.
# The compiler prints durations as %.1f, so at most one fractional digit.
TIMING_LINE_PATTERN = re.compile(r"^(\d*\.?\d)ms\t/")

# Entries at or below this cumulative duration are noise
MINIMUM_DURATION_MS = 10.0

_SEPARATOR_PATTERN = re.compile("[" + re.escape(SEGMENT_SEPARATORS) + "]")


def iter_segments(text: str) -> Iterator[str]:
    """
    Split log text into records.

    Each segment runs from the end of the previous one up to and including
    the next separator character. Text after the last separator is yielded
    as a final segment, so joining all segments reproduces the input.

    Args:
        text: Full log text

    Yields:
        Consecutive record segments

    Examples:
        >>> list(iter_segments('12ms\\t/a.swift"3ms\\t/b.swift\\r'))
        ['12ms\\t/a.swift"', '3ms\\t/b.swift\\r']
    """
    start = 0
    for match in _SEPARATOR_PATTERN.finditer(text):
        end = match.end()
        yield text[start:end]
        start = end
    if start < len(text):
        yield text[start:]


def match_timing_line(segment: str) -> Optional[tuple[float, str]]:
    """
    Extract the duration and value from a timing line.

    Args:
        segment: One record produced by iter_segments

    Returns:
        (duration_ms, value) where value starts at the path separator,
        or None if the segment is not a timing line

    Examples:
        >>> match_timing_line("12.3ms\\t/Foo.swift:4:9\\tfunc bar()")
        (12.3, '/Foo.swift:4:9\\tfunc bar()')
        >>> match_timing_line("note: nothing to see") is None
        True
    """
    match = TIMING_LINE_PATTERN.match(segment)
    if match is None:
        return None

    try:
        duration = float(match.group(1))
    except ValueError:
        return None

    return duration, segment[match.end() - 1 :]


def accumulate_timings(
    segments: Iterable[str],
    should_cancel: Optional[Callable[[], bool]] = None,
) -> dict[str, float]:
    """
    Sum timing durations per distinct value.

    The cancellation predicate is polled after every matched line; when it
    returns True the fold stops and whatever has accumulated is returned.

    Args:
        segments: Record segments (consumed once)
        should_cancel: Optional predicate requesting an early stop

    Returns:
        Dict mapping value text to cumulative duration in milliseconds
    """
    timings: dict[str, float] = {}

    for segment in segments:
        matched = match_timing_line(segment)
        if matched is None:
            continue

        duration, value = matched
        timings[value] = timings.get(value, 0.0) + duration

        if should_cancel is not None and should_cancel():
            logger.debug("Scan cancelled after %d distinct values", len(timings))
            break

    return timings


def filter_raw_measures(
    timings: dict[str, float], threshold: float = MINIMUM_DURATION_MS
) -> list[RawMeasure]:
    """
    Keep entries whose cumulative duration is strictly above threshold.

    Args:
        timings: Accumulation map from accumulate_timings
        threshold: Minimum duration in milliseconds (exclusive)

    Returns:
        Raw measures that cleared the threshold
    """
    return [
        RawMeasure(time=duration, text=value)
        for value, duration in timings.items()
        if duration > threshold
    ]


def collect_raw_measures(
    text: str,
    threshold: float = MINIMUM_DURATION_MS,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> list[RawMeasure]:
    """
    Run one full pass over log text.

    Args:
        text: Full log text
        threshold: Minimum cumulative duration in milliseconds (exclusive)
        should_cancel: Optional predicate polled after each matched line

    Returns:
        Raw measures above threshold, in first-seen order
    """
    timings = accumulate_timings(iter_segments(text), should_cancel)
    return filter_raw_measures(timings, threshold)
