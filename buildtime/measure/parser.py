# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Parse raw measures into structured compile measures.

A raw measure's text is "<path>\\t<code>"; the path keeps the compiler's
line and column, the code fragment has its declaration prefixes removed.
"""

import re
from typing import Iterable, Optional

from buildtime.measure.models import CompileMeasure, RawMeasure
from buildtime.measure.reader import SEGMENT_SEPARATORS

# Checked in this order, each removed at most once
DECLARATION_PREFIXES = ("@objc ", "final ", "@IBAction ")

# Diagnostic style record without a tab: "<path>:<line>:<col>: <code>"
DIAGNOSTIC_PATTERN = re.compile(r"^(?P<path>[^\t]+?:\d+:\d+): (?P<code>.*)$", re.DOTALL)


def trim_prefixes(code: str, prefixes: Iterable[str] = DECLARATION_PREFIXES) -> str:
    """
    Strip leading declaration modifiers from a code fragment.

    Examples:
        >>> trim_prefixes("@objc final func f()")
        'func f()'
        >>> trim_prefixes("private func g()")
        'private func g()'
    """
    for prefix in prefixes:
        if code.startswith(prefix):
            code = code[len(prefix) :]
    return code


def split_measure_text(text: str) -> Optional[tuple[str, str]]:
    """
    Split raw measure text into (raw_path, code).

    Trailing record separators are removed first. The split happens at the
    first tab; records in compiler diagnostic form are accepted as well.

    Returns:
        (raw_path, code), or None if the text has no code fragment
    """
    text = text.rstrip(SEGMENT_SEPARATORS)

    parts = text.split("\t", 1)
    if len(parts) == 2:
        return parts[0], parts[1]

    match = DIAGNOSTIC_PATTERN.match(text)
    if match:
        return match.group("path"), match.group("code")

    return None


def parse_raw_measure(
    raw: RawMeasure, prefixes: Iterable[str] = DECLARATION_PREFIXES
) -> Optional[CompileMeasure]:
    """Turn one raw measure into a CompileMeasure, or None if malformed."""
    parts = split_measure_text(raw.text)
    if parts is None:
        return None

    raw_path, code = parts
    return CompileMeasure(
        time=raw.time, raw_path=raw_path, code=trim_prefixes(code, prefixes)
    )


def parse_raw_measures(
    raws: Iterable[RawMeasure], prefixes: Iterable[str] = DECLARATION_PREFIXES
) -> list[CompileMeasure]:
    """Parse raw measures, dropping malformed ones."""
    prefixes = tuple(prefixes)
    measures = []
    for raw in raws:
        measure = parse_raw_measure(raw, prefixes)
        if measure is not None:
            measures.append(measure)
    return measures
