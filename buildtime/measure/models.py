# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Data model for compile timing measures.

RawMeasure holds an accumulated duration for one unparsed log value,
CompileMeasure is the structured, per-code-fragment form derived from it.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

# <path>:<line>[:<column>] at the start of a raw path
LOCATION_PATTERN = re.compile(r"^(?P<path>.+?):(?P<line>\d+)(?::(?P<column>\d+))?")


def file_and_line(raw_path: str) -> str:
    """
    Reduce a raw compiler path to its file-and-line key.

    The column and anything after it are dropped, so every measure
    attributed to one physical source line shares the same key.

    Args:
        raw_path: Location as printed by the compiler

    Returns:
        "<path>:<line>", or raw_path unchanged if it carries no line number

    Examples:
        >>> file_and_line("/Users/dev/Foo.swift:42:9")
        '/Users/dev/Foo.swift:42'
        >>> file_and_line("<invalid loc>")
        '<invalid loc>'
    """
    match = LOCATION_PATTERN.match(raw_path)
    if match is None:
        return raw_path
    return f"{match.group('path')}:{match.group('line')}"


@dataclass(frozen=True)
class RawMeasure:
    """Accumulated duration for one unparsed log value."""

    time: float
    text: str


@dataclass
class CompileMeasure:
    """
    Timing of one code fragment at one source location.

    Attributes:
        time: Duration in milliseconds (accumulates during grouping)
        raw_path: Location as printed by the compiler (path:line:column)
        code: Source fragment with declaration prefixes removed
    """

    time: float
    raw_path: str
    code: str

    @property
    def file_and_line(self) -> str:
        """De-duplication key identifying the physical source line."""
        return file_and_line(self.raw_path)

    @property
    def path(self) -> str:
        match = LOCATION_PATTERN.match(self.raw_path)
        return match.group("path") if match else self.raw_path

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def line(self) -> Optional[int]:
        match = LOCATION_PATTERN.match(self.raw_path)
        return int(match.group("line")) if match else None

    @property
    def column(self) -> Optional[int]:
        match = LOCATION_PATTERN.match(self.raw_path)
        if match is None or match.group("column") is None:
            return None
        return int(match.group("column"))

    @property
    def time_string(self) -> str:
        return f"{self.time:.1f}ms"


@dataclass
class ScanResult:
    """One snapshot delivered to a progress callback."""

    results: list[CompileMeasure] = field(default_factory=list)
    did_complete: bool = False


@dataclass(frozen=True)
class ScanState:
    """Read-only view of a ScanController's per-scan state."""

    unprocessed: tuple[RawMeasure, ...]
    cancel_requested: bool
    in_progress: bool
