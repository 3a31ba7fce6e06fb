# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Measure formatting utilities for different output formats.

Provides functions to format ranked compile measures as table, JSON,
CSV or NDJSON. All functions are pure (no side effects) and return strings.
"""

import csv
import io
import json
from typing import Any, Optional

from tabulate import tabulate

from buildtime.measure.models import CompileMeasure

# Fields emitted for each measure, in column order
MEASURE_FIELDS = ["time", "file_and_line", "code"]

# Extra fields available with --fields all
DETAIL_FIELDS = ["raw_path", "filename", "line", "column"]


def measure_to_dict(
    measure: CompileMeasure, fields: Optional[list[str]] = None
) -> dict[str, Any]:
    """
    Convert a measure to a JSON-serializable dict.

    Args:
        measure: Compile measure to convert
        fields: Field names to include (default: MEASURE_FIELDS)

    Returns:
        Dict with one entry per requested field
    """
    fields = fields or MEASURE_FIELDS
    return {f: getattr(measure, f) for f in fields}


def select_top(
    measures: list[CompileMeasure], top_n: Optional[int] = None
) -> list[CompileMeasure]:
    """Return the first top_n measures (all of them if top_n is None)."""
    if top_n is None:
        return measures
    if top_n <= 0:
        return []
    return measures[:top_n]


def format_measures_table(
    measures: list[CompileMeasure],
    show_header: bool = True,
) -> str:
    """
    Format measures as a plain text table with aligned columns.

    Whitespace runs in the code column (including raw newlines) are
    collapsed to single spaces so every measure stays on one row.

    Args:
        measures: Ranked compile measures
        show_header: Whether to show the table header

    Returns:
        Formatted table string
    """
    if not measures:
        return "No timings found."

    rows = [
        [m.time_string, m.file_and_line, " ".join(m.code.split())] for m in measures
    ]
    headers = ["TIME", "LOCATION", "CODE"] if show_header else []
    return tabulate(rows, headers=headers, tablefmt="plain", disable_numparse=True)


def format_measures_json(
    measures: list[CompileMeasure], fields: Optional[list[str]] = None
) -> str:
    """Format measures as a pretty-printed JSON array."""
    if not measures:
        return "[]"
    return json.dumps([measure_to_dict(m, fields) for m in measures], indent=2)


def format_measures_csv(
    measures: list[CompileMeasure],
    fields: Optional[list[str]] = None,
    show_header: bool = True,
) -> str:
    """
    Format measures as CSV.

    Args:
        measures: Ranked compile measures
        fields: Field names to include (default: MEASURE_FIELDS)
        show_header: Whether to include the header row

    Returns:
        CSV formatted string
    """
    if not measures:
        return ""

    fields = fields or MEASURE_FIELDS
    output = io.StringIO(newline="")
    writer = csv.writer(output)

    if show_header:
        writer.writerow(fields)

    for measure in measures:
        row = measure_to_dict(measure, fields)
        writer.writerow(["" if row[f] is None else row[f] for f in fields])

    return output.getvalue().rstrip("\r\n").replace("\r\n", "\n")


def format_measures_ndjson(
    measures: list[CompileMeasure], fields: Optional[list[str]] = None
) -> str:
    """Format measures as NDJSON, one JSON object per line."""
    if not measures:
        return ""
    return "\n".join(json.dumps(measure_to_dict(m, fields)) for m in measures)


def format_measures(
    measures: list[CompileMeasure],
    output_format: str = "table",
    show_header: bool = True,
    all_fields: bool = False,
) -> str:
    """
    Format measures in the requested output format.

    Args:
        measures: Ranked compile measures
        output_format: One of "table", "json", "csv", "ndjson"
        show_header: Whether table/CSV output gets a header row
        all_fields: Include location details in JSON/CSV/NDJSON output

    Returns:
        Formatted output string

    Raises:
        ValueError: If output_format is unknown
    """
    fields = MEASURE_FIELDS + DETAIL_FIELDS if all_fields else MEASURE_FIELDS

    if output_format == "json":
        return format_measures_json(measures, fields)
    elif output_format == "csv":
        return format_measures_csv(measures, fields, show_header=show_header)
    elif output_format == "ndjson":
        return format_measures_ndjson(measures, fields)
    elif output_format == "table":
        return format_measures_table(measures, show_header=show_header)
    raise ValueError(f"Unknown output format: '{output_format}'")
