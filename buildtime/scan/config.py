# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Scan configuration.

Provides the ScanConfig dataclass and a loader for JSON config files,
validated against SCAN_CONFIG_SCHEMA.
"""

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema

from buildtime.measure.parser import DECLARATION_PREFIXES
from buildtime.measure.reader import MINIMUM_DURATION_MS
from buildtime.scan.ticker import DEFAULT_INTERVAL

# Schema for scan config files, e.g. {"interval": 0.5, "threshold": 25}
SCAN_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "interval": {"type": "number", "exclusiveMinimum": 0},
        "threshold": {"type": "number", "minimum": 0},
        "prefixes": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
        },
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class ScanConfig:
    """
    Configuration for a ScanController.

    Attributes:
        interval: Seconds between progress snapshots
        threshold: Minimum cumulative duration in ms for an entry to be kept
        prefixes: Declaration prefixes stripped from code fragments
    """

    interval: float = DEFAULT_INTERVAL
    threshold: float = MINIMUM_DURATION_MS
    prefixes: tuple[str, ...] = DECLARATION_PREFIXES

    def with_overrides(
        self, interval: Optional[float] = None, threshold: Optional[float] = None
    ) -> "ScanConfig":
        """Return a copy with the given (non-None) values replaced."""
        changes: Dict[str, Any] = {}
        if interval is not None:
            changes["interval"] = interval
        if threshold is not None:
            changes["threshold"] = threshold
        return replace(self, **changes)


def load_scan_config(config_path: Union[str, Path]) -> ScanConfig:
    """
    Load a scan config from a JSON file.

    Keys missing from the file keep their defaults.

    Args:
        config_path: Path to the JSON config file

    Returns:
        Parsed ScanConfig

    Raises:
        ValueError: If the config fails schema validation
        FileNotFoundError: If the config file does not exist
        json.JSONDecodeError: If the config file contains invalid JSON
    """
    with open(config_path) as f:
        data = json.load(f)

    try:
        jsonschema.validate(data, SCAN_CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid scan config '{config_path}': {e.message}") from e

    if "prefixes" in data:
        data["prefixes"] = tuple(data["prefixes"])
    return ScanConfig(**data)
