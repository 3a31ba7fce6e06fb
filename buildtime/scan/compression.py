# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Compression utilities for build log files.

Xcode stores build logs as gzip-compressed .xcactivitylog files; logs
archived by CI are often Zstd-compressed. Both are handled transparently
alongside plain text logs.
"""

import gzip
import io
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Union

import zstandard as zstd

# Gzip magic number: 0x1F8B
GZIP_MAGIC = b"\x1f\x8b"

# Zstd magic number (little-endian): 0xFD2FB528
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


def detect_compression(filepath: Union[str, Path]) -> str:
    """
    Detect compression format of a file.

    Uses magic number detection for reliability (works regardless of extension).

    Args:
        filepath: Path to the file to check

    Returns:
        Compression type: "gzip", "zstd" or "none"

    Raises:
        FileNotFoundError: If file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "rb") as f:
        magic = f.read(4)

    if magic == ZSTD_MAGIC:
        return "zstd"
    if magic[:2] == GZIP_MAGIC:
        return "gzip"
    return "none"


@contextmanager
def open_log_file(filepath: Union[str, Path]) -> Iterator[TextIO]:
    """
    Open a build log, automatically handling compression.

    Logs may contain bytes that are not valid UTF-8 (Xcode's activity log
    container format is binary around the text), so undecodable bytes are
    replaced rather than raising.

    Args:
        filepath: Path to the log file

    Yields:
        Text stream for reading the file contents

    Raises:
        FileNotFoundError: If file does not exist

    Example:
        >>> with open_log_file("build.xcactivitylog") as f:
        ...     text = f.read()
    """
    filepath = Path(filepath)
    compression = detect_compression(filepath)

    if compression == "zstd":
        dctx = zstd.ZstdDecompressor()
        with open(filepath, "rb") as binary_file:
            with dctx.stream_reader(binary_file, read_across_frames=True) as reader:
                with io.TextIOWrapper(
                    reader, encoding="utf-8", errors="replace", newline=""
                ) as text_stream:
                    yield text_stream
    elif compression == "gzip":
        with gzip.open(
            filepath, "rt", encoding="utf-8", errors="replace", newline=""
        ) as text_stream:
            yield text_stream
    else:
        with open(filepath, "r", encoding="utf-8", errors="replace", newline="") as f:
            yield f


def read_log_text(filepath: Union[str, Path]) -> str:
    """
    Read a whole build log as text.

    Line endings are preserved as-is (carriage returns separate records).

    Raises:
        FileNotFoundError: If file does not exist
    """
    with open_log_file(filepath) as f:
        return f.read()
