# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Logging configuration for buildtime.

Library modules log through logging.getLogger(__name__); the CLI installs
a rich handler on stderr so log lines never mix with report output.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure logging with a rich handler on stderr.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging

    Returns:
        The "buildtime" package logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
    )
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=[handler]
    )

    logger = logging.getLogger("buildtime")
    logger.setLevel(level)
    return logger
