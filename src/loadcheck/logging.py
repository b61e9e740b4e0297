"""Logging configuration for loadcheck."""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    VERBOSE = logging.DEBUG


def configure_logging(verbose: bool = False, no_color: bool = False) -> Console:
    """Configure diagnostic logging.

    Verbose diagnostics go to stdout next to the status line. Otherwise
    only warnings are logged, to stderr, so stdout carries a single line
    for the monitoring harness.

    Args:
        verbose: Enable diagnostic output on stdout
        no_color: Disable colored output

    Returns:
        Configured Rich console for output
    """
    level = LogLevel.VERBOSE if verbose else LogLevel.QUIET

    console = Console(
        stderr=not verbose,
        no_color=no_color,
        soft_wrap=True,
    )

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
