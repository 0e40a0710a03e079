"""Logging configuration for chunes."""

import logging
import sys
from typing import Any, Optional

_logger: Optional[logging.Logger] = None

# Only the first few extras make it onto the one-line summary
MAX_EXTRA_FIELDS = 5


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Configure and return the application logger.

    Args:
        verbose: If True, set log level to DEBUG.
        quiet: If True, only warnings and errors are shown. Ignored when
            verbose is set.

    Returns:
        Configured logger instance.
    """
    global _logger

    level = _level_for(verbose, quiet)

    if _logger is not None:
        # Update level if already configured
        _logger.setLevel(level)
        return _logger

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    _logger = logging.getLogger("chunes")
    _logger.setLevel(level)

    return _logger


def _level_for(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def get_logger() -> logging.Logger:
    """Get the application logger, creating with defaults if needed.

    Returns:
        Logger instance.
    """
    global _logger
    if _logger is None:
        _logger = setup_logging(verbose=False)
    return _logger


def format_fields(**extra: Any) -> str:
    """Render keyword context as a ``k=v`` suffix for a log line.

    >>> format_fields(field="bpm", raw="12a")
    ' | field=bpm raw=12a'
    """
    items = list(extra.items())[:MAX_EXTRA_FIELDS]
    if not items:
        return ""
    return " | " + " ".join(f"{key}={value}" for key, value in items)
