"""Logging configuration for keyhound.

This module provides logging setup using the Rich library for
console output with timestamps and source context.
"""

import logging
from typing import Optional

from rich.logging import RichHandler

# Module-level logger instance for keyhound
_logger: Optional[logging.Logger] = None

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def setup_logging(verbose: bool = False, level: Optional[int] = None) -> logging.Logger:
    """Configure Python logging with Rich handler.

    Args:
        verbose: If True, set log level to DEBUG for detailed output.
                 If False, set log level to WARNING to show only
                 warnings and errors.
        level: Explicit log level; takes precedence over ``verbose``.

    Returns:
        The configured ``keyhound`` logger.

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.debug("Probing AKIA...")
    """
    global _logger

    if level is None:
        level = logging.DEBUG if verbose else logging.WARNING

    rich_handler = RichHandler(
        level=level,
        show_time=True,
        show_level=True,
        show_path=True,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger("keyhound")
    logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(rich_handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the keyhound logger instance.

    Returns the previously configured logger, or sets up a default
    logger if setup_logging() has not been called.
    """
    global _logger

    if _logger is None:
        _logger = setup_logging(verbose=False)

    return _logger


def mask(value: str, visible: int = 4) -> str:
    """Shorten a credential for log output."""
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}..."
