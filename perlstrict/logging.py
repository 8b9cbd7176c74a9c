"""Logging setup for perlstrict.

TAP goes to stdout, so every log record is kept off it: the console handler
writes to stderr and ``--log-file`` adds a timestamped copy on disk.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_ROOT = "perlstrict"
_CONSOLE_FORMAT = "[perlstrict] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``perlstrict.<name>``, or the package logger itself."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route perlstrict records to stderr and, when given, to *log_file*.

    ``verbose`` lowers the level to DEBUG, which logs each subprocess command
    and every subtree the walk skips.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    # A second call replaces the previous sinks instead of stacking them.
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level, _CONSOLE_FORMAT))
    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_handler(sink, level, _FILE_FORMAT))
    return logger


__all__ = ["configure_logging", "get_logger"]
