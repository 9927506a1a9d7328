"""
Logging utilities for depscout.

All depscout loggers live under the ``depscout`` namespace. Library
callers get a silent ``NullHandler`` until :func:`setup_logging` is
called; the CLI calls it once per invocation with a level derived from
the ``-v`` flags.

Per-dependency check results are logged at ``INFO`` by
:mod:`depscout.core.classifier`, so ``depscout -v scan`` shows every
decision as it is made.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from depscout.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "depscout"

_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colors the level name when writing to a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and _stderr_supports_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # Color a copy of the level name only for this formatting pass
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _stderr_supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stderr.isatty()
    except (AttributeError, OSError):
        return False


def level_from_verbosity(verbose: int) -> int:
    """Map a ``-v`` count to a logging level.

    Args:
        verbose: Number of ``-v`` flags given on the command line.

    Returns:
        ``WARNING`` for 0, ``INFO`` for 1, ``DEBUG`` for 2 or more.
    """
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the ``depscout`` logger hierarchy.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Use the verbose format with timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the depscout namespace.

    Args:
        name: Short name (``"http"``) or fully qualified name
            (``"depscout.http"``).

    Returns:
        A logger under the ``depscout`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(ROOT_LOGGER_NAME + "."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    # Stay silent when used as a library without configured logging
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def disable_logging() -> None:
    """Silence all depscout logging output."""
    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
