from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Application logger with labeled line prefixes.

Every line the importer prints starts with a label so the CLI output can be
grepped and asserted on:

    INFO HSCode       OK       HS Code              (exact)
    WARN duplicate header 'VAT' in sheet=Sheet1, first column is used
    SUMMARY file=hs.xlsx ready=yes fields=8/8 manual=1 rows=120 ...

Module loggers (``logging.getLogger(__name__)``) sit below the application
logger and share its handler. DEBUG lines additionally name the module
they come from.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "set_debug",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "hscode_import"

# Between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; DEBUG records become ``DEBUG [module] message``."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        if record.levelno == logging.DEBUG and record.name != LOGGER_NAME:
            return f"{label} [{record.name.rsplit('.', 1)[-1]}] {record.getMessage()}"
        return f"{label} {record.getMessage()}"


def setup_logging(stream: TextIO | None = None, level: int = logging.INFO) -> logging.Logger:
    """Configure the application logger once; later calls return it unchanged.

    Args:
        stream: Output stream (stdout when None, resolved at call time)
        level: Initial level of logger and handler

    Returns:
        The ``hscode_import`` logger
    """
    global _logger
    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(LOGGER_NAME)
    for old in logger.handlers[:]:
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(LabeledFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    # no root propagation: avoids duplicate lines under other logging setups
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """The application logger, configured on first use."""
    return _logger if _logger is not None else setup_logging()


def set_debug(enabled: bool = True) -> None:
    """Switch the application logger and its handlers to DEBUG (or back to INFO)."""
    logger = get_logger()
    level = logging.DEBUG if enabled else logging.INFO
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the handler and forget the configured logger (tests)."""
    global _logger
    if _logger is not None:
        for h in _logger.handlers[:]:
            _logger.removeHandler(h)
        _logger.propagate = True
        _logger.setLevel(logging.NOTSET)
    _logger = None
