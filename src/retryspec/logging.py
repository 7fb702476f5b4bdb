"""Console logging for retry attempts.

Records are emitted under two loggers: ``retryspec`` for the package and its
child ``retryspec.retry`` for per-attempt records (failed attempts, backoff
waits, exhaustion). The child can be tuned separately, so a service can keep
the package at INFO while silencing attempt warnings, or trace attempts at
DEBUG under a quiet package level.
"""

from __future__ import annotations

import logging as py_logging
import sys
from typing import TextIO

LOGGER_NAME = "retryspec"
ATTEMPT_LOGGER_NAME = "retryspec.retry"
LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
_HANDLER_NAME = "retryspec-console"
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def normalize_level(level: str) -> str:
    normalized = level.strip().upper()
    if normalized == "WARNING":
        return "WARN"
    return normalized


def resolve_level(level: str) -> int:
    return LOG_LEVELS.get(normalize_level(level), py_logging.INFO)


def configure_logging(
    level: str = "INFO",
    *,
    attempt_level: str | None = None,
    stream: TextIO | None = None,
) -> py_logging.Logger:
    """Route retryspec records to ``stream`` (stderr by default).

    Calling it again replaces the console handler it installed earlier;
    handlers added by the application are left in place.
    """
    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))
    for existing in [handler for handler in logger.handlers if handler.get_name() == _HANDLER_NAME]:
        logger.removeHandler(existing)

    handler = py_logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(py_logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    attempts = py_logging.getLogger(ATTEMPT_LOGGER_NAME)
    attempts.setLevel(resolve_level(attempt_level) if attempt_level else py_logging.NOTSET)
    return logger
