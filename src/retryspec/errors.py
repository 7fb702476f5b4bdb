"""Deterministic error model for retry execution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    CONFIG_ERROR = 3
    RETRIES_EXHAUSTED = 4
    FALLBACK_ERROR = 5
    CANCELLED = 6


@dataclass
class RetryError(Exception):
    message: str
    code: ErrorCode = ErrorCode.RETRIES_EXHAUSTED
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class ConfigurationError(RetryError):
    """Invalid specification detected before any attempt was made."""

    code: ErrorCode = ErrorCode.CONFIG_ERROR


@dataclass
class FallbackError(RetryError):
    """The fallback ran after exhaustion and failed as well.

    The fallback's own exception is the ``__cause__``; the error of the last
    regular attempt is kept in ``last_error``.
    """

    code: ErrorCode = ErrorCode.FALLBACK_ERROR
    last_error: BaseException | None = None


@dataclass
class RetryCancelledError(RetryError):
    code: ErrorCode = ErrorCode.CANCELLED
    attempts: int = 0
