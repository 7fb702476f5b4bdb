"""Retry fallible operations with Fibonacci backoff, fail-fast sentinels and fallbacks."""

from retryspec.backoff import fibonacci_delay, fibonacci_delays
from retryspec.causes import cause_chain, matches_any, root_cause
from retryspec.errors import (
    ConfigurationError,
    ErrorCode,
    FallbackError,
    RetryCancelledError,
    RetryError,
)
from retryspec.policy import ErrorHandler, Specification, Tryable, configure
from retryspec.retry import run_with_retry
from retryspec.settings import RetrySettings, load_settings

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "ErrorHandler",
    "FallbackError",
    "RetryCancelledError",
    "RetryError",
    "RetrySettings",
    "Specification",
    "Tryable",
    "cause_chain",
    "configure",
    "fibonacci_delay",
    "fibonacci_delays",
    "load_settings",
    "matches_any",
    "root_cause",
    "run_with_retry",
]
