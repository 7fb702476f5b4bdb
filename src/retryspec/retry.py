"""Retry execution for fallible zero-argument operations."""

from __future__ import annotations

import logging as py_logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from retryspec.backoff import fibonacci_delays, validate_seed
from retryspec.causes import matches_any
from retryspec.errors import ConfigurationError, FallbackError, RetryCancelledError

if TYPE_CHECKING:
    from retryspec.policy import Specification

T = TypeVar("T")

logger = py_logging.getLogger(__name__)


def _validate(policy: Specification) -> float:
    if isinstance(policy.max_retries, bool) or not isinstance(policy.max_retries, int):
        raise ConfigurationError(
            f"Invalid max retries: {policy.max_retries!r}, no attempt was made.",
            hint="Use a non-negative integer.",
        )
    if policy.max_retries < 0:
        raise ConfigurationError(
            f"Invalid max retries: {policy.max_retries}, no attempt was made.",
            hint="Use zero for a single attempt without retries.",
        )
    return validate_seed(policy.first_retry_delay)


def _wait(
    delay: float,
    *,
    cancel: threading.Event | None,
    deadline: float | None,
    sleep: Callable[[float], None] | None,
) -> bool:
    """Suspend for ``delay`` seconds; return True when the call should be abandoned."""
    truncated = False
    if deadline is not None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return True
        if delay >= remaining:
            delay = remaining
            truncated = True

    if sleep is not None:
        sleep(delay)
        interrupted = cancel is not None and cancel.is_set()
    elif cancel is not None:
        interrupted = cancel.wait(delay)
    else:
        time.sleep(delay)
        interrupted = False
    return interrupted or truncated


def _run_fallback(fallback: Callable[[], Any], last_error: Exception) -> Any:
    logger.info("Retries exhausted, running fallback last_error=%r", last_error)
    try:
        return fallback()
    except Exception as exc:
        logger.error("Fallback failed error=%r", exc)
        raise FallbackError(
            "Error in fallback.",
            hint=f"Last attempt failed with: {last_error}",
            last_error=last_error,
        ) from exc


def run_with_retry(
    operation: Callable[[], T],
    *,
    policy: Specification,
    cancel: threading.Event | None = None,
    deadline: float | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T | Any:
    """Run ``operation`` until it succeeds or the policy gives up.

    Returns the operation's result, or the fallback's result once every
    attempt failed and the fallback succeeded. Raises:

    * ``ConfigurationError`` for an invalid policy; the operation is never called.
    * the attempt's own exception, unchanged, when its root cause is one of the
      policy's sentinels. The error handler and fallback are skipped.
    * the last attempt's exception after exhaustion when no fallback is set.
    * ``FallbackError`` chained to the fallback's exception when it fails too.
    * ``RetryCancelledError`` chained to the last attempt's exception when
      ``cancel`` is set or ``deadline`` (a ``time.monotonic()`` value) passes
      during a backoff wait.
    """
    seed = _validate(policy)
    total_attempts = policy.max_retries + 1
    delays = fibonacci_delays(seed)
    last_error: Exception | None = None

    for attempt in range(1, total_attempts + 1):
        logger.debug("Running attempt=%s/%s", attempt, total_attempts)
        try:
            return operation()
        except Exception as exc:
            if matches_any(exc, policy.dont_retry_on):
                logger.info("Attempt failed with non-retryable error attempt=%s error=%r", attempt, exc)
                raise
            logger.warning("Attempt failed attempt=%s/%s error=%r", attempt, total_attempts, exc)
            if policy.attempt_error_handler is not None:
                policy.attempt_error_handler(exc)
            last_error = exc

        if attempt >= total_attempts:
            break

        delay = next(delays)
        logger.debug("Backing off delay=%.3fs before attempt=%s", delay, attempt + 1)
        if _wait(delay, cancel=cancel, deadline=deadline, sleep=sleep):
            logger.warning("Retry cancelled during backoff after attempt=%s", attempt)
            raise RetryCancelledError(
                "Retry was cancelled during backoff.",
                hint="The cancellation token fired or the deadline passed.",
                attempts=attempt,
            ) from last_error

    if last_error is None:
        raise RuntimeError("Retry policy exhausted without executing operation.")

    if policy.fallback is not None:
        return _run_fallback(policy.fallback, last_error)

    logger.error("Retries exhausted attempts=%s error=%r", total_attempts, last_error)
    raise last_error
