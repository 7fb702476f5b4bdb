"""Immutable retry specification and its chained configuration API."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from retryspec.backoff import Duration
from retryspec.retry import run_with_retry

Tryable = Callable[[], Any]
ErrorHandler = Callable[[Exception], None]

DEFAULT_MAX_RETRIES = 1
DEFAULT_FIRST_RETRY_DELAY = 1.0


@dataclass(frozen=True)
class Specification:
    """How to retry an operation.

    Every ``with_*`` style call returns a new specification and leaves the
    receiver untouched, so a partially configured value can serve as a
    template for several independent calls::

        base = configure().with_first_retry_delay(0.2).do_not_retry_on(NOT_FOUND)
        base.with_max_retries(3).run(fetch_profile)
        base.with_fallback(use_cached_profile).run(fetch_profile)

    The total number of attempts is ``1 + max_retries``. No value is checked
    here; ``run`` rejects an invalid specification before the first attempt.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    first_retry_delay: Duration = DEFAULT_FIRST_RETRY_DELAY
    dont_retry_on: tuple[Exception, ...] = ()
    attempt_error_handler: ErrorHandler | None = None
    fallback: Tryable | None = None

    def with_max_retries(self, retries: int) -> Specification:
        return replace(self, max_retries=retries)

    def with_first_retry_delay(self, delay: Duration) -> Specification:
        """Gap between the initial attempt and the first retry (seconds or timedelta)."""
        return replace(self, first_retry_delay=delay)

    def with_fallback(self, fallback: Tryable) -> Specification:
        return replace(self, fallback=fallback)

    def on_attempt_failure(self, handler: ErrorHandler) -> Specification:
        return replace(self, attempt_error_handler=handler)

    def do_not_retry_on(self, *errors: Exception) -> Specification:
        """Add sentinel exception instances that fail fast when found as root cause."""
        return replace(self, dont_retry_on=self.dont_retry_on + tuple(errors))

    def run(
        self,
        operation: Tryable,
        *,
        cancel: threading.Event | None = None,
        deadline: float | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> Any:
        return run_with_retry(
            operation,
            policy=self,
            cancel=cancel,
            deadline=deadline,
            sleep=sleep,
        )


def configure() -> Specification:
    """Specification with the defaults: one retry after one second."""
    return Specification()
