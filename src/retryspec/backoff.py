"""Fibonacci backoff delays."""

from __future__ import annotations

import math
from collections.abc import Iterator
from datetime import timedelta

from retryspec.errors import ConfigurationError

Duration = float | int | timedelta


def to_seconds(value: Duration) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"Invalid retry delay: {value!r}",
            hint="Use a number of seconds or a datetime.timedelta.",
        )
    return float(value)


def validate_seed(seed: Duration) -> float:
    seconds = to_seconds(seed)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigurationError(
            "Fibonacci start delay must be greater than 0, no attempt was made.",
            hint=f"Set a first retry delay above zero (got {seed!r}).",
        )
    return seconds


def fibonacci_delay(seed: float, index: int) -> float:
    """Delay before retry number ``index + 1``.

    delay(0) == delay(1) == seed, then each delay is the sum of the previous two.
    """
    if index < 0:
        raise ValueError(f"Invalid backoff index: {index}")
    previous, current = seed, seed
    for _ in range(index - 1):
        previous, current = current, previous + current
    return current


def fibonacci_delays(seed: float) -> Iterator[float]:
    previous, current = seed, seed
    yield previous
    while True:
        yield current
        previous, current = current, previous + current
