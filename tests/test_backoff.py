from __future__ import annotations

import itertools
import math
from datetime import timedelta

import pytest

from retryspec.backoff import fibonacci_delay, fibonacci_delays, to_seconds, validate_seed
from retryspec.errors import ConfigurationError, ErrorCode


def test_fibonacci_delay_sequence() -> None:
    assert [fibonacci_delay(1.0, index) for index in range(8)] == [1, 1, 2, 3, 5, 8, 13, 21]


def test_fibonacci_delays_generator_matches_pure_function() -> None:
    generated = list(itertools.islice(fibonacci_delays(0.25), 10))
    assert generated == [fibonacci_delay(0.25, index) for index in range(10)]


def test_fibonacci_delay_rejects_negative_index() -> None:
    with pytest.raises(ValueError):
        fibonacci_delay(1.0, -1)


def test_to_seconds_accepts_timedelta() -> None:
    assert to_seconds(timedelta(milliseconds=1500)) == 1.5


def test_to_seconds_rejects_bool() -> None:
    with pytest.raises(ConfigurationError):
        to_seconds(True)


@pytest.mark.parametrize("seed", [0, -0.001, math.inf, math.nan])
def test_validate_seed_rejects_invalid_values(seed: float) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_seed(seed)
    assert excinfo.value.code == ErrorCode.CONFIG_ERROR


def test_validate_seed_returns_float_seconds() -> None:
    assert validate_seed(2) == 2.0
    assert isinstance(validate_seed(2), float)
