"""Retry settings loaded from TOML files and the environment."""

from __future__ import annotations

import logging as py_logging
import math
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from retryspec.logging import LOG_LEVELS, configure_logging, normalize_level
from retryspec.policy import DEFAULT_FIRST_RETRY_DELAY, DEFAULT_MAX_RETRIES, Specification

DEFAULT_SETTINGS_PATH = Path("~/.config/retryspec/config.toml").expanduser()
DEFAULT_SECTION = "retry"
DEFAULT_LOG_LEVEL = "INFO"

ENV_MAX_RETRIES = "RETRYSPEC_MAX_RETRIES"
ENV_FIRST_RETRY_DELAY = "RETRYSPEC_FIRST_RETRY_DELAY"
ENV_LOG_LEVEL = "RETRYSPEC_LOG_LEVEL"
ENV_ATTEMPT_LOG_LEVEL = "RETRYSPEC_ATTEMPT_LOG_LEVEL"


class RetrySection(TypedDict, total=False):
    max_retries: int
    first_retry_delay: float
    log_level: str
    attempt_log_level: str


def _checked_level(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}")
    return normalized


class RetrySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    first_retry_delay: float = Field(default=DEFAULT_FIRST_RETRY_DELAY, gt=0, allow_inf_nan=False)
    log_level: str = DEFAULT_LOG_LEVEL
    attempt_log_level: str | None = None

    @field_validator("attempt_log_level")
    @classmethod
    def _validate_attempt_log_level(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return _checked_level(value)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        return _checked_level(value)

    def to_specification(self) -> Specification:
        return Specification(
            max_retries=self.max_retries,
            first_retry_delay=self.first_retry_delay,
        )


def get_settings_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_SETTINGS_PATH
    return Path(path).expanduser()


def _sanitize(raw: Mapping[str, object]) -> RetrySettings:
    cfg = RetrySettings()

    max_retries = raw.get("max_retries", cfg.max_retries)
    if isinstance(max_retries, int) and not isinstance(max_retries, bool) and max_retries >= 0:
        cfg.max_retries = max_retries

    first_retry_delay = raw.get("first_retry_delay", cfg.first_retry_delay)
    if (
        isinstance(first_retry_delay, (int, float))
        and not isinstance(first_retry_delay, bool)
        and math.isfinite(first_retry_delay)
        and first_retry_delay > 0
    ):
        cfg.first_retry_delay = float(first_retry_delay)

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in LOG_LEVELS:
        cfg.log_level = log_level

    attempt_log_level = raw.get("attempt_log_level")
    if isinstance(attempt_log_level, str) and normalize_level(attempt_log_level) in LOG_LEVELS:
        cfg.attempt_log_level = attempt_log_level

    return cfg


def _read_section(path: Path, section: str) -> RetrySection:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    payload = raw.get(section, {})
    if not isinstance(payload, dict):
        return {}
    return payload  # type: ignore[return-value]


def _apply_environment(cfg: RetrySettings, environ: Mapping[str, str]) -> RetrySettings:
    updates: dict[str, object] = {}
    if ENV_MAX_RETRIES in environ:
        updates["max_retries"] = environ[ENV_MAX_RETRIES].strip()
    if ENV_FIRST_RETRY_DELAY in environ:
        updates["first_retry_delay"] = environ[ENV_FIRST_RETRY_DELAY].strip()
    if ENV_LOG_LEVEL in environ:
        updates["log_level"] = environ[ENV_LOG_LEVEL]
    if ENV_ATTEMPT_LOG_LEVEL in environ:
        updates["attempt_log_level"] = environ[ENV_ATTEMPT_LOG_LEVEL]

    for name, value in updates.items():
        try:
            setattr(cfg, name, value)
        except ValidationError:
            continue
    return cfg


def load_settings(
    path: str | Path | None = None,
    *,
    section: str = DEFAULT_SECTION,
    environ: Mapping[str, str] | None = None,
) -> RetrySettings:
    """Load settings from ``[section]`` of a TOML file, then environment overrides.

    Missing or unreadable files and invalid values fall back to defaults.
    """
    resolved = get_settings_path(path)
    cfg = _sanitize(_read_section(resolved, section))
    return _apply_environment(cfg, os.environ if environ is None else environ)


def configure_logging_from(settings: RetrySettings, *, stream: TextIO | None = None) -> py_logging.Logger:
    return configure_logging(
        settings.log_level,
        attempt_level=settings.attempt_log_level,
        stream=stream,
    )
