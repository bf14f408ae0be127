"""
Scheduler configuration.

SchedulerConfig is an immutable value passed into every engine call.
It can be built directly or loaded from the environment (and an optional
.env file) with SchedulerConfig.from_env().
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv

from flashdeck.fsrs.constants import (
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    WEIGHT_COUNT,
)
from flashdeck.fsrs.errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SchedulerConfig:
    """Parameters of the FSRS model and the step tables around it."""

    request_retention: float = DEFAULT_REQUEST_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    enable_fuzz: bool = False
    enable_short_term: bool = True
    learning_steps: tuple[timedelta, ...] = DEFAULT_LEARNING_STEPS
    relearning_steps: tuple[timedelta, ...] = DEFAULT_RELEARNING_STEPS

    def validate(self) -> None:
        """
        Reject malformed configuration. Values are never clamped or defaulted.

        Raises:
            ConfigError: describing the first problem found
        """
        retention = self.request_retention
        if isinstance(retention, bool) or not isinstance(retention, (int, float)):
            raise ConfigError(f"request_retention must be a number, got {retention!r}")
        if not 0 < retention <= 1:
            raise ConfigError(f"request_retention must be within (0, 1], got {retention}")

        if isinstance(self.maximum_interval, bool) or not isinstance(self.maximum_interval, int):
            raise ConfigError(
                f"maximum_interval must be an integer, got {self.maximum_interval!r}"
            )
        if self.maximum_interval < 1:
            raise ConfigError(f"maximum_interval must be >= 1, got {self.maximum_interval}")

        if len(self.weights) != WEIGHT_COUNT:
            raise ConfigError(
                f"weights must contain exactly {WEIGHT_COUNT} values, got {len(self.weights)}"
            )
        for index, weight in enumerate(self.weights):
            if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
                raise ConfigError(f"weights[{index}] must be a finite number, got {weight!r}")

        if self.enable_short_term:
            for name in ("learning_steps", "relearning_steps"):
                steps = getattr(self, name)
                if not steps:
                    raise ConfigError(f"{name} must not be empty while short-term scheduling is enabled")
                if any(step <= timedelta(0) for step in steps):
                    raise ConfigError(f"{name} must all be positive durations")

    @classmethod
    def from_env(cls) -> SchedulerConfig:
        """
        Construct a validated config from environment variables.

        Reads FSRS_REQUEST_RETENTION, FSRS_MAXIMUM_INTERVAL, FSRS_WEIGHTS,
        FSRS_ENABLE_FUZZ, FSRS_ENABLE_SHORT_TERM, FSRS_LEARNING_STEPS and
        FSRS_RELEARNING_STEPS. Unset variables keep their defaults.
        """
        load_dotenv()

        request_retention = _env_float("FSRS_REQUEST_RETENTION", DEFAULT_REQUEST_RETENTION)
        maximum_interval = _env_int("FSRS_MAXIMUM_INTERVAL", DEFAULT_MAXIMUM_INTERVAL)

        raw_weights = os.getenv("FSRS_WEIGHTS")
        weights = parse_weights(raw_weights) if raw_weights else DEFAULT_WEIGHTS

        config = cls(
            request_retention=request_retention,
            maximum_interval=maximum_interval,
            weights=weights,
            enable_fuzz=_env_bool("FSRS_ENABLE_FUZZ", False),
            enable_short_term=_env_bool("FSRS_ENABLE_SHORT_TERM", True),
            learning_steps=_env_steps("FSRS_LEARNING_STEPS", DEFAULT_LEARNING_STEPS),
            relearning_steps=_env_steps("FSRS_RELEARNING_STEPS", DEFAULT_RELEARNING_STEPS),
        )
        config.validate()

        logger.debug(
            "Loaded scheduler config: retention=%s maximum_interval=%s fuzz=%s short_term=%s custom_weights=%s",
            config.request_retention,
            config.maximum_interval,
            config.enable_fuzz,
            config.enable_short_term,
            raw_weights is not None,
        )
        return config


def parse_weights(text: str) -> tuple[float, ...]:
    """
    Parse a comma-separated weights string such as "0.4, 1.18, 3.1".

    Only the format is checked here; the length is checked by validate().
    """
    try:
        return tuple(float(part.strip()) for part in text.split(","))
    except ValueError as exc:
        raise ConfigError("Invalid weights format. Please enter comma-separated numbers.") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def env_optional_int(name: str) -> Optional[int]:
    """
    Read an optional integer from the environment, shared by every env loader.

    Unset or blank means None (no limit). Range checks are left to the
    caller's validate().

    Raises:
        ConfigError: if the value is not an integer
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_steps(name: str, default: tuple[timedelta, ...]) -> tuple[timedelta, ...]:
    """Steps are given in minutes, e.g. FSRS_LEARNING_STEPS="1, 10"."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return tuple(timedelta(minutes=float(part.strip())) for part in raw.split(","))
    except ValueError as exc:
        raise ConfigError(f"{name} must be comma-separated minutes, got {raw!r}") from exc
