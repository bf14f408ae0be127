from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from flashdeck.fsrs import DEFAULT_WEIGHTS, ConfigError, SchedulerConfig, parse_weights
from flashdeck.fsrs.config import env_optional_int
from flashdeck.queue import DailyLimits


ENV_VARS = [
    "FSRS_REQUEST_RETENTION",
    "FSRS_MAXIMUM_INTERVAL",
    "FSRS_WEIGHTS",
    "FSRS_ENABLE_FUZZ",
    "FSRS_ENABLE_SHORT_TERM",
    "FSRS_LEARNING_STEPS",
    "FSRS_RELEARNING_STEPS",
    "NEW_CARDS_PER_DAY",
    "MAX_REVIEWS_PER_DAY",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_are_valid() -> None:
    config = SchedulerConfig()
    config.validate()

    assert config.request_retention == 0.9
    assert config.maximum_interval == 365
    assert config.weights == DEFAULT_WEIGHTS
    assert config.enable_fuzz is False
    assert config.enable_short_term is True


@pytest.mark.parametrize(
    "changes",
    [
        {"request_retention": 0.0},
        {"request_retention": 1.2},
        {"request_retention": -0.5},
        {"maximum_interval": 0},
        {"maximum_interval": 10.5},
        {"weights": ()},
        {"weights": DEFAULT_WEIGHTS[:-1]},
        {"weights": DEFAULT_WEIGHTS + (1.0,)},
        {"weights": DEFAULT_WEIGHTS[:-1] + (float("nan"),)},
        {"learning_steps": ()},
        {"relearning_steps": (timedelta(0),)},
    ],
)
def test_invalid_config_is_rejected(changes) -> None:
    with pytest.raises(ConfigError):
        replace(SchedulerConfig(), **changes).validate()


def test_retention_of_one_is_allowed() -> None:
    SchedulerConfig(request_retention=1.0).validate()


def test_steps_may_be_empty_without_short_term() -> None:
    SchedulerConfig(enable_short_term=False, learning_steps=(), relearning_steps=()).validate()


def test_parse_weights() -> None:
    assert parse_weights("0.4, 1.2,3") == (0.4, 1.2, 3.0)
    with pytest.raises(ConfigError, match="comma-separated numbers"):
        parse_weights("0.4, abc, 3")


def test_config_from_env_defaults(clean_env) -> None:
    assert SchedulerConfig.from_env() == SchedulerConfig()


def test_config_from_env_overrides(clean_env) -> None:
    custom = ", ".join(str(w * 1.1) for w in DEFAULT_WEIGHTS)
    clean_env.setenv("FSRS_REQUEST_RETENTION", "0.85")
    clean_env.setenv("FSRS_MAXIMUM_INTERVAL", "180")
    clean_env.setenv("FSRS_WEIGHTS", custom)
    clean_env.setenv("FSRS_ENABLE_FUZZ", "true")
    clean_env.setenv("FSRS_ENABLE_SHORT_TERM", "no")
    clean_env.setenv("FSRS_LEARNING_STEPS", "5, 30")

    config = SchedulerConfig.from_env()

    assert config.request_retention == 0.85
    assert config.maximum_interval == 180
    assert config.weights == parse_weights(custom)
    assert config.enable_fuzz is True
    assert config.enable_short_term is False
    assert config.learning_steps == (timedelta(minutes=5), timedelta(minutes=30))


@pytest.mark.parametrize(
    "name, value",
    [
        ("FSRS_REQUEST_RETENTION", "high"),
        ("FSRS_REQUEST_RETENTION", "1.5"),
        ("FSRS_MAXIMUM_INTERVAL", "0"),
        ("FSRS_WEIGHTS", "1, 2, 3"),
        ("FSRS_ENABLE_FUZZ", "maybe"),
        ("FSRS_LEARNING_STEPS", "1, soon"),
    ],
)
def test_config_from_env_rejects_bad_values(clean_env, name, value) -> None:
    clean_env.setenv(name, value)
    with pytest.raises(ConfigError):
        SchedulerConfig.from_env()


def test_limits_from_env(clean_env) -> None:
    assert DailyLimits.from_env() == DailyLimits()

    clean_env.setenv("NEW_CARDS_PER_DAY", "20")
    clean_env.setenv("MAX_REVIEWS_PER_DAY", "")
    assert DailyLimits.from_env() == DailyLimits(new_cards_per_day=20)

    clean_env.setenv("MAX_REVIEWS_PER_DAY", "-3")
    with pytest.raises(ConfigError):
        DailyLimits.from_env()


def test_env_optional_int(clean_env) -> None:
    assert env_optional_int("NEW_CARDS_PER_DAY") is None

    clean_env.setenv("NEW_CARDS_PER_DAY", "  ")
    assert env_optional_int("NEW_CARDS_PER_DAY") is None

    clean_env.setenv("NEW_CARDS_PER_DAY", "15")
    assert env_optional_int("NEW_CARDS_PER_DAY") == 15

    clean_env.setenv("NEW_CARDS_PER_DAY", "lots")
    with pytest.raises(ConfigError, match="NEW_CARDS_PER_DAY"):
        env_optional_int("NEW_CARDS_PER_DAY")
