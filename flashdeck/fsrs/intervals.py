"""
Interval Scheduler

Turns a stability value into a review interval in whole days:

    I(S, r) = S / FACTOR * (r ** (1 / DECAY) - 1)

which is the t solving R(t, S) = r on the forgetting curve. Intervals are
clamped to [1, maximum_interval] and can optionally be fuzzed inside a
window that widens with the interval length.
"""

from __future__ import annotations
import math
import random
from datetime import datetime

from flashdeck.fsrs.config import SchedulerConfig
from flashdeck.fsrs.constants import DECAY, FACTOR, FUZZ_MIN_INTERVAL, FUZZ_RANGES


def fuzz_seed(card_id: str, anchor: datetime) -> str:
    """
    Seed for fuzzing a card's next interval.

    Derived from the card id and its current due date (or the review time
    for cards that were never scheduled), so re-running the same review
    reproduces the same interval.
    """
    return f"{card_id}:{anchor.isoformat()}"


def raw_interval(stability: float, request_retention: float) -> float:
    """Unrounded number of days until retrievability decays to request_retention."""
    return stability / FACTOR * (math.pow(request_retention, 1.0 / DECAY) - 1.0)


def _clamp(days: float, maximum_interval: int) -> int:
    return max(1, min(maximum_interval, int(round(days))))


def next_interval(stability: float, config: SchedulerConfig) -> int:
    """
    Whole-day interval for a stability value, without fuzz.

    Raises:
        ConfigError: if the config is invalid
    """
    config.validate()
    return _interval(stability, config)


def fuzz_range(interval: float, maximum_interval: int) -> tuple[int, int]:
    """
    Inclusive (min, max) window a fuzzed interval is drawn from.

    delta = 1 + sum(factor * days of the interval inside each band)
    """
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(interval, end) - start, 0.0)

    low = max(2, int(round(interval - delta)))
    high = min(int(round(interval + delta)), maximum_interval)
    low = min(low, high)
    return low, high


def next_interval_with_fuzz(stability: float, config: SchedulerConfig, seed: str) -> int:
    """
    Whole-day interval for a stability value, fuzzed when enable_fuzz is set.

    Short intervals (under FUZZ_MIN_INTERVAL days) are never fuzzed. The
    jitter comes from a random.Random seeded with `seed`, never from the
    global generator, so the result is reproducible.

    Raises:
        ConfigError: if the config is invalid
    """
    config.validate()
    return scheduled_interval(stability, config, seed)


def scheduled_interval(stability: float, config: SchedulerConfig, seed: str) -> int:
    """
    Same as next_interval_with_fuzz for a config that is already validated.

    The scheduler validates once per review and calls this for each rating.
    """
    interval = _interval(stability, config)
    if not config.enable_fuzz or interval < FUZZ_MIN_INTERVAL:
        return interval

    low, high = fuzz_range(float(interval), config.maximum_interval)
    rng = random.Random(seed)
    return _clamp(rng.randint(low, high), config.maximum_interval)


def _interval(stability: float, config: SchedulerConfig) -> int:
    return _clamp(raw_interval(stability, config.request_retention), config.maximum_interval)
