"""
FSRS Constants and Parameters

All fixed parameters for the scheduling engine in one place.
Tunable values (retention, weights, steps) live on SchedulerConfig;
these are the defaults and the curve constants shared by every module.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum, IntEnum
from typing import Final


# ---- Ratings ----

class Rating(IntEnum):
    """User feedback on a review, as sent by the four review buttons."""
    AGAIN = 1   # Recall failed
    HARD = 2    # Recalled with serious effort
    GOOD = 3    # Recalled normally
    EASY = 4    # Recalled effortlessly


# ---- Lifecycle ----

class CardPhase(str, Enum):
    """Lifecycle stage of a card."""
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


# ---- Forgetting Curve ----
# R(t, S) = (1 + FACTOR * t / S) ** DECAY, chosen so that R(S, S) = 0.9

DECAY: Final[float] = -0.5
FACTOR: Final[float] = 19 / 81


# ---- Bounds ----

S_MIN: Final[float] = 0.1     # Minimum stability (days)
D_MIN: Final[float] = 1.0     # Minimum difficulty
D_MAX: Final[float] = 10.0    # Maximum difficulty

# Lapse stability never exceeds this share of the prior stability
LAPSE_STABILITY_CAP: Final[float] = 0.9


# ---- Model Weights ----

WEIGHT_COUNT: Final[int] = 17

DEFAULT_WEIGHTS: Final[tuple[float, ...]] = (
    0.4072, 1.1829, 3.1262, 15.4722,  # w0-w3: initial stability per rating
    7.2102, 0.5316,                   # w4-w5: initial difficulty
    1.0651, 0.0234,                   # w6-w7: difficulty step, mean reversion
    1.616, 0.1544, 1.0824,            # w8-w10: recall stability growth
    1.9813, 0.0953, 0.2975, 2.2042,   # w11-w14: lapse stability
    0.2407,                           # w15: hard penalty
    2.9466,                           # w16: easy bonus
)


# ---- Scheduler Defaults ----

DEFAULT_REQUEST_RETENTION: Final[float] = 0.9
DEFAULT_MAXIMUM_INTERVAL: Final[int] = 365

DEFAULT_LEARNING_STEPS: Final[tuple[timedelta, ...]] = (
    timedelta(minutes=1),
    timedelta(minutes=10),
)
DEFAULT_RELEARNING_STEPS: Final[tuple[timedelta, ...]] = (
    timedelta(minutes=10),
)


# ---- Fuzz ----
# (start_days, end_days, factor): each band widens the fuzz window by
# factor * (days of the interval that fall inside the band)

FUZZ_MIN_INTERVAL: Final[float] = 2.5
FUZZ_RANGES: Final[tuple[tuple[float, float, float], ...]] = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, float("inf"), 0.05),
)
