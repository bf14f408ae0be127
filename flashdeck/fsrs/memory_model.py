"""
Memory Model - Stability and Difficulty Updates

Pure functions mapping (prior stability, prior difficulty, elapsed days,
rating) to the next (stability, difficulty) pair, driven by the 17-value
weight vector of the FSRS-4.5 model.

Key principles:
- Successful recall grows stability, more so when the review came late
  (low retrievability) and less so for difficult cards
- Hard recall grows stability less than Good, Easy grows it more
- Forgetting always shrinks stability, never below S_MIN
- Difficulty moves with the rating and drifts back toward a neutral value
"""

from __future__ import annotations
import math
from typing import Optional, Sequence

from flashdeck.fsrs.config import SchedulerConfig
from flashdeck.fsrs.constants import (
    Rating,
    S_MIN,
    D_MIN,
    D_MAX,
    LAPSE_STABILITY_CAP,
)
from flashdeck.fsrs.memory_state import calculate_retrievability


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def initial_stability(rating: Rating, weights: Sequence[float]) -> float:
    """
    Stability after the very first review: S0(G) = w[G-1].
    """
    return max(S_MIN, weights[rating - 1])


def initial_difficulty(rating: Rating, weights: Sequence[float]) -> float:
    """
    Difficulty after the very first review: D0(G) = w4 - w5 * (G - 3).

    Good lands on w4; Again/Hard start harder, Easy starts easier.
    """
    return clamp_difficulty(weights[4] - weights[5] * (rating - 3))


def next_difficulty(
    difficulty: float,
    rating: Rating,
    weights: Sequence[float]
) -> float:
    """
    Update difficulty after a review.

    Formula:
        D' = D - w6 * (G - 3)
        D'' = w7 * D0(Good) + (1 - w7) * D'

    The mean-reversion term pulls every card slightly toward the neutral
    starting difficulty so repeated ratings cannot pin it to a bound.
    """
    moved = difficulty - weights[6] * (rating - 3)
    neutral = initial_difficulty(Rating.GOOD, weights)
    reverted = weights[7] * neutral + (1.0 - weights[7]) * moved
    return clamp_difficulty(reverted)


def next_recall_stability(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: Rating,
    weights: Sequence[float]
) -> float:
    """
    Update stability after successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * p(G))

    Where p(G) is w15 for Hard, w16 for Easy and 1 for Good.
    (1 - R) rewards recall that happened later than the curve predicted.
    """
    if rating == Rating.AGAIN:
        raise ValueError("Use next_forget_stability for AGAIN ratings")

    hard_penalty = weights[15] if rating == Rating.HARD else 1.0
    easy_bonus = weights[16] if rating == Rating.EASY else 1.0

    growth = (
        math.exp(weights[8])
        * (11.0 - difficulty)
        * math.pow(stability, -weights[9])
        * (math.exp(weights[10] * (1.0 - retrievability)) - 1.0)
        * hard_penalty
        * easy_bonus
    )
    return max(S_MIN, stability * (1.0 + growth))


def next_forget_stability(
    stability: float,
    difficulty: float,
    retrievability: float,
    weights: Sequence[float]
) -> float:
    """
    Update stability after a lapse (Again).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))

    The result is capped below the prior stability so a lapse always
    shrinks memory, and floored at S_MIN. Card validation rejects any
    stability under S_MIN, so the floor never raises it.
    """
    forgotten = (
        weights[11]
        * math.pow(difficulty, -weights[12])
        * (math.pow(stability + 1.0, weights[13]) - 1.0)
        * math.exp(weights[14] * (1.0 - retrievability))
    )
    return max(S_MIN, min(forgotten, stability * LAPSE_STABILITY_CAP))


def update_memory(
    prior_stability: Optional[float],
    prior_difficulty: Optional[float],
    elapsed_days: int,
    rating: Rating,
    config: SchedulerConfig
) -> tuple[float, float]:
    """
    Main entry point: compute the memory state after one review.

    Cards with no prior stability take their initial values from the
    weights. Otherwise both values are updated from the prior state, using
    the retrievability at max(elapsed_days, 1) so same-day reviews stay
    finite.

    Args:
        prior_stability: Stability before the review (None if never reviewed)
        prior_difficulty: Difficulty before the review (None if never reviewed)
        elapsed_days: Whole days since the previous review
        rating: User rating
        config: Scheduler configuration (weights)

    Returns:
        (new_stability, new_difficulty)
    """
    weights = config.weights

    if prior_stability is None or prior_difficulty is None:
        return initial_stability(rating, weights), initial_difficulty(rating, weights)

    retrievability = calculate_retrievability(prior_stability, max(elapsed_days, 1))

    if rating == Rating.AGAIN:
        new_stability = next_forget_stability(
            prior_stability, prior_difficulty, retrievability, weights
        )
    else:
        new_stability = next_recall_stability(
            prior_stability, prior_difficulty, retrievability, rating, weights
        )

    # Stability uses the prior difficulty; difficulty is updated afterwards
    new_difficulty = next_difficulty(prior_difficulty, rating, weights)

    return new_stability, new_difficulty
