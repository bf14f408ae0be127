"""
Scheduler - Card State Machine

Pure FSRS scheduling (no persistence, no logging).

Main workflow:
1. Validate config, rating and card (caller's card is never modified)
2. Compute elapsed days and update memory (memory_model)
3. Pick the next lifecycle state and its delay (step table or intervals)
4. Return a new CardMemoryState for the caller to persist

Transitions:
    New        + Again/Hard/Good -> Learning (first step)
    New        + Easy            -> Review
    Learning   + Again           -> Learning (first step)
    Learning   + Hard/Good       -> next step, or Review after the last one
    Learning   + Easy            -> Review
    Review     + Again           -> Relearning (lapses + 1)
    Review     + Hard/Good/Easy  -> Review
    Relearning + Again           -> Relearning (first step)
    Relearning + Hard/Good/Easy  -> Review

With enable_short_term off the step tables are skipped: every delay comes
from the interval scheduler, and New/Learning cards rated Hard or Good
graduate straight to Review.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from flashdeck.fsrs import intervals, memory_model
from flashdeck.fsrs.config import SchedulerConfig
from flashdeck.fsrs.constants import CardPhase, Rating
from flashdeck.fsrs.memory_state import (
    CardMemoryState,
    ReviewEvent,
    elapsed_days_between,
    parse_rating,
    validate_card_state,
)


@dataclass(frozen=True)
class _Transition:
    state: CardPhase
    stability: float
    difficulty: float
    step: int
    scheduled_days: int
    lapses: int
    step_delay: Optional[timedelta] = None  # Set when the delay comes from a step table


def schedule_review(
    card: CardMemoryState,
    event: ReviewEvent,
    config: SchedulerConfig
) -> CardMemoryState:
    """
    Commit one review and return the card's next state.

    This is the core FSRS entry point. No persistence.
    Caller is responsible for:
    1. Loading the card
    2. Saving the returned card
    3. Serializing concurrent reviews of the same card

    Args:
        card: Current state of the card (may be new)
        event: Rating and review timestamp
        config: Scheduler configuration

    Returns:
        New CardMemoryState with reps incremented and due set

    Raises:
        ConfigError: config is malformed
        InvalidRatingError: rating is not Again/Hard/Good/Easy
        InvalidStateError: card fields are inconsistent
    """
    config.validate()
    rating = parse_rating(event.rating)
    validate_card_state(card, event.reviewed_at)

    return build_outcomes(card, event.reviewed_at, config)[rating]


def build_outcomes(
    card: CardMemoryState,
    reviewed_at: datetime,
    config: SchedulerConfig
) -> dict[Rating, CardMemoryState]:
    """
    Compute the committed state for all four ratings at once.

    Both schedule_review and the preview use this, so a preview always
    matches what the commit would produce. Inputs must already be validated.
    """
    elapsed = elapsed_days_between(card.last_review_at, reviewed_at)
    seed = intervals.fuzz_seed(card.card_id, card.due or reviewed_at)

    transitions = {
        rating: _transition(card, rating, elapsed, config, seed)
        for rating in Rating
    }
    _order_review_intervals(transitions, config.maximum_interval)

    return {
        rating: _commit(card, transition, reviewed_at, elapsed)
        for rating, transition in transitions.items()
    }


def _transition(
    card: CardMemoryState,
    rating: Rating,
    elapsed: int,
    config: SchedulerConfig,
    seed: str
) -> _Transition:
    stability, difficulty = memory_model.update_memory(
        card.stability, card.difficulty, elapsed, rating, config
    )

    if config.enable_short_term:
        learning_steps = config.learning_steps
        relearning_steps = config.relearning_steps
    else:
        learning_steps = relearning_steps = ()

    def graduate() -> _Transition:
        days = intervals.scheduled_interval(stability, config, seed)
        return _Transition(CardPhase.REVIEW, stability, difficulty, 0, days, card.lapses)

    def enter_step(state: CardPhase, steps: tuple[timedelta, ...], index: int, lapses: int) -> _Transition:
        if index < len(steps):
            delay = steps[index]
            return _Transition(state, stability, difficulty, index, delay.days, lapses, delay)
        days = intervals.scheduled_interval(stability, config, seed)
        return _Transition(state, stability, difficulty, 0, days, lapses)

    if card.state is CardPhase.NEW:
        if rating == Rating.EASY:
            return graduate()
        if rating == Rating.AGAIN or learning_steps:
            return enter_step(CardPhase.LEARNING, learning_steps, 0, card.lapses)
        return graduate()

    if card.state is CardPhase.LEARNING:
        if rating == Rating.AGAIN:
            return enter_step(CardPhase.LEARNING, learning_steps, 0, card.lapses)
        if rating == Rating.EASY:
            return graduate()
        next_step = card.step + 1
        if next_step < len(learning_steps):
            return enter_step(CardPhase.LEARNING, learning_steps, next_step, card.lapses)
        return graduate()

    if card.state is CardPhase.REVIEW:
        if rating == Rating.AGAIN:
            return enter_step(CardPhase.RELEARNING, relearning_steps, 0, card.lapses + 1)
        return graduate()

    # Relearning
    if rating == Rating.AGAIN:
        return enter_step(CardPhase.RELEARNING, relearning_steps, 0, card.lapses)
    return graduate()


def _order_review_intervals(
    transitions: dict[Rating, _Transition],
    maximum_interval: int
) -> None:
    """
    Keep Hard <= Good < Easy among outcomes that land in Review (modifies in place).

    Fuzz or a mix of step/interval outcomes could otherwise invert the
    button order. Easy can only tie Good when both sit at maximum_interval.
    """
    def in_review(rating: Rating) -> bool:
        transition = transitions[rating]
        return transition.state is CardPhase.REVIEW and transition.step_delay is None

    if in_review(Rating.HARD) and in_review(Rating.GOOD):
        hard = transitions[Rating.HARD]
        good = transitions[Rating.GOOD]
        hard_days = min(hard.scheduled_days, good.scheduled_days)
        good_days = min(max(good.scheduled_days, hard_days + 1), maximum_interval)
        transitions[Rating.HARD] = replace(hard, scheduled_days=hard_days)
        transitions[Rating.GOOD] = replace(good, scheduled_days=good_days)

    if in_review(Rating.GOOD) and in_review(Rating.EASY):
        good = transitions[Rating.GOOD]
        easy = transitions[Rating.EASY]
        easy_days = min(max(easy.scheduled_days, good.scheduled_days + 1), maximum_interval)
        transitions[Rating.EASY] = replace(easy, scheduled_days=easy_days)


def _commit(
    card: CardMemoryState,
    transition: _Transition,
    reviewed_at: datetime,
    elapsed: int
) -> CardMemoryState:
    if transition.step_delay is not None:
        delay = transition.step_delay
    else:
        delay = timedelta(days=transition.scheduled_days)

    return replace(
        card,
        state=transition.state,
        stability=transition.stability,
        difficulty=transition.difficulty,
        elapsed_days=elapsed,
        scheduled_days=transition.scheduled_days,
        step=transition.step,
        reps=card.reps + 1,
        lapses=transition.lapses,
        due=reviewed_at + delay,
        last_review_at=reviewed_at,
    )
