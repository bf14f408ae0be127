from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from flashdeck.fsrs import (
    D_MAX,
    D_MIN,
    S_MIN,
    CardPhase,
    ConfigError,
    InvalidRatingError,
    InvalidStateError,
    Rating,
    ReviewEvent,
    SchedulerConfig,
    new_card,
    schedule_review,
)


def review(card, rating, at, config):
    return schedule_review(card, ReviewEvent(rating=rating, reviewed_at=at), config)


# ---- New cards ----

def test_new_card_rated_good_enters_first_learning_step(config, now) -> None:
    card = review(new_card("c1"), Rating.GOOD, now, config)

    assert card.state is CardPhase.LEARNING
    assert card.step == 0
    assert card.reps == 1
    assert card.scheduled_days == config.learning_steps[0].days
    assert card.due == now + config.learning_steps[0]
    assert card.last_review_at == now
    assert card.elapsed_days == 0


def test_first_learning_step_length_sets_scheduled_days(config, now) -> None:
    day_steps = replace(config, learning_steps=(timedelta(days=1), timedelta(days=3)))

    card = review(new_card("c1"), Rating.GOOD, now, day_steps)

    assert card.state is CardPhase.LEARNING
    assert card.scheduled_days == 1
    assert card.due == now + timedelta(days=1)


@pytest.mark.parametrize("rating", [Rating.AGAIN, Rating.HARD, Rating.GOOD])
def test_new_card_enters_learning(config, now, rating) -> None:
    card = review(new_card("c1"), rating, now, config)
    assert card.state is CardPhase.LEARNING
    assert card.lapses == 0


def test_new_card_rated_easy_graduates_to_review(config, now) -> None:
    card = review(new_card("c1"), Rating.EASY, now, config)

    assert card.state is CardPhase.REVIEW
    assert card.step == 0
    assert 1 <= card.scheduled_days <= config.maximum_interval
    assert card.due == now + timedelta(days=card.scheduled_days)


# ---- Learning ----

def test_learning_walks_through_steps_then_graduates(config, now) -> None:
    card = review(new_card("c1"), Rating.GOOD, now, config)

    at = card.due
    card = review(card, Rating.GOOD, at, config)
    assert card.state is CardPhase.LEARNING
    assert card.step == 1
    assert card.due == at + config.learning_steps[1]

    at = card.due
    card = review(card, Rating.GOOD, at, config)
    assert card.state is CardPhase.REVIEW
    assert card.reps == 3
    assert card.scheduled_days >= 1
    assert card.due == at + timedelta(days=card.scheduled_days)


def test_learning_hard_advances_a_step(config, now) -> None:
    card = review(new_card("c1"), Rating.GOOD, now, config)
    card = review(card, Rating.HARD, card.due, config)

    assert card.state is CardPhase.LEARNING
    assert card.step == 1


def test_learning_again_resets_to_first_step(config, now) -> None:
    card = review(new_card("c1"), Rating.GOOD, now, config)
    card = review(card, Rating.GOOD, card.due, config)
    assert card.step == 1

    at = card.due
    card = review(card, Rating.AGAIN, at, config)
    assert card.state is CardPhase.LEARNING
    assert card.step == 0
    assert card.due == at + config.learning_steps[0]
    assert card.lapses == 0


def test_learning_easy_graduates_immediately(config, now) -> None:
    card = review(new_card("c1"), Rating.AGAIN, now, config)
    card = review(card, Rating.EASY, card.due, config)

    assert card.state is CardPhase.REVIEW
    assert card.scheduled_days >= 1


# ---- Review ----

def test_review_success_stays_in_review(config, make_card, now) -> None:
    card = make_card()
    for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
        result = review(card, rating, now, config)
        assert result.state is CardPhase.REVIEW
        assert result.stability > card.stability
        assert result.lapses == 0
        assert result.elapsed_days == 10


def test_review_intervals_order_hard_good_easy(config, make_card, now) -> None:
    card = make_card(stability=10.0, difficulty=5.0)
    hard, good, easy = (
        review(card, rating, now, config).scheduled_days
        for rating in (Rating.HARD, Rating.GOOD, Rating.EASY)
    )
    assert hard <= good < easy


def test_easy_beats_good_for_reference_review_card(make_card, now) -> None:
    config = SchedulerConfig(request_retention=0.9, maximum_interval=365, enable_fuzz=False)
    card = make_card(stability=10.0, difficulty=5.0)

    good = review(card, Rating.GOOD, now, config)
    easy = review(card, Rating.EASY, now, config)

    assert easy.scheduled_days > good.scheduled_days


def test_easy_ties_good_only_at_maximum_interval(config, make_card, now) -> None:
    capped = replace(config, maximum_interval=5)
    card = make_card(stability=10.0)

    good = review(card, Rating.GOOD, now, capped)
    easy = review(card, Rating.EASY, now, capped)

    assert good.scheduled_days == easy.scheduled_days == 5


@pytest.mark.parametrize("stability", [0.5, 2.0, 10.0, 120.0, 3000.0])
@pytest.mark.parametrize("difficulty", [D_MIN, 5.0, D_MAX])
@pytest.mark.parametrize("elapsed", [0, 3, 40])
def test_lapse_shrinks_stability_and_counts(config, make_card, now, stability, difficulty, elapsed) -> None:
    card = make_card(stability=stability, difficulty=difficulty, elapsed=elapsed, lapses=2)

    result = review(card, Rating.AGAIN, now, config)

    assert result.state is CardPhase.RELEARNING
    assert result.stability < card.stability
    assert result.lapses == 3
    assert result.step == 0
    assert result.due == now + config.relearning_steps[0]


def test_lapse_below_stability_floor_is_rejected(config, make_card, now) -> None:
    card = make_card(stability=0.05)
    snapshot = replace(card)

    with pytest.raises(InvalidStateError):
        review(card, Rating.AGAIN, now, config)

    assert card == snapshot


def test_lapse_at_stability_floor_never_grows(config, make_card, now) -> None:
    card = make_card(stability=S_MIN, difficulty=D_MAX)

    result = review(card, Rating.AGAIN, now, config)

    assert result.state is CardPhase.RELEARNING
    assert result.stability == S_MIN


# ---- Relearning ----

def test_relearning_again_stays_and_keeps_lapses(config, make_card, now) -> None:
    card = review(make_card(), Rating.AGAIN, now, config)

    at = card.due
    again = review(card, Rating.AGAIN, at, config)

    assert again.state is CardPhase.RELEARNING
    assert again.step == 0
    assert again.lapses == card.lapses
    assert again.due == at + config.relearning_steps[0]


@pytest.mark.parametrize("rating", [Rating.HARD, Rating.GOOD, Rating.EASY])
def test_relearning_success_returns_to_review(config, make_card, now, rating) -> None:
    card = review(make_card(), Rating.AGAIN, now, config)
    at = card.due

    result = review(card, rating, at, config)

    assert result.state is CardPhase.REVIEW
    assert 1 <= result.scheduled_days <= config.maximum_interval
    assert result.due == at + timedelta(days=result.scheduled_days)
    assert result.lapses == 1


# ---- Short-term disabled ----

def test_without_short_term_new_cards_skip_steps(config, now) -> None:
    long_term = replace(config, enable_short_term=False)

    good = review(new_card("c1"), Rating.GOOD, now, long_term)
    again = review(new_card("c1"), Rating.AGAIN, now, long_term)

    assert good.state is CardPhase.REVIEW
    assert good.scheduled_days >= 1
    assert again.state is CardPhase.LEARNING
    assert again.scheduled_days >= 1
    assert again.due == now + timedelta(days=again.scheduled_days)


def test_without_short_term_lapse_uses_interval(config, make_card, now) -> None:
    long_term = replace(config, enable_short_term=False)

    result = review(make_card(), Rating.AGAIN, now, long_term)

    assert result.state is CardPhase.RELEARNING
    assert result.scheduled_days >= 1
    assert result.due == now + timedelta(days=result.scheduled_days)


def test_without_short_term_learning_graduates_on_good(config, now) -> None:
    long_term = replace(config, enable_short_term=False)
    card = review(new_card("c1"), Rating.AGAIN, now, long_term)

    result = review(card, Rating.GOOD, card.due, long_term)

    assert result.state is CardPhase.REVIEW


# ---- Invariants ----

def test_scheduling_is_deterministic(config, make_card, now) -> None:
    card = make_card()
    event = ReviewEvent(rating=Rating.GOOD, reviewed_at=now)
    assert schedule_review(card, event, config) == schedule_review(card, event, config)


def test_fuzzed_scheduling_is_reproducible(config, make_card, now) -> None:
    fuzzy = replace(config, enable_fuzz=True)
    card = make_card(stability=40.0, elapsed=40)
    event = ReviewEvent(rating=Rating.GOOD, reviewed_at=now)
    assert schedule_review(card, event, fuzzy) == schedule_review(card, event, fuzzy)


@pytest.mark.parametrize(
    "state", [CardPhase.LEARNING, CardPhase.REVIEW, CardPhase.RELEARNING]
)
@pytest.mark.parametrize("rating", list(Rating))
@pytest.mark.parametrize("stability", [0.3, 4.0, 60.0, 900.0])
def test_results_stay_in_bounds(config, make_card, now, state, rating, stability) -> None:
    bounded = replace(config, maximum_interval=180, enable_fuzz=True)
    card = make_card(state=state, stability=stability, difficulty=9.5, elapsed=5)

    result = review(card, rating, now, bounded)

    assert D_MIN <= result.difficulty <= D_MAX
    assert result.stability > 0
    assert result.reps == card.reps + 1
    assert result.lapses >= card.lapses
    if result.due - now >= timedelta(days=1):
        assert 1 <= result.scheduled_days <= bounded.maximum_interval


def test_invalid_rating_commits_nothing(config, make_card, now) -> None:
    card = make_card()
    snapshot = replace(card)

    with pytest.raises(InvalidRatingError):
        review(card, 5, now, config)

    assert card == snapshot


def test_inconsistent_card_is_rejected(config, now) -> None:
    corrupt = replace(new_card("c1"), reps=3)
    with pytest.raises(InvalidStateError):
        review(corrupt, Rating.GOOD, now, config)


def test_bad_config_is_rejected(config, now) -> None:
    with pytest.raises(ConfigError):
        review(new_card("c1"), Rating.GOOD, now, replace(config, weights=(1.0, 2.0)))


def test_review_event_defaults_to_now(config) -> None:
    card = schedule_review(new_card("c1"), ReviewEvent(rating="good"), config)
    assert card.last_review_at is not None
    assert card.last_review_at.tzinfo is not None


@pytest.mark.parametrize("fuzz", [False, True])
def test_config_is_validated_once_per_review(config, make_card, now, monkeypatch, fuzz) -> None:
    calls = []
    original = SchedulerConfig.validate

    def counting_validate(self):
        calls.append(self)
        return original(self)

    monkeypatch.setattr(SchedulerConfig, "validate", counting_validate)

    review(make_card(stability=40.0, elapsed=40), Rating.GOOD, now, replace(config, enable_fuzz=fuzz))

    assert len(calls) == 1
