"""
Review preview - "time until due" for each answer button.

Runs the same transitions as schedule_review for all four ratings and
keeps only the resulting due timestamps. Nothing is committed.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

from flashdeck.fsrs.config import SchedulerConfig
from flashdeck.fsrs.constants import Rating
from flashdeck.fsrs.memory_state import CardMemoryState, parse_rating, validate_card_state
from flashdeck.fsrs.scheduler import build_outcomes


@dataclass(frozen=True)
class ReviewPreview:
    """Due timestamp the card would get for each rating."""
    again: datetime
    hard: datetime
    good: datetime
    easy: datetime

    def for_rating(self, rating: Union[Rating, int, str]) -> datetime:
        return getattr(self, parse_rating(rating).name.lower())

    def delays(self, now: datetime) -> dict[str, timedelta]:
        return {rating.name.lower(): self.for_rating(rating) - now for rating in Rating}

    def labels(self, now: datetime) -> dict[str, str]:
        return {
            rating.name.lower(): format_time_until(self.for_rating(rating), now)
            for rating in Rating
        }


def preview_outcomes(
    card: CardMemoryState,
    config: SchedulerConfig,
    now: datetime
) -> ReviewPreview:
    """
    Preview the due timestamp for every rating without committing.

    Each value equals the `due` that schedule_review would return for that
    rating with reviewed_at=now.

    Raises:
        ConfigError: config is malformed
        InvalidStateError: card fields are inconsistent
    """
    config.validate()
    validate_card_state(card, now)

    outcomes = build_outcomes(card, now, config)
    return ReviewPreview(
        again=outcomes[Rating.AGAIN].due,
        hard=outcomes[Rating.HARD].due,
        good=outcomes[Rating.GOOD].due,
        easy=outcomes[Rating.EASY].due,
    )


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_time_until(due: datetime, now: datetime) -> str:
    """
    Human label for a review button, e.g. "10 minutes", "3 hours", "tomorrow", "12 days".

    Under an hour shows minutes (at least 1), under a day shows hours,
    the next calendar day shows "tomorrow", anything else shows days.
    """
    delta = due - now

    if delta < timedelta(hours=1):
        minutes = max(1, round(delta.total_seconds() / 60))
        return _plural(minutes, "minute")

    hours = round(delta.total_seconds() / 3600)
    if hours < 24:
        return _plural(hours, "hour")

    if due.date() == (now + timedelta(days=1)).date():
        return "tomorrow"

    return _plural(round(hours / 24), "day")
