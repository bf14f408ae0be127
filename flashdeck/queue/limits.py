"""
Daily limits and per-deck progress counters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from dotenv import load_dotenv

from flashdeck.fsrs.config import env_optional_int
from flashdeck.fsrs.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyLimits:
    """
    Per-deck daily caps. None means unlimited.
    """
    new_cards_per_day: Optional[int] = None
    max_reviews_per_day: Optional[int] = None

    def validate(self) -> None:
        for name in ("new_cards_per_day", "max_reviews_per_day"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer or None, got {value!r}")

    def remaining_new(self, progress: DailyProgress) -> Optional[int]:
        if self.new_cards_per_day is None:
            return None
        return max(0, self.new_cards_per_day - progress.new_cards_seen)

    def remaining_reviews(self, progress: DailyProgress) -> Optional[int]:
        if self.max_reviews_per_day is None:
            return None
        return max(0, self.max_reviews_per_day - progress.review_cards_seen)

    def allows_new(self, progress: DailyProgress) -> bool:
        remaining = self.remaining_new(progress)
        return remaining is None or remaining > 0

    def allows_review(self, progress: DailyProgress) -> bool:
        remaining = self.remaining_reviews(progress)
        return remaining is None or remaining > 0

    @classmethod
    def from_env(cls) -> DailyLimits:
        """Read NEW_CARDS_PER_DAY and MAX_REVIEWS_PER_DAY (unset or empty = unlimited)."""
        load_dotenv()
        limits = cls(
            new_cards_per_day=env_optional_int("NEW_CARDS_PER_DAY"),
            max_reviews_per_day=env_optional_int("MAX_REVIEWS_PER_DAY"),
        )
        limits.validate()
        logger.debug(
            "Loaded daily limits: new_cards_per_day=%s max_reviews_per_day=%s",
            limits.new_cards_per_day,
            limits.max_reviews_per_day,
        )
        return limits


@dataclass(frozen=True)
class DailyProgress:
    """
    Cards served today for one deck.

    The caller owns the day boundary: use rolled_over() with its own local
    date to start fresh counters after midnight.
    """
    new_cards_seen: int = 0
    review_cards_seen: int = 0
    day: Optional[date] = None

    @classmethod
    def for_day(cls, day: date) -> DailyProgress:
        return cls(day=day)

    def rolled_over(self, day: date) -> DailyProgress:
        """Fresh counters if `day` differs from the stored day, else self."""
        if self.day == day:
            return self
        return DailyProgress.for_day(day)

    def with_new_card(self) -> DailyProgress:
        return replace(self, new_cards_seen=self.new_cards_seen + 1)

    def with_review_card(self) -> DailyProgress:
        return replace(self, review_cards_seen=self.review_cards_seen + 1)
