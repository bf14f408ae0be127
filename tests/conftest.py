from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from flashdeck.fsrs import CardMemoryState, CardPhase, SchedulerConfig


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> SchedulerConfig:
    return SchedulerConfig()


@pytest.fixture
def make_card() -> Callable[..., CardMemoryState]:
    """Build a reviewed card last seen `elapsed` days before NOW and due at NOW (unless overridden)."""

    def _make(
        card_id: str = "card-1",
        state: CardPhase = CardPhase.REVIEW,
        stability: float = 10.0,
        difficulty: float = 5.0,
        elapsed: float = 10,
        due: datetime | None = None,
        reps: int = 5,
        lapses: int = 0,
        step: int = 0,
        scheduled_days: int = 10,
    ) -> CardMemoryState:
        last_review_at = NOW - timedelta(days=elapsed)
        return CardMemoryState(
            card_id=card_id,
            state=state,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=0,
            scheduled_days=scheduled_days,
            step=step,
            reps=reps,
            lapses=lapses,
            due=due if due is not None else NOW,
            last_review_at=last_review_at,
        )

    return _make
