"""
Service layer to assemble a deck summary from a card pool.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from flashdeck.analytics.metrics import (
    cards_frame,
    count_due_now,
    due_forecast,
    mean_retrievability,
    state_counts,
)
from flashdeck.analytics.types import DeckSummary
from flashdeck.fsrs.constants import CardPhase
from flashdeck.fsrs.memory_state import CardMemoryState


def build_deck_summary(
    pool: Sequence[CardMemoryState],
    now: datetime,
    forecast_days: int = 7
) -> DeckSummary:
    """
    Build the counts and forecast shown on a deck page.
    """
    df = cards_frame(pool, now)
    counts = state_counts(pool)

    return DeckSummary(
        total=len(pool),
        new=counts[CardPhase.NEW.value],
        learning=counts[CardPhase.LEARNING.value],
        review=counts[CardPhase.REVIEW.value],
        relearning=counts[CardPhase.RELEARNING.value],
        due_now=count_due_now(df, now),
        mean_retrievability=mean_retrievability(df),
        due_forecast=due_forecast(pool, now, forecast_days),
    )
