"""
Daily queue - picks the next card to study in a deck.

Priority order:
1. Due Learning/Review/Relearning cards, earliest due first (ties by card id)
2. New cards, by card id, while under the new-card cap
3. Otherwise report why nothing was served: empty deck, all caught up,
   or daily limit reached

The queue only reads state tags and due timestamps. Counters are passed in
and returned; nothing is kept between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from flashdeck.fsrs.constants import CardPhase
from flashdeck.fsrs.errors import InvalidStateError
from flashdeck.fsrs.memory_state import CardMemoryState, validate_card_state
from flashdeck.queue.limits import DailyLimits, DailyProgress


EMPTY_DECK_MESSAGE = "This deck doesn't have any cards yet. Add some cards to start reviewing!"
ALL_CAUGHT_UP_MESSAGE = "You're all caught up! No cards due for review at this time."
DAILY_LIMIT_MESSAGE = "You've reached your daily review limits for this deck. Come back later!"


class QueueStatus(str, Enum):
    SELECTED = "selected"
    ALL_CAUGHT_UP = "all_caught_up"
    EMPTY_DECK = "empty_deck"
    DAILY_LIMIT_REACHED = "daily_limit_reached"


@dataclass(frozen=True)
class SelectionResult:
    """
    Outcome of one selection.

    `progress` is the updated counters when a card was selected and the
    unchanged input otherwise.
    """
    status: QueueStatus
    progress: DailyProgress
    limits: DailyLimits
    card: Optional[CardMemoryState] = None
    message: Optional[str] = None

    @property
    def is_selected(self) -> bool:
        return self.status is QueueStatus.SELECTED


def split_pool(
    pool: Sequence[CardMemoryState],
    now: datetime
) -> tuple[list[CardMemoryState], list[CardMemoryState]]:
    """
    Split a deck snapshot into (due non-new cards, new cards), both in serving order.
    """
    due_cards = [
        card for card in pool
        if card.state is not CardPhase.NEW and card.due <= now
    ]
    due_cards.sort(key=lambda card: (card.due, card.card_id))

    new_cards = [card for card in pool if card.state is CardPhase.NEW]
    new_cards.sort(key=lambda card: card.card_id)

    return due_cards, new_cards


def select_next_card(
    pool: Sequence[CardMemoryState],
    progress: DailyProgress,
    limits: DailyLimits,
    now: datetime
) -> SelectionResult:
    """
    Select the next card to serve from a deck.

    Args:
        pool: Every card in the deck (not only due ones)
        progress: Today's counters for this deck
        limits: Daily caps for this deck
        now: Current time (timezone-aware)

    Returns:
        SelectionResult; on selection the matching counter is incremented

    Raises:
        ConfigError: limits are malformed
        InvalidStateError: a card in the pool is inconsistent, or now is naive
    """
    limits.validate()

    if not pool:
        return SelectionResult(QueueStatus.EMPTY_DECK, progress, limits, message=EMPTY_DECK_MESSAGE)

    if now.tzinfo is None:
        raise InvalidStateError(f"now must be timezone-aware, got {now!r}")
    for card in pool:
        validate_card_state(card)

    due_cards, new_cards = split_pool(pool, now)

    if due_cards and limits.allows_review(progress):
        return SelectionResult(
            QueueStatus.SELECTED, progress.with_review_card(), limits, card=due_cards[0]
        )

    if new_cards and limits.allows_new(progress):
        return SelectionResult(
            QueueStatus.SELECTED, progress.with_new_card(), limits, card=new_cards[0]
        )

    if due_cards or new_cards:
        return SelectionResult(
            QueueStatus.DAILY_LIMIT_REACHED, progress, limits, message=DAILY_LIMIT_MESSAGE
        )

    return SelectionResult(QueueStatus.ALL_CAUGHT_UP, progress, limits, message=ALL_CAUGHT_UP_MESSAGE)


def plan_session(
    pool: Sequence[CardMemoryState],
    progress: DailyProgress,
    limits: DailyLimits,
    now: datetime,
    size: Optional[int] = None
) -> list[CardMemoryState]:
    """
    Cards select_next_card would serve in sequence, assuming none is
    reviewed in between. Stops at `size` cards or when nothing is left.
    """
    remaining = list(pool)
    session: list[CardMemoryState] = []

    while size is None or len(session) < size:
        result = select_next_card(remaining, progress, limits, now)
        if not result.is_selected:
            break
        session.append(result.card)
        progress = result.progress
        remaining = [card for card in remaining if card.card_id != result.card.card_id]

    return session
