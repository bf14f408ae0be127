"""
Memory State - Card State, Review Events and Retrievability

Defines the value types the engine computes over and the derived
quantities shared by every scheduling step.

Key concepts:
- Stability (S): How slowly memory decays (in days)
- Difficulty (D): How hard the card is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
import math

from flashdeck.fsrs.constants import CardPhase, Rating, DECAY, FACTOR, D_MIN, D_MAX, S_MIN
from flashdeck.fsrs.errors import InvalidRatingError, InvalidStateError


@dataclass(frozen=True)
class CardMemoryState:
    """
    Scheduling state for a single flashcard.

    Owned by the caller's persistence layer. The engine never mutates it;
    every review produces a new instance.
    """
    card_id: str
    state: CardPhase = CardPhase.NEW

    # Memory parameters (None until the first review)
    stability: Optional[float] = None  # S, in days
    difficulty: Optional[float] = None  # D, range 1-10

    # Interval bookkeeping
    elapsed_days: int = 0  # Days between the last two reviews
    scheduled_days: int = 0  # Interval assigned at the last review
    step: int = 0  # Position in the learning / relearning step table

    # Review tracking
    reps: int = 0
    lapses: int = 0
    due: Optional[datetime] = None
    last_review_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReviewEvent:
    """A single rating given to a card."""
    rating: Union[Rating, int, str]
    reviewed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def new_card(card_id: str) -> CardMemoryState:
    """Initialize state for a card that has never been reviewed."""
    return CardMemoryState(card_id=card_id)


def parse_rating(value: Union[Rating, int, str]) -> Rating:
    """
    Convert a button value into a Rating.

    Accepts Rating members, the integers 1-4, or the names
    "again", "hard", "good", "easy" (any case).

    Raises:
        InvalidRatingError: for anything else
    """
    if isinstance(value, bool):
        raise InvalidRatingError(f"Invalid rating: {value!r}")

    if isinstance(value, str):
        try:
            return Rating[value.strip().upper()]
        except KeyError:
            raise InvalidRatingError(f"Invalid rating: {value!r}") from None

    try:
        return Rating(value)
    except ValueError:
        raise InvalidRatingError(
            f"Invalid rating: {value!r} (expected 1=Again, 2=Hard, 3=Good, 4=Easy)"
        ) from None


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability using the power forgetting curve.

    Formula: R = (1 + FACTOR * t / S) ** DECAY

    Interpretation:
    - Immediately after review: R = 1.0
    - After t = S days: R = 0.9
    - R keeps decaying, but more slowly than an exponential would

    Args:
        stability: Current stability in days
        elapsed_days: Time since last review in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0

    return math.pow(1.0 + FACTOR * elapsed_days / stability, DECAY)


def elapsed_days_between(
    last_review_at: Optional[datetime],
    reviewed_at: datetime
) -> int:
    """Whole days since the last review (0 for cards never reviewed)."""
    if last_review_at is None:
        return 0

    return max(0, (reviewed_at - last_review_at) // timedelta(days=1))


def retrievability_at(card: CardMemoryState, now: datetime) -> Optional[float]:
    """Current recall probability of a card, or None for new cards."""
    if card.state is CardPhase.NEW or card.stability is None:
        return None

    delta = now - card.last_review_at
    return calculate_retrievability(card.stability, delta.total_seconds() / 86400.0)


def _require_aware(name: str, value: Optional[datetime]) -> None:
    if value is not None and value.tzinfo is None:
        raise InvalidStateError(f"{name} must be timezone-aware, got {value!r}")


def validate_card_state(
    card: CardMemoryState,
    reviewed_at: Optional[datetime] = None
) -> None:
    """
    Check a card's fields for internal consistency.

    The engine does not repair corrupt input; it refuses it.

    Raises:
        InvalidStateError: describing the first inconsistency found
    """
    if not isinstance(card.state, CardPhase):
        raise InvalidStateError(f"Card {card.card_id}: unknown state {card.state!r}")

    _require_aware("due", card.due)
    _require_aware("last_review_at", card.last_review_at)
    _require_aware("reviewed_at", reviewed_at)

    for name in ("elapsed_days", "scheduled_days", "step", "reps", "lapses"):
        if getattr(card, name) < 0:
            raise InvalidStateError(f"Card {card.card_id}: {name} must be >= 0")

    if card.state is CardPhase.NEW:
        if card.reps > 0:
            raise InvalidStateError(f"Card {card.card_id}: new card with reps={card.reps}")
        if card.due is not None:
            raise InvalidStateError(f"Card {card.card_id}: new card already has a due date")
        if card.lapses or card.step:
            raise InvalidStateError(f"Card {card.card_id}: new card with lapses or step set")
        if card.stability is not None or card.difficulty is not None:
            raise InvalidStateError(f"Card {card.card_id}: new card already has memory state")
        return

    if card.stability is None or not card.stability >= S_MIN or math.isinf(card.stability):
        raise InvalidStateError(
            f"Card {card.card_id}: stability must be at least {S_MIN}, got {card.stability!r}"
        )
    if card.difficulty is None or not D_MIN <= card.difficulty <= D_MAX:
        raise InvalidStateError(
            f"Card {card.card_id}: difficulty must be within [{D_MIN}, {D_MAX}], got {card.difficulty!r}"
        )
    if card.last_review_at is None or card.due is None:
        raise InvalidStateError(
            f"Card {card.card_id}: {card.state.value} card needs last_review_at and due"
        )
    if reviewed_at is not None and reviewed_at < card.last_review_at:
        raise InvalidStateError(
            f"Card {card.card_id}: review at {reviewed_at.isoformat()} predates "
            f"last review at {card.last_review_at.isoformat()}"
        )
