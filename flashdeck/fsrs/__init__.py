"""
FSRS - Free Spaced Repetition Scheduler

Scheduling engine for the flashcard client.

This package implements the FSRS-4.5 model as pure computation:
- Memory model: stability / difficulty updates per rating
- Interval scheduler: power forgetting curve R = (1 + FACTOR * t/S) ** DECAY
- Card state machine: New -> Learning -> Review <-> Relearning
- Preview of the due time for each answer button

Nothing here touches storage. Callers pass a CardMemoryState in and
persist the one that comes back.

Quick start:
    from flashdeck import fsrs

    config = fsrs.SchedulerConfig.from_env()
    card = fsrs.new_card("card-1")

    # Preview the four buttons
    preview = fsrs.preview_outcomes(card, config, now)

    # Commit a review
    card = fsrs.schedule_review(card, fsrs.ReviewEvent(fsrs.Rating.GOOD, now), config)
"""

# Core scheduler API (algorithm logic)
from flashdeck.fsrs.scheduler import schedule_review, build_outcomes
from flashdeck.fsrs.preview import ReviewPreview, preview_outcomes, format_time_until

# Configuration
from flashdeck.fsrs.config import SchedulerConfig, parse_weights

# Errors
from flashdeck.fsrs.errors import (
    FlashdeckError,
    ConfigError,
    InvalidRatingError,
    InvalidStateError,
)

# Constants and parameters
from flashdeck.fsrs.constants import (
    Rating,
    CardPhase,
    DECAY,
    FACTOR,
    S_MIN,
    D_MIN,
    D_MAX,
    WEIGHT_COUNT,
    DEFAULT_WEIGHTS,
)

# Memory state (for advanced usage)
from flashdeck.fsrs.memory_state import (
    CardMemoryState,
    ReviewEvent,
    new_card,
    parse_rating,
    calculate_retrievability,
    retrievability_at,
    validate_card_state,
)
from flashdeck.fsrs.memory_model import update_memory
from flashdeck.fsrs.intervals import next_interval, next_interval_with_fuzz, fuzz_seed


__all__ = [
    # Core algorithm
    "schedule_review",
    "build_outcomes",
    "preview_outcomes",
    "ReviewPreview",
    "format_time_until",
    "update_memory",
    "next_interval",
    "next_interval_with_fuzz",
    "fuzz_seed",

    # Configuration
    "SchedulerConfig",
    "parse_weights",

    # Errors
    "FlashdeckError",
    "ConfigError",
    "InvalidRatingError",
    "InvalidStateError",

    # Enums
    "Rating",
    "CardPhase",

    # Memory state
    "CardMemoryState",
    "ReviewEvent",
    "new_card",
    "parse_rating",
    "calculate_retrievability",
    "retrievability_at",
    "validate_card_state",

    # Parameters
    "DECAY",
    "FACTOR",
    "S_MIN",
    "D_MIN",
    "D_MAX",
    "WEIGHT_COUNT",
    "DEFAULT_WEIGHTS",
]
