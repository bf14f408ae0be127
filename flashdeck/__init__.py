"""
Flashdeck scheduling engine.

Entry points for the persistence/API layer:
- schedule_review: commit one review
- preview_outcomes: due time for each answer button
- select_next_card: next card to serve from a deck
"""

from flashdeck.fsrs import preview_outcomes, schedule_review
from flashdeck.queue import select_next_card

__all__ = [
    "preview_outcomes",
    "schedule_review",
    "select_next_card",
]
