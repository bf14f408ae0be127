"""
Analytics package exports.
"""

from flashdeck.analytics.metrics import cards_frame, due_forecast, state_counts
from flashdeck.analytics.service import build_deck_summary
from flashdeck.analytics.types import DeckSummary

__all__ = [
    "build_deck_summary",
    "cards_frame",
    "due_forecast",
    "state_counts",
    "DeckSummary",
]
