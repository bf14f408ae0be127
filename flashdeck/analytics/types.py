"""
Types for deck analytics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class DeckSummary:
    """
    Precomputed counts and series for one deck.
    """
    total: int
    new: int
    learning: int
    review: int
    relearning: int
    due_now: int
    mean_retrievability: Optional[float]
    due_forecast: pd.Series
