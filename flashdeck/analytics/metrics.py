"""
Metric computations over a deck snapshot.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from flashdeck.fsrs.constants import CardPhase
from flashdeck.fsrs.memory_state import CardMemoryState, retrievability_at


FRAME_COLUMNS = [
    "card_id",
    "state",
    "stability",
    "difficulty",
    "reps",
    "lapses",
    "due",
    "retrievability",
]


def cards_frame(pool: Sequence[CardMemoryState], now: datetime) -> pd.DataFrame:
    """
    One row per card with its current retrievability (NaN for new cards).
    """
    if not pool:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    rows = [
        {
            "card_id": card.card_id,
            "state": card.state.value,
            "stability": card.stability,
            "difficulty": card.difficulty,
            "reps": card.reps,
            "lapses": card.lapses,
            "due": card.due,
            "retrievability": retrievability_at(card, now),
        }
        for card in pool
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["due"] = pd.to_datetime(df["due"], utc=True)
    df["retrievability"] = df["retrievability"].astype("float64")
    return df


def state_counts(pool: Sequence[CardMemoryState]) -> dict[str, int]:
    """
    Number of cards per lifecycle state (every state present, zero if unused).
    """
    counts = pd.Series([card.state.value for card in pool], dtype="object").value_counts()
    return {phase.value: int(counts.get(phase.value, 0)) for phase in CardPhase}


def count_due_now(df: pd.DataFrame, now: datetime) -> int:
    if df.empty:
        return 0
    return int((df["due"].notna() & (df["due"] <= pd.Timestamp(now))).sum())


def mean_retrievability(df: pd.DataFrame) -> Optional[float]:
    """
    Mean recall probability of reviewed cards, or None when none has been reviewed.
    """
    if df.empty or df["retrievability"].isna().all():
        return None
    return float(df["retrievability"].mean())


def due_forecast(
    pool: Sequence[CardMemoryState],
    now: datetime,
    days: int = 7
) -> pd.Series:
    """
    Cards coming due on each of the next `days` UTC days.

    Overdue cards are counted on the first day. New cards are not scheduled
    and are left out.
    """
    start = pd.Timestamp(now).tz_convert("UTC").floor("D")
    day_index = pd.date_range(start=start, periods=max(days, 0), freq="D")

    offsets = [
        max(0, (pd.Timestamp(card.due).tz_convert("UTC").floor("D") - start).days)
        for card in pool
        if card.due is not None
    ]
    counts = pd.Series(offsets, dtype="int64").value_counts()
    return pd.Series(
        [int(counts.get(offset, 0)) for offset in range(len(day_index))],
        index=day_index,
        dtype="int64",
    )
