"""Daily queue selection for study sessions."""

from flashdeck.queue.limits import DailyLimits, DailyProgress
from flashdeck.queue.daily_queue import (
    QueueStatus,
    SelectionResult,
    plan_session,
    select_next_card,
    split_pool,
)

__all__ = [
    "DailyLimits",
    "DailyProgress",
    "QueueStatus",
    "SelectionResult",
    "plan_session",
    "select_next_card",
    "split_pool",
]
