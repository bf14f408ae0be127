"""
Errors raised by the scheduling engine.

Every error is local to a single call: the engine validates its inputs
before computing anything, so a raised error means nothing was produced.
"""

from __future__ import annotations


class FlashdeckError(ValueError):
    """Base class for all engine errors."""


class ConfigError(FlashdeckError):
    """SchedulerConfig or DailyLimits is malformed. Fix the configuration before retrying."""


class InvalidRatingError(FlashdeckError):
    """Rating is not one of Again, Hard, Good, Easy."""


class InvalidStateError(FlashdeckError):
    """CardMemoryState has internally inconsistent fields."""
