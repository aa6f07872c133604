"""Service module exports."""

from . import (
    dates,
    schedule,
    streaks,
    rates,
    trends,
    engine,
)

__all__ = [
    "dates",
    "engine",
    "rates",
    "schedule",
    "streaks",
    "trends",
]
