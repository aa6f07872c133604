"""Typed errors surfaced by the statistics engine and its stores."""

from __future__ import annotations

from datetime import date


class StreakwiseError(Exception):
    """Base class for all Streakwise errors."""


class ConfigurationError(StreakwiseError, ValueError):
    """Invalid input such as an empty schedule or a malformed date key."""


class NotFoundError(StreakwiseError, LookupError):
    """A habit id did not resolve to a stored habit."""

    def __init__(self, habit_id: int):
        super().__init__(f"Habit {habit_id} not found")
        self.habit_id = habit_id


class DataInconsistencyError(StreakwiseError):
    """A completion was recorded before the habit existed.

    Never raised by the calculators: the offending record is logged and ignored.
    """

    def __init__(self, habit_id: int | None, completed_on: date, created_on: date):
        super().__init__(
            f"Completion {completed_on.isoformat()} for habit {habit_id} "
            f"predates creation on {created_on.isoformat()}"
        )
        self.habit_id = habit_id
        self.completed_on = completed_on
        self.created_on = created_on


__all__ = [
    "ConfigurationError",
    "DataInconsistencyError",
    "NotFoundError",
    "StreakwiseError",
]
