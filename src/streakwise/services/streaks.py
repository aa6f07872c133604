"""Streak and miss calculations for a single habit as of a reference date.

Only scheduled dates on or after ``habit.created_on`` take part. The reference
date is "today" for these calculations: an uncompleted reference date neither
breaks the current streak nor counts as a miss, since its slot is still open.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Iterable, Optional

from ..errors import DataInconsistencyError
from ..logging_config import get_logger
from .schedule import (
    ONE_DAY,
    ScheduledHabit,
    enumerate_scheduled,
    previous_scheduled,
    schedule_of,
    walk_back,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DerivedStats:
    """Per-habit statistics as of ``reference_date``."""

    habit_id: Optional[int]
    reference_date: date
    completed_count: int = 0
    missed_count: int = 0
    current_streak: int = 0
    highest_streak: int = 0
    highest_miss_streak: int = 0


def _as_set(completed_dates: Iterable[date]) -> AbstractSet[date]:
    if isinstance(completed_dates, (set, frozenset)):
        return completed_dates
    return frozenset(completed_dates)


def lifetime_completions(habit: ScheduledHabit, completed_dates: Iterable[date]) -> frozenset[date]:
    """Drop (and log) completions recorded before the habit was created."""

    valid = set()
    for day in completed_dates:
        if day < habit.created_on:
            problem = DataInconsistencyError(habit.id, day, habit.created_on)
            logger.warning(
                f"{problem}; ignoring record",
                extra={"habit_id": habit.id, "completed_on": day.isoformat()},
            )
            continue
        valid.add(day)
    return frozenset(valid)


def current_streak(
    habit: ScheduledHabit, completed_dates: Iterable[date], reference_date: date
) -> int:
    """Count consecutive completed scheduled dates ending at or near ``reference_date``."""

    if reference_date < habit.created_on:
        return 0
    completed = _as_set(completed_dates)

    streak = 0
    cursor = walk_back(habit, reference_date)
    while cursor >= habit.created_on:
        if cursor in completed:
            streak += 1
        elif cursor != reference_date:
            break
        cursor = previous_scheduled(habit, cursor)
    return streak


def lifetime_extremes(
    habit: ScheduledHabit, completed_dates: Iterable[date], reference_date: date
) -> tuple[int, int]:
    """Return ``(highest_streak, highest_miss_streak)`` over the habit's lifetime."""

    completed = _as_set(completed_dates)
    highest = highest_miss = 0
    running = running_miss = 0
    for day in enumerate_scheduled(habit, habit.created_on, reference_date):
        if day in completed:
            running += 1
            running_miss = 0
            highest = max(highest, running)
        elif day == reference_date:
            continue
        else:
            running_miss += 1
            running = 0
            highest_miss = max(highest_miss, running_miss)
    return highest, highest_miss


def missed_count(
    habit: ScheduledHabit, completed_dates: Iterable[date], reference_date: date
) -> int:
    """Scheduled dates in ``[created_on, reference_date)`` with no completion."""

    completed = _as_set(completed_dates)
    window = enumerate_scheduled(habit, habit.created_on, reference_date - ONE_DAY)
    return sum(1 for day in window if day not in completed)


def completed_count(
    habit: ScheduledHabit, completed_dates: Iterable[date], reference_date: date
) -> int:
    """Scheduled dates in ``[created_on, reference_date]`` carrying a completion."""

    window = enumerate_scheduled(habit, habit.created_on, reference_date)
    return sum(1 for day in _as_set(completed_dates) if day in window)


def derive_stats(
    habit: ScheduledHabit, completed_dates: Iterable[date], reference_date: date
) -> DerivedStats:
    """Compute every per-habit statistic in one pass over sanitised inputs."""

    schedule_of(habit)
    if reference_date < habit.created_on:
        return DerivedStats(habit_id=habit.id, reference_date=reference_date)

    completed = lifetime_completions(habit, completed_dates)
    highest, highest_miss = lifetime_extremes(habit, completed, reference_date)
    return DerivedStats(
        habit_id=habit.id,
        reference_date=reference_date,
        completed_count=completed_count(habit, completed, reference_date),
        missed_count=missed_count(habit, completed, reference_date),
        current_streak=current_streak(habit, completed, reference_date),
        highest_streak=highest,
        highest_miss_streak=highest_miss,
    )


__all__ = [
    "DerivedStats",
    "completed_count",
    "current_streak",
    "derive_stats",
    "lifetime_completions",
    "lifetime_extremes",
    "missed_count",
]
