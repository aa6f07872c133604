"""Schedule-aware date arithmetic for weekly habits.

Weekdays are indexed 0=Sunday..6=Saturday, matching the stored
``Habit.days_of_week`` values. Every walk is bounded: a non-empty weekly
schedule recurs within seven days.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional, Protocol, Sequence

from ..errors import ConfigurationError

ONE_DAY = timedelta(days=1)
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WEEKDAYS = frozenset({1, 2, 3, 4, 5})
WEEKENDS = frozenset({0, 6})


class ScheduledHabit(Protocol):
    """Anything carrying a weekly schedule and a creation date."""

    id: Optional[int]
    days_of_week: Sequence[int]
    created_on: date


def weekday_index(day: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""

    return day.isoweekday() % 7


def validate_schedule(days: Iterable[int] | None) -> frozenset[int]:
    """Return the schedule as a frozenset, rejecting empty or out-of-range input."""

    schedule = frozenset(days or ())
    if not schedule:
        raise ConfigurationError("A habit must be scheduled on at least one weekday")
    for value in schedule:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
            raise ConfigurationError(f"Invalid weekday index {value!r}; expected 0-6")
    return schedule


def schedule_of(habit: ScheduledHabit) -> frozenset[int]:
    return validate_schedule(habit.days_of_week)


def is_scheduled(habit: ScheduledHabit, day: date) -> bool:
    return weekday_index(day) in schedule_of(habit)


def _walk_back(schedule: frozenset[int], day: date) -> date:
    while weekday_index(day) not in schedule:
        day -= ONE_DAY
    return day


def walk_back(habit: ScheduledHabit, from_date: date) -> date:
    """Return ``from_date`` if scheduled, else the nearest earlier scheduled date."""

    return _walk_back(schedule_of(habit), from_date)


def previous_scheduled(habit: ScheduledHabit, day: date) -> date:
    """Return the nearest scheduled date strictly before ``day``."""

    return _walk_back(schedule_of(habit), day - ONE_DAY)


def next_scheduled(habit: ScheduledHabit, day: date) -> date:
    """Return the nearest scheduled date strictly after ``day``."""

    schedule = schedule_of(habit)
    day += ONE_DAY
    while weekday_index(day) not in schedule:
        day += ONE_DAY
    return day


@dataclass(frozen=True, slots=True)
class ScheduledDates:
    """Scheduled dates in ``[start, end]``, ascending.

    Iteration is lazy and every ``iter()`` call restarts the walk from ``start``.
    """

    schedule: frozenset[int]
    start: date
    end: date

    def __iter__(self) -> Iterator[date]:
        cursor = self.start
        while cursor <= self.end:
            if weekday_index(cursor) in self.schedule:
                yield cursor
            cursor += ONE_DAY

    def __reversed__(self) -> Iterator[date]:
        cursor = self.end
        while cursor >= self.start:
            if weekday_index(cursor) in self.schedule:
                yield cursor
            cursor -= ONE_DAY

    def __len__(self) -> int:
        if self.end < self.start:
            return 0
        weeks, rest = divmod((self.end - self.start).days + 1, 7)
        first = weekday_index(self.start)
        tail = sum(1 for offset in range(rest) if (first + offset) % 7 in self.schedule)
        return weeks * len(self.schedule) + tail

    def __contains__(self, day: object) -> bool:
        return (
            isinstance(day, date)
            and self.start <= day <= self.end
            and weekday_index(day) in self.schedule
        )


def enumerate_scheduled(habit: ScheduledHabit, start: date, end: date) -> ScheduledDates:
    """All scheduled dates of ``habit`` in ``[start, end]`` inclusive."""

    return ScheduledDates(schedule_of(habit), start, end)


def schedule_label(days: Iterable[int]) -> str:
    """Human label for a schedule: Everyday, Weekdays, Weekends or a day list."""

    schedule = validate_schedule(days)
    if len(schedule) == 7:
        return "Everyday"
    if schedule == WEEKDAYS:
        return "Weekdays"
    if schedule == WEEKENDS:
        return "Weekends"
    return ", ".join(DAY_NAMES[index] for index in sorted(schedule))


__all__ = [
    "DAY_NAMES",
    "ONE_DAY",
    "ScheduledDates",
    "ScheduledHabit",
    "enumerate_scheduled",
    "is_scheduled",
    "next_scheduled",
    "previous_scheduled",
    "schedule_label",
    "schedule_of",
    "validate_schedule",
    "walk_back",
    "weekday_index",
]
