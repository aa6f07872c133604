"""Completion-rate calculations over arbitrary date windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..errors import ConfigurationError
from .dates import add_months, month_end, month_start
from .schedule import DAY_NAMES, ScheduledHabit, enumerate_scheduled, weekday_index
from .streaks import current_streak

CompletedByHabit = Mapping[Optional[int], Iterable[date]]


class NamedHabit(ScheduledHabit, Protocol):
    """A scheduled habit that also carries a display name."""

    name: str


def percentage(actual: int, possible: int) -> int:
    """Return ``100 * actual / possible`` rounded half-up; 0 when nothing was possible."""

    if possible <= 0:
        return 0
    value = Decimal(100 * actual) / Decimal(possible)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class RateTally:
    """Scheduled (possible) and completed (actual) day counts for a window."""

    possible: int = 0
    actual: int = 0

    def __add__(self, other: "RateTally") -> "RateTally":
        return RateTally(self.possible + other.possible, self.actual + other.actual)

    @property
    def percentage(self) -> int:
        return percentage(self.actual, self.possible)


@dataclass(frozen=True, slots=True)
class RateTrend:
    """A window's completion rate compared with its comparable window."""

    rate: int
    previous_rate: int
    trend: int

    @classmethod
    def between(cls, rate: int, previous_rate: int) -> "RateTrend":
        return cls(rate=rate, previous_rate=previous_rate, trend=rate - previous_rate)


@dataclass(frozen=True, slots=True)
class DayConsistency:
    day: date
    label: str
    value: int
    is_reference: bool = False


@dataclass(frozen=True, slots=True)
class HabitPerformance:
    habit_id: Optional[int]
    name: str
    streak: int
    percentage: int


def tally(
    habit: ScheduledHabit,
    completed_dates: Iterable[date],
    window_start: date,
    window_end: date,
) -> RateTally:
    """Count possible and actual completions of one habit inside a window.

    Days before the habit existed are not possible, so the window is clipped to
    start no earlier than ``habit.created_on``.
    """

    window = enumerate_scheduled(habit, max(window_start, habit.created_on), window_end)
    actual = sum(1 for day in set(completed_dates) if day in window)
    return RateTally(possible=len(window), actual=actual)


def completion_rate(
    habits: Iterable[ScheduledHabit],
    completed_by_habit: CompletedByHabit,
    window_start: date,
    window_end: date,
) -> int:
    """Aggregate completion percentage of a batch of habits over ``[start, end]``."""

    total = RateTally()
    for habit in habits:
        total += tally(habit, completed_by_habit.get(habit.id, ()), window_start, window_end)
    return total.percentage


def comparable_window(window_start: date, window_end: date) -> tuple[date, date]:
    """Return the window a trend compares against.

    A window opening on the 1st of a month compares with the previous month over
    the same elapsed days, clamped to that month's end. Any other window
    compares with the immediately preceding span of equal length.
    """

    if window_start.day == 1 and (window_start.year, window_start.month) == (
        window_end.year,
        window_end.month,
    ):
        return add_months(window_start, -1), add_months(window_end, -1)
    length = timedelta(days=max((window_end - window_start).days + 1, 1))
    return window_start - length, window_start - timedelta(days=1)


def rate_trend(
    habits: Sequence[ScheduledHabit],
    completed_by_habit: CompletedByHabit,
    window_start: date,
    window_end: date,
) -> RateTrend:
    previous_start, previous_end = comparable_window(window_start, window_end)
    return RateTrend.between(
        completion_rate(habits, completed_by_habit, window_start, window_end),
        completion_rate(habits, completed_by_habit, previous_start, previous_end),
    )


def month_window(month: date, today: date) -> tuple[date, date] | None:
    """Window for a calendar month as seen on ``today``.

    The current month runs to today, a past month to its last day, and a future
    month has no window at all.
    """

    start = month_start(month)
    if start > month_start(today):
        return None
    if start == month_start(today):
        return start, today
    return start, month_end(start)


def rolling_window(reference_date: date, days: int) -> tuple[date, date]:
    """The ``days``-long window ending on ``reference_date`` inclusive."""

    if days < 1:
        raise ConfigurationError(f"Rolling window must span at least one day, got {days}")
    return reference_date - timedelta(days=days - 1), reference_date


def weekly_consistency(
    habits: Sequence[ScheduledHabit],
    completed_by_habit: CompletedByHabit,
    reference_date: date,
) -> list[DayConsistency]:
    """Single-day completion rates for the seven days ending on ``reference_date``."""

    points = []
    for offset in range(6, -1, -1):
        day = reference_date - timedelta(days=offset)
        points.append(
            DayConsistency(
                day=day,
                label=DAY_NAMES[weekday_index(day)],
                value=completion_rate(habits, completed_by_habit, day, day),
                is_reference=offset == 0,
            )
        )
    return points


def top_performers(
    habits: Iterable[NamedHabit],
    completed_by_habit: CompletedByHabit,
    reference_date: date,
    *,
    limit: int = 3,
    window_days: int = 30,
) -> list[HabitPerformance]:
    """Rank habits by rolling-window consistency, then by current streak."""

    window_start, window_end = rolling_window(reference_date, window_days)
    ranked = []
    for habit in habits:
        completed = frozenset(completed_by_habit.get(habit.id, ()))
        ranked.append(
            HabitPerformance(
                habit_id=habit.id,
                name=habit.name,
                streak=current_streak(habit, completed, reference_date),
                percentage=tally(habit, completed, window_start, window_end).percentage,
            )
        )
    ranked.sort(key=lambda item: (-item.percentage, -item.streak))
    return ranked[:limit]


__all__ = [
    "DayConsistency",
    "HabitPerformance",
    "RateTally",
    "RateTrend",
    "comparable_window",
    "completion_rate",
    "month_window",
    "percentage",
    "rate_trend",
    "rolling_window",
    "tally",
    "top_performers",
    "weekly_consistency",
]
