"""StatsEngine: the single entry point views use for habit statistics.

The engine holds only its collaborators. Each call fetches completion sets once
for the whole batch and runs the pure calculators in memory, so repeated calls
with the same stored data return identical results.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ..domain.repositories import HabitStore, LogStore
from ..logging_config import get_logger
from ..models.habit import Habit
from . import rates, trends
from .rates import RateTrend, comparable_window, month_window, rolling_window
from .schedule import schedule_of
from .streaks import DerivedStats, derive_stats

logger = get_logger(__name__)


class StatsEngine:
    """Derives streak, miss and rate statistics from the habit and log stores."""

    def __init__(
        self,
        habit_store: HabitStore,
        log_store: LogStore,
        *,
        window_days: int = 30,
        top_limit: int = 3,
    ):
        self.habit_store = habit_store
        self.log_store = log_store
        self.window_days = window_days
        self.top_limit = top_limit

    def _completions(
        self, habits: Iterable[Habit], start: date, end: date
    ) -> dict[int, set[date]]:
        ids = [habit.id for habit in habits if habit.id is not None]
        return self.log_store.get_completions(ids, (start, end))

    # ------------------------------------------------------------------
    # Per-habit statistics
    # ------------------------------------------------------------------
    def compute_for_habit(self, habit: Habit, reference_date: Optional[date] = None) -> DerivedStats:
        """Derived stats for one habit as of ``reference_date`` (default today)."""

        reference = reference_date or date.today()
        schedule_of(habit)
        if reference < habit.created_on:
            return DerivedStats(habit_id=habit.id, reference_date=reference)
        # Fetch from the beginning so records predating the habit get reported
        completions = self._completions([habit], date.min, reference)
        return derive_stats(habit, completions.get(habit.id, set()), reference)

    def stats_for_id(self, habit_id: int, reference_date: Optional[date] = None) -> DerivedStats:
        """Like compute_for_habit, resolving the habit first (NotFoundError if unknown)."""

        return self.compute_for_habit(self.habit_store.get(habit_id), reference_date)

    # ------------------------------------------------------------------
    # Batch rates
    # ------------------------------------------------------------------
    def compute_rate(self, habits: Iterable[Habit], window_start: date, window_end: date) -> int:
        """Completion percentage of ``habits`` over ``[window_start, window_end]``."""

        habits = list(habits)
        for habit in habits:
            schedule_of(habit)
        if not habits or window_end < window_start:
            return 0
        completions = self._completions(habits, window_start, window_end)
        return rates.completion_rate(habits, completions, window_start, window_end)

    def compute_trend(self, habits: Iterable[Habit], window_start: date, window_end: date) -> RateTrend:
        """Rate of the window and its difference from the comparable earlier window."""

        habits = list(habits)
        for habit in habits:
            schedule_of(habit)
        if not habits or window_end < window_start:
            return RateTrend.between(0, 0)
        previous_start, previous_end = comparable_window(window_start, window_end)
        completions = self._completions(
            habits, min(previous_start, window_start), max(previous_end, window_end)
        )
        return rates.rate_trend(habits, completions, window_start, window_end)

    def monthly_progress(self, month: date, today: Optional[date] = None) -> RateTrend:
        """Active habits' completion rate for a calendar month plus its trend."""

        window = month_window(month, today or date.today())
        if window is None:
            return RateTrend.between(0, 0)
        return self.compute_trend(self.habit_store.list_active(), *window)

    def weekly_consistency(self, reference_date: Optional[date] = None) -> list[rates.DayConsistency]:
        reference = reference_date or date.today()
        habits = self.habit_store.list_active()
        completions = self._completions(habits, reference - timedelta(days=6), reference)
        return rates.weekly_consistency(habits, completions, reference)

    def top_performers(
        self, reference_date: Optional[date] = None, limit: Optional[int] = None
    ) -> list[rates.HabitPerformance]:
        """Best active habits by rolling consistency, then current streak."""

        reference = reference_date or date.today()
        habits = self.habit_store.list_active()
        if not habits:
            return []
        window_start, _ = rolling_window(reference, self.window_days)
        # Streaks may run back past the rolling window
        earliest = min([window_start] + [habit.created_on for habit in habits])
        completions = self._completions(habits, earliest, reference)
        return rates.top_performers(
            habits,
            completions,
            reference,
            limit=self.top_limit if limit is None else limit,
            window_days=self.window_days,
        )

    def activity_trend(
        self,
        reference_date: Optional[date] = None,
        timeline: trends.TrendTimeline = trends.TrendTimeline.DAY,
        today: Optional[date] = None,
        points: int = 10,
    ) -> list[trends.TrendPoint]:
        """Completion counts across active habits in day, week or month buckets."""

        today = today or date.today()
        reference = reference_date or today
        buckets = trends.trend_buckets(reference, timeline, points)
        habits = self.habit_store.list_active()
        completions = self._completions(habits, buckets[0][0], min(buckets[-1][1], today))
        return trends.activity_trend(completions, reference, timeline, today, points)

    # ------------------------------------------------------------------
    # Writes and cached stats
    # ------------------------------------------------------------------
    def toggle_completion(self, habit_id: int, day: date) -> bool:
        """Toggle a day's completion; the log store invalidates cached stats."""

        return self.log_store.toggle(habit_id, day)

    @staticmethod
    def needs_refresh(habit: Habit, today: date) -> bool:
        """True when the cached stats were not computed for ``today`` or look unset."""

        if habit.last_updated_date != today:
            return True
        return habit.highest_streak == 0 and habit.completed_count > 0

    def refresh_habit_stats(self, habit_id: int, today: Optional[date] = None) -> DerivedStats:
        """Recompute a habit's stats and cache them on the habit row."""

        today = today or date.today()
        stats = self.compute_for_habit(self.habit_store.get(habit_id), today)
        self.habit_store.save_stats(habit_id, stats)
        logger.info(
            "Habit stats refreshed",
            extra={"habit_id": habit_id, "reference_date": today.isoformat()},
        )
        return stats

    def refresh_stale(self, today: Optional[date] = None) -> list[DerivedStats]:
        """Refresh every active habit whose cache is stale; return the new stats."""

        today = today or date.today()
        return [
            self.refresh_habit_stats(habit.id, today)
            for habit in self.habit_store.list_active()
            if self.needs_refresh(habit, today)
        ]

    def cached_stats(self, habit_id: int, today: Optional[date] = None) -> DerivedStats:
        """Return cached stats when fresh for ``today``, recomputing otherwise."""

        today = today or date.today()
        habit = self.habit_store.get(habit_id)
        if self.needs_refresh(habit, today):
            return self.refresh_habit_stats(habit_id, today)
        return DerivedStats(
            habit_id=habit.id,
            reference_date=today,
            completed_count=habit.completed_count,
            missed_count=habit.missed_count,
            current_streak=habit.current_streak,
            highest_streak=habit.highest_streak,
            highest_miss_streak=habit.highest_miss_streak,
        )


__all__ = ["StatsEngine"]
