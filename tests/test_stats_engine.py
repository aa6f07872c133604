"""Integration tests for StatsEngine over the SQLModel stores."""

from __future__ import annotations

import logging
from datetime import date, timedelta

import pytest

from streakwise.errors import ConfigurationError, NotFoundError
from streakwise.models import Habit
from streakwise.services.engine import StatsEngine
from streakwise.services.rates import RateTrend
from streakwise.services.streaks import DerivedStats
from streakwise.services.trends import TrendTimeline

MON_WED_FRI = (1, 3, 5)


def run_of_days(start: date, count: int, step: int = 1) -> list[date]:
    return [start + timedelta(days=i) for i in range(0, count, step)]


class TestComputeForHabit:
    def test_mon_wed_fri_scenario(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI, created_on=date(2024, 1, 1))
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3))

        stats = stats_engine.compute_for_habit(habit, date(2024, 1, 8))

        assert stats == DerivedStats(
            habit_id=habit.id,
            reference_date=date(2024, 1, 8),
            completed_count=2,
            missed_count=1,
            current_streak=0,
            highest_streak=2,
            highest_miss_streak=1,
        )

    def test_repeated_calls_are_identical(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI)
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5))

        first = stats_engine.compute_for_habit(habit, date(2024, 1, 8))
        second = stats_engine.compute_for_habit(habit, date(2024, 1, 8))

        assert first == second
        assert first.current_streak == 3

    def test_stats_for_unknown_id_raises(self, stats_engine):
        with pytest.raises(NotFoundError):
            stats_engine.stats_for_id(12345, date(2024, 1, 8))

    def test_empty_schedule_raises(self, stats_engine):
        habit = Habit(id=1, user_id=1, name="Broken", days_of_week=[], created_on=date(2024, 1, 1))
        with pytest.raises(ConfigurationError):
            stats_engine.compute_for_habit(habit, date(2024, 1, 8))

    def test_reference_before_creation(self, stats_engine, habit_factory):
        habit = habit_factory(created_on=date(2024, 3, 1))
        assert stats_engine.compute_for_habit(habit, date(2024, 2, 1)) == DerivedStats(
            habit_id=habit.id, reference_date=date(2024, 2, 1)
        )

    def test_pre_creation_log_is_reported_and_ignored(
        self, stats_engine, habit_factory, completion_factory, caplog
    ):
        habit = habit_factory(created_on=date(2024, 1, 3))
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 4))

        with caplog.at_level(logging.WARNING, logger="streakwise"):
            stats = stats_engine.stats_for_id(habit.id, date(2024, 1, 4))

        assert stats.completed_count == 2
        assert stats.current_streak == 2
        assert any("predates creation" in record.getMessage() for record in caplog.records)


class TestRatesAndTrends:
    """Tests for batch rate queries."""

    def test_two_habit_rolling_window(self, stats_engine, habit_factory, completion_factory):
        full = habit_factory(name="Full", created_on=date(2023, 12, 1))
        half = habit_factory(name="Half", created_on=date(2023, 12, 1))
        completion_factory(full, *run_of_days(date(2024, 1, 1), 30))
        completion_factory(half, *run_of_days(date(2024, 1, 1), 30, step=2))

        rate = stats_engine.compute_rate([full, half], date(2024, 1, 1), date(2024, 1, 30))

        assert rate == 75

    def test_empty_batch_and_inverted_window(self, stats_engine, habit_factory):
        habit = habit_factory()
        assert stats_engine.compute_rate([], date(2024, 1, 1), date(2024, 1, 31)) == 0
        assert stats_engine.compute_rate([habit], date(2024, 1, 31), date(2024, 1, 1)) == 0

    def test_trend_uses_previous_month(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(created_on=date(2024, 1, 1))
        completion_factory(habit, *run_of_days(date(2024, 2, 1), 14))
        completion_factory(habit, *run_of_days(date(2024, 3, 1), 14, step=2))

        trend = stats_engine.compute_trend([habit], date(2024, 3, 1), date(2024, 3, 14))

        assert trend == RateTrend(rate=50, previous_rate=100, trend=-50)

    def test_monthly_progress(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(created_on=date(2024, 1, 1))
        completion_factory(habit, *run_of_days(date(2024, 2, 1), 14))
        completion_factory(habit, *run_of_days(date(2024, 3, 1), 14, step=2))

        progress = stats_engine.monthly_progress(date(2024, 3, 1), today=date(2024, 3, 14))

        assert progress.rate == 50
        assert progress.trend == -50

    def test_monthly_progress_future_month_is_zero(self, stats_engine, habit_factory):
        habit_factory()
        assert stats_engine.monthly_progress(date(2024, 5, 1), today=date(2024, 3, 14)) == RateTrend(0, 0, 0)

    def test_archived_habits_are_left_out(self, stats_engine, habit_factory, completion_factory):
        active = habit_factory(name="Active")
        archived = habit_factory(name="Archived", is_active=False)
        completion_factory(archived, *run_of_days(date(2024, 3, 1), 14))
        completion_factory(active, *run_of_days(date(2024, 3, 1), 7))

        progress = stats_engine.monthly_progress(date(2024, 3, 1), today=date(2024, 3, 14))

        assert progress.rate == 50

    def test_weekly_consistency(self, stats_engine, habit_factory, completion_factory):
        daily = habit_factory(name="Daily")
        mwf = habit_factory(name="MWF", days_of_week=MON_WED_FRI)
        completion_factory(daily, date(2024, 1, 8), date(2024, 1, 9))
        completion_factory(mwf, date(2024, 1, 8))

        points = stats_engine.weekly_consistency(date(2024, 1, 14))

        assert [p.value for p in points] == [100, 100, 0, 0, 0, 0, 0]

    def test_top_performers(self, habit_factory, completion_factory, habit_store, log_store):
        steady = habit_factory(name="Steady")
        lapsed = habit_factory(name="Lapsed")
        completion_factory(steady, *run_of_days(date(2024, 1, 1), 30))
        completion_factory(lapsed, *run_of_days(date(2024, 1, 1), 10))
        engine = StatsEngine(habit_store, log_store, top_limit=1)

        ranked = engine.top_performers(date(2024, 1, 30))

        assert [(p.name, p.percentage, p.streak) for p in ranked] == [("Steady", 100, 30)]

    def test_top_performers_explicit_zero_limit(self, stats_engine, habit_factory):
        habit_factory(name="Steady")
        assert stats_engine.top_performers(date(2024, 1, 30), limit=0) == []

    def test_activity_trend(self, stats_engine, habit_factory, completion_factory):
        first = habit_factory(name="First")
        second = habit_factory(name="Second")
        completion_factory(first, date(2024, 1, 9), date(2024, 1, 10))
        completion_factory(second, date(2024, 1, 10))

        points = stats_engine.activity_trend(
            date(2024, 1, 10), TrendTimeline.DAY, today=date(2024, 1, 10)
        )

        assert [p.count for p in points] == [0, 0, 0, 0, 1, 2, 0, 0, 0, 0]
        assert [p.is_future for p in points][-4:] == [True] * 4


class TestCachedStats:
    """Tests for the stats cache kept on habit rows."""

    def test_refresh_stale_saves_stats(self, stats_engine, habit_store, habit_factory, completion_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI)
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3))

        refreshed = stats_engine.refresh_stale(today=date(2024, 1, 8))

        assert [s.habit_id for s in refreshed] == [habit.id]
        stored = habit_store.get(habit.id)
        assert stored.last_updated_date == date(2024, 1, 8)
        assert (stored.completed_count, stored.highest_streak, stored.missed_count) == (2, 2, 1)

    def test_fresh_cache_is_not_recomputed(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI)
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3))
        stats_engine.refresh_stale(today=date(2024, 1, 8))

        assert stats_engine.refresh_stale(today=date(2024, 1, 8)) == []
        assert len(stats_engine.refresh_stale(today=date(2024, 1, 9))) == 1

    def test_toggle_invalidates_cache(self, stats_engine, habit_store, habit_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI)
        stats_engine.refresh_stale(today=date(2024, 1, 8))

        assert stats_engine.toggle_completion(habit.id, date(2024, 1, 8)) is True
        assert habit_store.get(habit.id).last_updated_date is None

        stats = stats_engine.cached_stats(habit.id, today=date(2024, 1, 8))
        assert stats.current_streak == 1
        assert habit_store.get(habit.id).last_updated_date == date(2024, 1, 8)

    def test_cached_stats_match_fresh_computation(self, stats_engine, habit_factory, completion_factory):
        habit = habit_factory(days_of_week=MON_WED_FRI)
        completion_factory(habit, date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5))
        stats_engine.refresh_stale(today=date(2024, 1, 8))

        cached = stats_engine.cached_stats(habit.id, today=date(2024, 1, 8))

        assert cached == stats_engine.compute_for_habit(habit, date(2024, 1, 8))

    def test_moving_creation_date_recomputes_cached_stats(self, stats_engine, habit_store, habit_factory):
        habit = habit_factory(created_on=date(2024, 1, 1))
        stale = stats_engine.refresh_habit_stats(habit.id, today=date(2024, 1, 10))
        assert stale.missed_count == 9

        edited = habit_store.get(habit.id)
        edited.created_on = date(2024, 1, 8)
        habit_store.update(edited)

        cached = stats_engine.cached_stats(habit.id, today=date(2024, 1, 10))

        assert cached == stats_engine.compute_for_habit(habit_store.get(habit.id), date(2024, 1, 10))
        assert (cached.missed_count, cached.highest_miss_streak) == (2, 2)

    @pytest.mark.parametrize(
        ("last_updated", "highest", "completed", "expected"),
        [
            (None, 0, 0, True),
            (date(2024, 1, 7), 3, 3, True),
            (date(2024, 1, 8), 3, 3, False),
            (date(2024, 1, 8), 0, 2, True),
            (date(2024, 1, 8), 0, 0, False),
        ],
    )
    def test_needs_refresh(self, last_updated, highest, completed, expected):
        habit = Habit(
            name="Cache",
            days_of_week=[1],
            last_updated_date=last_updated,
            highest_streak=highest,
            completed_count=completed,
        )
        assert StatsEngine.needs_refresh(habit, date(2024, 1, 8)) is expected
