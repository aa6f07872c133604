"""SQLModel implementation of the habit store."""

from __future__ import annotations

from typing import Callable

from sqlmodel import Session, select

from ...errors import NotFoundError
from ...logging_config import get_logger
from ...models.habit import Habit
from ...services.schedule import validate_schedule
from ...services.streaks import DerivedStats

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("name", "description", "icon", "color", "created_on", "is_active")


class SQLModelHabitStore:
    """SQLModel-based habit store scoped to one user."""

    def __init__(self, session_factory: Callable[[], Session], *, user_id: int):
        """Initialize with a session factory and the owning user's id."""
        self.session_factory = session_factory
        self.user_id = user_id

    def _load(self, session: Session, habit_id: int) -> Habit:
        habit = session.exec(
            select(Habit).where(Habit.id == habit_id, Habit.user_id == self.user_id)
        ).first()
        if habit is None:
            raise NotFoundError(habit_id)
        return habit

    def list_active(self) -> list[Habit]:
        """List habits that are not archived, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == self.user_id)
                .where(Habit.is_active == True)  # noqa: E712
                .order_by(Habit.created_on, Habit.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get(self, habit_id: int) -> Habit:
        """Retrieve a habit by ID or raise NotFoundError."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            session.expunge(habit)
            return habit

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        schedule = validate_schedule(habit.days_of_week)
        with self.session_factory() as session:
            habit.user_id = self.user_id
            habit.days_of_week = sorted(schedule)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        logger.info(f"Habit created: {habit.name}", extra={"habit_id": habit.id})
        return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit; a new schedule or creation date invalidates cached stats."""
        if habit.id is None:
            raise NotFoundError(habit.id)
        schedule = sorted(validate_schedule(habit.days_of_week))
        with self.session_factory() as session:
            stored = self._load(session, habit.id)
            # Every derived stat depends on the schedule and the creation date
            reshaped = sorted(stored.days_of_week) != schedule or stored.created_on != habit.created_on
            for field in _EDITABLE_FIELDS:
                setattr(stored, field, getattr(habit, field))
            stored.days_of_week = schedule
            if reshaped:
                stored.last_updated_date = None
                logger.info(
                    "Habit schedule or start date changed; cached stats invalidated",
                    extra={"habit_id": stored.id},
                )
            session.add(stored)
            session.commit()
            session.refresh(stored)
            session.expunge(stored)
            return stored

    def archive(self, habit_id: int) -> None:
        """Soft-delete a habit so it drops out of list_active."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            habit.is_active = False
            session.add(habit)
            session.commit()
        logger.info("Habit archived", extra={"habit_id": habit_id})

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its completion logs."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            session.delete(habit)
            session.commit()
        logger.info("Habit deleted", extra={"habit_id": habit_id})

    def save_stats(self, habit_id: int, stats: DerivedStats) -> Habit:
        """Cache derived stats on the habit row, stamped with their reference date."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            habit.completed_count = stats.completed_count
            habit.missed_count = stats.missed_count
            habit.current_streak = stats.current_streak
            habit.highest_streak = stats.highest_streak
            habit.highest_miss_streak = stats.highest_miss_streak
            habit.last_updated_date = stats.reference_date
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit
