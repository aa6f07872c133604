"""SQLModel implementation of the completion log store."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable

from sqlmodel import Session, col, select

from ...errors import DataInconsistencyError, NotFoundError
from ...logging_config import get_logger
from ...models.habit import CompletionLog, Habit
from ...services.dates import format_date_key, local_date, parse_date_key

logger = get_logger(__name__)


class SQLModelLogStore:
    """SQLModel-based completion log store scoped to one user."""

    def __init__(self, session_factory: Callable[[], Session], *, user_id: int):
        """Initialize with a session factory and the owning user's id."""
        self.session_factory = session_factory
        self.user_id = user_id

    def get_completions(
        self, habit_ids: Iterable[int], date_range: tuple[date, date]
    ) -> dict[int, set[date]]:
        """Completion dates per habit within an inclusive range."""
        ids = list(dict.fromkeys(habit_ids))
        completions: dict[int, set[date]] = {habit_id: set() for habit_id in ids}
        start, end = date_range
        if not ids or end < start:
            return completions

        with self.session_factory() as session:
            # Canonical YYYY-MM-DD keys sort the same way as the dates they encode
            statement = (
                select(CompletionLog)
                .where(CompletionLog.user_id == self.user_id)
                .where(col(CompletionLog.habit_id).in_(ids))
                .where(CompletionLog.completed_date >= format_date_key(start))
                .where(CompletionLog.completed_date <= format_date_key(end))
            )
            for row in session.exec(statement).all():
                completions[row.habit_id].add(parse_date_key(row.completed_date))
        return completions

    def toggle(self, habit_id: int, day: date) -> bool:
        """Flip completion for ``day`` and return the new state.

        Any cached stats on the habit are invalidated in the same transaction.
        """
        key = format_date_key(day)
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == self.user_id)
            ).first()
            if habit is None:
                raise NotFoundError(habit_id)

            existing = session.exec(
                select(CompletionLog)
                .where(CompletionLog.habit_id == habit_id)
                .where(CompletionLog.completed_date == key)
            ).first()
            if existing is not None:
                session.delete(existing)
                completed = False
            else:
                if local_date(day) < habit.created_on:
                    problem = DataInconsistencyError(habit_id, local_date(day), habit.created_on)
                    logger.warning(
                        f"{problem}; stored but ignored by stats",
                        extra={"habit_id": habit_id, "completed_date": key},
                    )
                session.add(
                    CompletionLog(habit_id=habit_id, completed_date=key, user_id=self.user_id)
                )
                completed = True

            habit.last_updated_date = None
            session.add(habit)
            session.commit()

        logger.info(
            f"Completion toggled {'on' if completed else 'off'}",
            extra={"habit_id": habit_id, "completed_date": key},
        )
        return completed
