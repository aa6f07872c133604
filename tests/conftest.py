"""Pytest configuration and shared fixtures for Streakwise tests.

This module provides database fixtures, store fixtures and test data factories
for exercising the statistics engine without touching a real app database.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from streakwise.infra.repositories import SQLModelHabitStore, SQLModelLogStore
from streakwise.models import CompletionLog, Habit
from streakwise.services.dates import format_date_key
from streakwise.services.engine import StatsEngine

TEST_USER_ID = 1


@pytest.fixture(autouse=True)
def reset_streakwise_logger():
    """Drop handlers installed by setup_logging so tests stay isolated."""

    yield
    logger = logging.getLogger("streakwise")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Create a session factory for stores that expect Callable[[], Session]."""

    def factory():
        """Create a new Session with expire_on_commit disabled."""
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def habit_store(session_factory) -> SQLModelHabitStore:
    return SQLModelHabitStore(session_factory, user_id=TEST_USER_ID)


@pytest.fixture
def log_store(session_factory) -> SQLModelLogStore:
    return SQLModelLogStore(session_factory, user_id=TEST_USER_ID)


@pytest.fixture
def stats_engine(habit_store, log_store) -> StatsEngine:
    return StatsEngine(habit_store, log_store)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(db_session):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        days_of_week: Iterable[int] = (0, 1, 2, 3, 4, 5, 6),
        created_on: date = date(2024, 1, 1),
        is_active: bool = True,
        user_id: int = TEST_USER_ID,
    ) -> Habit:
        """Create a test habit with sensible defaults.

        Args:
            name: Habit name
            days_of_week: Weekday indices, 0=Sunday
            created_on: First day the habit exists
            is_active: False to create an archived habit

        Returns:
            Habit: Persisted habit instance
        """
        habit = Habit(
            user_id=user_id,
            name=name,
            days_of_week=sorted(days_of_week),
            created_on=created_on,
            is_active=is_active,
        )
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def completion_factory(db_session):
    """Factory for recording completion logs directly, bypassing toggle()."""

    def _complete(habit: Habit, *days: date) -> None:
        for day in days:
            db_session.add(
                CompletionLog(
                    habit_id=habit.id,
                    completed_date=format_date_key(day),
                    user_id=habit.user_id,
                )
            )
        db_session.commit()

    return _complete
