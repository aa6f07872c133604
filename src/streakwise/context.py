"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelHabitStore, SQLModelLogStore
from .services.engine import StatsEngine


@dataclass
class AppContext:
    """Configuration, stores and the stats engine wired for one user."""

    config: BaseConfig
    db_engine: Any
    session_factory: Callable[[], Session]
    habit_store: SQLModelHabitStore
    log_store: SQLModelLogStore
    stats: StatsEngine


def create_app_context(
    config: Optional[BaseConfig] = None, *, user_id: Optional[int] = None
) -> AppContext:
    """Create the database, the user's stores and a StatsEngine over them."""

    if config is None:
        config = BaseConfig()
    owner = user_id if user_id is not None else config.USER_ID

    db_engine, session_factory = bootstrap_database(config)
    habit_store = SQLModelHabitStore(session_factory, user_id=owner)
    log_store = SQLModelLogStore(session_factory, user_id=owner)
    stats = StatsEngine(
        habit_store,
        log_store,
        window_days=config.ROLLING_WINDOW_DAYS,
        top_limit=config.TOP_PERFORMERS,
    )
    return AppContext(
        config=config,
        db_engine=db_engine,
        session_factory=session_factory,
        habit_store=habit_store,
        log_store=log_store,
        stats=stats,
    )
