"""Concrete store implementations using SQLModel."""

from .habit import SQLModelHabitStore
from .log import SQLModelLogStore

__all__ = [
    "SQLModelHabitStore",
    "SQLModelLogStore",
]
