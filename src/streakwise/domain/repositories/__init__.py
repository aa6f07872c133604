"""Repository protocol definitions for domain layer."""

from .habit import HabitStore
from .log import LogStore

__all__ = [
    "HabitStore",
    "LogStore",
]
