"""SQLModel table exports."""

from .habit import CompletionLog, Habit
from .insight import Insight, InsightKind

__all__ = [
    "CompletionLog",
    "Habit",
    "Insight",
    "InsightKind",
]
