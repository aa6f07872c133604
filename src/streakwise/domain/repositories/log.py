"""Completion log store protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol


class LogStore(Protocol):
    """Store for completion logs keyed by (habit, local calendar day)."""

    def get_completions(
        self, habit_ids: Iterable[int], date_range: tuple[date, date]
    ) -> dict[int, set[date]]:
        """Completion dates per habit within an inclusive range; every id is present."""
        ...

    def toggle(self, habit_id: int, day: date) -> bool:
        """Flip completion for a day and return the new state."""
        ...
