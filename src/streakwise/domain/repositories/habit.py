"""Habit store protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ...models.habit import Habit

if TYPE_CHECKING:  # pragma: no cover
    from ...services.streaks import DerivedStats


class HabitStore(Protocol):
    """Store for a single user's habit records."""

    def list_active(self) -> list[Habit]:
        """List habits that are not archived, oldest first."""
        ...

    def get(self, habit_id: int) -> Habit:
        """Return a habit or raise NotFoundError."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Persist a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Persist changes; a schedule change invalidates cached stats."""
        ...

    def archive(self, habit_id: int) -> None:
        """Soft-delete a habit."""
        ...

    def delete(self, habit_id: int) -> None:
        """Hard-delete a habit and its completion logs."""
        ...

    def save_stats(self, habit_id: int, stats: DerivedStats) -> Habit:
        """Cache derived stats on the habit row."""
        ...
