"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

EVERY_DAY = [0, 1, 2, 3, 4, 5, 6]


class Habit(SQLModel, table=True):
    """A user-defined habit tracked on selected weekdays."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    icon: Optional[str] = Field(default=None, max_length=32)
    color: str = Field(default="#6366F1", max_length=16)
    # Weekday indices, 0=Sunday..6=Saturday
    days_of_week: list[int] = Field(
        default_factory=lambda: list(EVERY_DAY),
        sa_column=Column(JSON, nullable=False),
    )
    created_on: date = Field(default_factory=date.today, nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False)

    # Cached DerivedStats; last_updated_date is None whenever the cache is stale
    completed_count: int = Field(default=0, nullable=False)
    missed_count: int = Field(default=0, nullable=False)
    current_streak: int = Field(default=0, nullable=False)
    highest_streak: int = Field(default=0, nullable=False)
    highest_miss_streak: int = Field(default=0, nullable=False)
    last_updated_date: Optional[date] = Field(default=None)

    logs: list["CompletionLog"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "CompletionLog", back_populates="habit", cascade="all, delete-orphan"
        ),
    )

    @property
    def schedule(self) -> frozenset[int]:
        return frozenset(self.days_of_week or ())


class CompletionLog(SQLModel, table=True):
    """Marks a habit as completed on one local calendar day."""

    __tablename__: ClassVar[str] = "completion_log"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    # Canonical YYYY-MM-DD key of the user's local day, never a UTC timestamp
    completed_date: str = Field(primary_key=True, max_length=10, index=True)
    user_id: int = Field(nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )

    habit: "Habit" = Relationship(
        back_populates="logs",
        sa_relationship=relationship("Habit", back_populates="logs"),
    )
