"""Habit rows as stored by the reference habit store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class HabitRecord(SQLModel, table=True):
    """A user's habit with its schedule and sparse per-cycle history."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True, max_length=64)
    user_id: str = Field(nullable=False, index=True, max_length=64)
    name: str = Field(default="", max_length=120)
    frequency: Optional[str] = Field(default="Daily", max_length=32)
    selected_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    start_date: str = Field(nullable=False, max_length=10)
    keep_until: bool = Field(default=False, nullable=False)
    snoozed_until: Optional[str] = Field(default=None, max_length=32)

    completion_history: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    increment_history: dict[str, float] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    skipped_dates: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    reward_points: int = Field(default=0, nullable=False)
    increment: bool = Field(default=False, nullable=False)
    increment_goal: Optional[float] = Field(default=None)
    increment_type: Optional[str] = Field(default=None, max_length=32)

    streak: int = Field(default=0, nullable=False)
    best_streak: int = Field(default=0, nullable=False)
    last_completed_date: Optional[str] = Field(default=None, max_length=10)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
