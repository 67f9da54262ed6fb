"""Habit store protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...domain.habit import Habit
from ...models.settings import UserSettings


class HabitStore(Protocol):
    """The remote store that owns habits and user settings."""

    def list_habits(self, *, user_id: str) -> list[Habit]:
        """Return every habit belonging to a user, oldest first."""
        ...

    def save_habit(self, habit: Habit, *, user_id: str) -> Habit:
        """Insert or replace a habit."""
        ...

    def delete_habit(self, habit_id: str, *, user_id: str) -> None:
        """Delete a habit by ID."""
        ...

    def get_user_settings(self, *, user_id: str) -> Optional[UserSettings]:
        """Return the user's settings row, if one exists."""
        ...
