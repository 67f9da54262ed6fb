"""habitloop: habit recurrence engine and local habit cache."""

from __future__ import annotations

from .config import BaseConfig
from .domain.habit import Habit, HabitView, ResetBoundary
from .services.cycles import is_active, resolve_cycle_start, with_completion

__all__ = [
    "BaseConfig",
    "Habit",
    "HabitView",
    "ResetBoundary",
    "is_active",
    "resolve_cycle_start",
    "with_completion",
]
