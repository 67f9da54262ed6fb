"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitStore
from .storage import SQLModelKeyValueStore

__all__ = [
    "SQLModelHabitStore",
    "SQLModelKeyValueStore",
]
