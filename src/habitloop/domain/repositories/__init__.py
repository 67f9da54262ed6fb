"""Repository protocol definitions for domain layer."""

from .habit import HabitStore
from .storage import KeyValueStore

__all__ = [
    "HabitStore",
    "KeyValueStore",
]
