"""SQLModel table exports."""

from .habit import HabitRecord
from .settings import UserSettings
from .storage import StoredValue

__all__ = [
    "HabitRecord",
    "StoredValue",
    "UserSettings",
]
