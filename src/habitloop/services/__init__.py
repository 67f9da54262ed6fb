"""Service module exports."""

from . import (
    actions,
    cache,
    cycles,
    dates,
    habit_service,
    habits,
    ingest,
)

__all__ = [
    "actions",
    "cache",
    "cycles",
    "dates",
    "habit_service",
    "habits",
    "ingest",
]
