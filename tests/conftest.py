"""Pytest configuration and shared fixtures for habitloop tests.

Provides temporary SQLite databases, storage fixtures and a habit factory so
scheduling, cache and service behaviour can be tested without touching the
real data directory.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitloop import models  # noqa: F401
from habitloop.domain.habit import Daily, Habit, Monthly, OneTime, Schedule, Weekly
from habitloop.infra.repositories import SQLModelHabitStore, SQLModelKeyValueStore

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the Callable[[], Session] repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def kv_store(session_factory) -> SQLModelKeyValueStore:
    return SQLModelKeyValueStore(session_factory)


@pytest.fixture
def habit_store(session_factory) -> SQLModelHabitStore:
    return SQLModelHabitStore(session_factory)


class BrokenStore:
    """Key-value store whose every call fails, like unavailable storage."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")

    def delete(self, key):
        raise OSError("storage unavailable")


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


# =============================================================================
# Test Data Factories
# =============================================================================


_SCHEDULES = {
    "None": OneTime,
    "Daily": Daily,
    "Monthly": Monthly,
}


@pytest.fixture
def habit_factory():
    """Factory for building domain habits with sensible defaults.

    Returns:
        Callable: Function that creates Habit instances
    """
    counter = {"n": 0}

    def _create_habit(
        frequency: str = "Daily",
        start_date: str = "2024-01-01",
        selected_days: Iterable[str] = (),
        habit_id: str | None = None,
        name: str | None = None,
        completion_history: Iterable[str] = (),
        increment_history: dict[str, float] | None = None,
        **overrides,
    ) -> Habit:
        """Create a habit.

        Args:
            frequency: "None", "Daily", "Weekly" or "Monthly"
            start_date: First active day (YYYY-MM-DD)
            selected_days: Weekday names for weekly habits
        """
        counter["n"] += 1
        schedule: Schedule
        if frequency == "Weekly":
            schedule = Weekly(days=frozenset(selected_days))
        else:
            schedule = _SCHEDULES[frequency]()
        return Habit(
            id=habit_id or f"habit-{counter['n']}",
            name=name or f"Habit {counter['n']}",
            start_date=start_date,
            schedule=schedule,
            completion_history=frozenset(completion_history),
            increment_history=dict(increment_history or {}),
            **overrides,
        )

    return _create_habit
