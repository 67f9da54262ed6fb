"""SQLModel implementation of the habit store."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...domain.habit import Habit
from ...models.habit import HabitRecord
from ...models.settings import UserSettings
from ...services.ingest import habit_from_payload, habit_to_payload

# HabitRecord columns that mirror the camelCase payload keys
_PAYLOAD_COLUMNS = {
    "name": "name",
    "frequency": "frequency",
    "selectedDays": "selected_days",
    "startDate": "start_date",
    "keepUntil": "keep_until",
    "snoozedUntil": "snoozed_until",
    "completionHistory": "completion_history",
    "incrementHistory": "increment_history",
    "skippedDates": "skipped_dates",
    "rewardPoints": "reward_points",
    "increment": "increment",
    "incrementGoal": "increment_goal",
    "incrementType": "increment_type",
    "streak": "streak",
    "bestStreak": "best_streak",
    "lastCompletedDate": "last_completed_date",
}


def record_to_habit(record: HabitRecord) -> Habit:
    """Read a row through the same tolerant path as any remote payload."""

    return habit_from_payload(record.model_dump())


def _apply_habit(record: HabitRecord, habit: Habit) -> HabitRecord:
    payload = habit_to_payload(habit)
    for key, column in _PAYLOAD_COLUMNS.items():
        setattr(record, column, payload[key])
    return record


class SQLModelHabitStore:
    """SQLModel-based habit store implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def list_habits(self, *, user_id: str) -> list[Habit]:
        """Return every habit belonging to a user, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitRecord)
                .where(HabitRecord.user_id == user_id)
                .order_by(HabitRecord.created_at, HabitRecord.id)  # type: ignore
            )
            return [record_to_habit(row) for row in session.exec(statement).all()]

    def save_habit(self, habit: Habit, *, user_id: str) -> Habit:
        """Insert or replace a habit."""
        with self.session_factory() as session:
            record = session.exec(
                select(HabitRecord).where(HabitRecord.id == habit.id, HabitRecord.user_id == user_id)
            ).first()
            if record is None:
                record = HabitRecord(id=habit.id, user_id=user_id, start_date=habit.start_date)
            _apply_habit(record, habit)
            session.add(record)
            session.commit()
            session.refresh(record)
            return record_to_habit(record)

    def delete_habit(self, habit_id: str, *, user_id: str) -> None:
        """Delete a habit by ID."""
        with self.session_factory() as session:
            record = session.exec(
                select(HabitRecord).where(HabitRecord.id == habit_id, HabitRecord.user_id == user_id)
            ).first()
            if record:
                session.delete(record)
                session.commit()

    def get_user_settings(self, *, user_id: str) -> Optional[UserSettings]:
        with self.session_factory() as session:
            obj = session.exec(select(UserSettings).where(UserSettings.user_id == user_id)).first()
            if obj:
                session.expunge(obj)
            return obj

    def save_user_settings(self, settings: UserSettings) -> UserSettings:
        with self.session_factory() as session:
            existing = session.exec(
                select(UserSettings).where(UserSettings.user_id == settings.user_id)
            ).first()
            if existing:
                existing.end_of_day_hour = settings.end_of_day_hour
                existing.end_of_day_minute = settings.end_of_day_minute
                existing.end_of_day_meridiem = settings.end_of_day_meridiem
                settings = existing
            session.add(settings)
            session.commit()
            session.refresh(settings)
            session.expunge(settings)
            return settings


__all__ = ["SQLModelHabitStore", "record_to_habit"]
