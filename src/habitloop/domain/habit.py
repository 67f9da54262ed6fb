"""Habit domain model: schedules, habits and their per-day annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from ..constants.habits import DEFAULT_RESET_HOUR, DEFAULT_RESET_MINUTE


class Frequency(str, Enum):
    """Recurrence kinds, spelled the way the remote store spells them."""

    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


@dataclass(frozen=True, slots=True)
class OneTime:
    """A single occurrence on the habit's start date."""

    frequency = Frequency.NONE


@dataclass(frozen=True, slots=True)
class Daily:
    """Every day from the start date on."""

    frequency = Frequency.DAILY


@dataclass(frozen=True, slots=True)
class Weekly:
    """On the listed weekday names (``"Monday"`` ... ``"Sunday"``)."""

    days: frozenset[str] = frozenset()

    frequency = Frequency.WEEKLY


@dataclass(frozen=True, slots=True)
class Monthly:
    """On the start date's day of month."""

    frequency = Frequency.MONTHLY


Schedule = Union[OneTime, Daily, Weekly, Monthly]


@dataclass(frozen=True, slots=True)
class Habit:
    """A user habit as the scheduling core sees it.

    ``completion_history`` and ``increment_history`` are keyed by cycle start
    dates (``YYYY-MM-DD``), never by raw calendar days.
    """

    id: str
    name: str = ""
    start_date: str = ""
    schedule: Schedule = Daily()
    keep_until: bool = False
    snoozed_until: Optional[str] = None
    completion_history: frozenset[str] = frozenset()
    increment_history: Mapping[str, float] = field(default_factory=dict)
    skipped_dates: frozenset[str] = frozenset()
    reward_points: int = 0
    increment: bool = False
    increment_goal: Optional[float] = None
    increment_type: Optional[str] = None
    streak: int = 0
    best_streak: int = 0
    last_completed_date: Optional[str] = None

    @property
    def frequency(self) -> Frequency:
        return self.schedule.frequency

    @property
    def selected_days(self) -> frozenset[str]:
        if isinstance(self.schedule, Weekly):
            return self.schedule.days
        return frozenset()

    @property
    def is_one_time(self) -> bool:
        return isinstance(self.schedule, OneTime)


@dataclass(frozen=True, slots=True)
class HabitView:
    """A habit annotated with the state of the cycle being viewed."""

    habit: Habit
    cycle: str
    completed: bool
    increment_amount: float = 0

    @property
    def id(self) -> str:
        return self.habit.id


@dataclass(frozen=True, slots=True)
class ResetBoundary:
    """Time of day at which one habit day ends and the next begins."""

    hour: int = DEFAULT_RESET_HOUR
    minute: int = DEFAULT_RESET_MINUTE

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"reset hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"reset minute must be between 0 and 59, got {self.minute}")

    def as_dict(self) -> dict[str, int]:
        return {"hour": self.hour, "minute": self.minute}


__all__ = [
    "Daily",
    "Frequency",
    "Habit",
    "HabitView",
    "Monthly",
    "OneTime",
    "ResetBoundary",
    "Schedule",
    "Weekly",
]
