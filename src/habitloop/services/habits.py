"""Habit service helpers for streaks, day status and progress."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Mapping

from ..constants.habits import APP_STREAK_LOOKBACK_DAYS
from ..domain.habit import Habit, HabitView
from .dates import date_key, parse_date_key


def compute_streaks(history: Iterable[str], *, today: date) -> tuple[int, int]:
    """Return (current_streak, longest_streak) from completed date keys.

    The current streak may end yesterday: a habit not yet done today keeps
    its streak until the day is over.
    """

    days: set[date] = set()
    for key in history:
        try:
            days.add(parse_date_key(key))
        except ValueError:
            continue

    # Current streak: walk backwards from today (or yesterday) until a gap.
    current = 0
    cursor = today if today in days else today - timedelta(days=1)
    while cursor in days:
        current += 1
        cursor -= timedelta(days=1)

    # Longest streak: sweep through sorted days, counting consecutive runs.
    longest = 0
    run = 0
    last_day: date | None = None
    for d in sorted(days):
        if last_day is None or d == last_day + timedelta(days=1):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_day = d
    longest = max(longest, run)

    return current, longest


def app_streak(habits: Iterable[Habit], *, today: date) -> int:
    """Consecutive days ending today on which at least one habit was completed."""

    completed_days: set[str] = set()
    for habit in habits:
        completed_days |= habit.completion_history
    if not completed_days:
        return 0

    streak = 0
    for offset in range(APP_STREAK_LOOKBACK_DAYS):
        if date_key(today - timedelta(days=offset)) not in completed_days:
            break
        streak += 1
    return streak


class HabitStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    SNOOZED = "snoozed"
    ACTIVE = "active"
    MISSED = "missed"


def increment_goal_reached(view: HabitView) -> bool:
    """Whether an increment habit's amount meets its goal for the viewed cycle.

    Keep-until habits default to a goal of 1; other habits only complete by
    amount when a positive goal is set.
    """

    habit = view.habit
    if not habit.increment:
        return False
    goal = habit.increment_goal or 0
    if habit.keep_until and goal <= 0:
        goal = 1
    return goal > 0 and view.increment_amount >= goal


def habit_status(view: HabitView, day_key: str, today_key: str) -> HabitStatus:
    """Classify a habit on the viewed day. Snooze wins so snoozed habits never read as missed."""

    habit = view.habit
    if habit.snoozed_until and day_key < habit.snoozed_until:
        return HabitStatus.SNOOZED
    if view.completed or increment_goal_reached(view):
        return HabitStatus.COMPLETED
    if day_key in habit.skipped_dates:
        return HabitStatus.SKIPPED
    if day_key < today_key:
        return HabitStatus.MISSED
    return HabitStatus.ACTIVE


@dataclass(slots=True)
class DayProgress:
    """Progress bar units for one day.

    ``total`` is the day's workload (completed, active and missed habits),
    ``earned`` the done share of it, ``skipped`` skipped and snoozed habits.
    """

    total: float = 0
    earned: float = 0
    skipped: float = 0

    @property
    def ratio(self) -> float:
        return self.earned / self.total if self.total else 0.0


def progress_for_day(views: Iterable[HabitView], statuses: Mapping[str, HabitStatus]) -> DayProgress:
    """Sum progress units; increment habits earn partial credit toward their goal."""

    progress = DayProgress()
    for view in views:
        status = statuses.get(view.id, HabitStatus.ACTIVE)
        if status in (HabitStatus.SKIPPED, HabitStatus.SNOOZED):
            progress.skipped += 1
            continue

        progress.total += 1
        habit = view.habit
        if status is HabitStatus.COMPLETED and (view.completed or not habit.increment):
            progress.earned += 1
            continue
        if not habit.increment:
            continue

        goal = habit.increment_goal or 0
        if goal > 0:
            progress.earned += min(view.increment_amount / goal, 1)
        elif view.increment_amount > 0:
            progress.earned += 1

    return progress


def earned_points(views: Iterable[HabitView]) -> int:
    """Reward points earned by the completed habits in ``views``."""

    return sum(view.habit.reward_points for view in views if view.completed)


__all__ = [
    "DayProgress",
    "HabitStatus",
    "app_streak",
    "compute_streaks",
    "earned_points",
    "habit_status",
    "increment_goal_reached",
    "progress_for_day",
]
