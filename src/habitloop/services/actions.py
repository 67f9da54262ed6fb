"""Completion actions as pure habit transformations.

Each function returns a new :class:`Habit`; persisting it (and the cache
overwrite) is the caller's job.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from ..constants.habits import ARCHIVED_START_DATE
from ..domain.habit import Habit
from .dates import add_days
from .habits import compute_streaks


def toggle_completion(habit: Habit, cycle_key: str, *, today: date) -> tuple[Habit, int]:
    """Mark ``cycle_key`` complete (or undo it) and refresh the streak counters.

    Returns the updated habit and the change in reward points (positive when
    completing, negative when undoing).
    """

    if cycle_key in habit.completion_history:
        history = habit.completion_history - {cycle_key}
        points_delta = -habit.reward_points
    else:
        history = habit.completion_history | {cycle_key}
        points_delta = habit.reward_points

    current, best = compute_streaks(history, today=today)
    updated = replace(
        habit,
        completion_history=history,
        streak=current,
        best_streak=max(best, habit.best_streak),
        last_completed_date=max(history) if history else None,
    )
    return updated, points_delta


def set_increment(habit: Habit, cycle_key: str, amount: float) -> Habit:
    """Record ``amount`` as the progress for ``cycle_key``."""

    if amount < 0:
        raise ValueError(f"Increment amount cannot be negative: {amount}")
    history = dict(habit.increment_history)
    history[cycle_key] = amount
    return replace(habit, increment_history=history)


def snooze(habit: Habit, day_key: str) -> Habit:
    """Hide the habit until the day after ``day_key``.

    One-time habits move their start date too, so they reappear as that
    day's habit rather than as an overdue one.
    """

    until = add_days(day_key, 1)
    if habit.is_one_time:
        return replace(habit, snoozed_until=until, start_date=until)
    return replace(habit, snoozed_until=until)


def skip(habit: Habit, day_key: str) -> Habit:
    """Skip the habit on ``day_key``.

    Repeating habits come back the next day; one-time habits are parked on
    a far-future start date.
    """

    skipped = habit.skipped_dates | {day_key}
    if habit.is_one_time:
        return replace(habit, skipped_dates=skipped, start_date=ARCHIVED_START_DATE)
    return replace(habit, skipped_dates=skipped, snoozed_until=add_days(day_key, 1))


__all__ = ["set_increment", "skip", "snooze", "toggle_completion"]
