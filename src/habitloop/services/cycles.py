"""Habit recurrence: cycle resolution, scheduling and derived completion.

Everything in this module is pure. The reset boundary is always passed in
and "now" is never read, so results depend only on the arguments.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from ..domain.habit import Daily, Habit, HabitView, Monthly, OneTime, Weekly
from .dates import (
    Moment,
    date_key,
    effective_date,
    is_date_key,
    month_day_clamped,
    parse_date_key,
    previous_month,
    weekday_name,
)

logger = logging.getLogger(__name__)

WEEKLY_LOOKBACK_DAYS = 7


def resolve_cycle_start(habit: Habit, moment: Moment, reset_hour: int, reset_minute: int) -> str:
    """Return the start date of the cycle ``moment`` falls into.

    Completion and increment lookups are keyed by this value, so a weekly
    habit missed on Monday is still addressed as Monday's cycle on Tuesday.
    Never raises: malformed schedules degrade to a usable key.
    """

    schedule = habit.schedule
    if isinstance(schedule, OneTime):
        return habit.start_date

    today = effective_date(moment, reset_hour, reset_minute)
    if isinstance(schedule, Daily):
        return date_key(today)
    if isinstance(schedule, Weekly):
        return _weekly_cycle_start(habit, schedule, today)
    if isinstance(schedule, Monthly):
        return _monthly_cycle_start(habit, today)

    logger.warning(f"Habit {habit.id}: unknown schedule {schedule!r}, treating as daily")
    return date_key(today)


def _weekly_cycle_start(habit: Habit, schedule: Weekly, today: date) -> str:
    # Most recent selected weekday within the last 7 days, today included
    for offset in range(WEEKLY_LOOKBACK_DAYS):
        day = today - timedelta(days=offset)
        key = date_key(day)
        if key >= habit.start_date and weekday_name(day) in schedule.days:
            return key
    return habit.start_date


def _monthly_cycle_start(habit: Habit, today: date) -> str:
    try:
        start_day = parse_date_key(habit.start_date).day
    except ValueError:
        logger.warning(f"Habit {habit.id}: unparsable start date {habit.start_date!r}")
        return date_key(today)

    year, month = today.year, today.month
    if today.day < start_day:
        year, month = previous_month(year, month)
    return date_key(month_day_clamped(year, month, start_day))


def is_active(habit: Habit, moment: Moment, reset_hour: int, reset_minute: int) -> bool:
    """Return whether ``habit`` is scheduled to show on ``moment``'s habit day.

    Independent of completion. Monthly habits compare the day of month
    without clamping, so a habit started on the 31st does not show in
    shorter months even though its cycle key clamps.
    """

    if not is_date_key(habit.start_date):
        return False

    today = effective_date(moment, reset_hour, reset_minute)
    today_key = date_key(today)
    if today_key < habit.start_date:
        return False
    if habit.snoozed_until and today_key < habit.snoozed_until:
        return False

    schedule = habit.schedule
    if isinstance(schedule, OneTime):
        if habit.keep_until:
            return habit.start_date <= today_key
        return habit.start_date == today_key

    if isinstance(schedule, Daily):
        return habit.start_date <= today_key

    if isinstance(schedule, Weekly):
        if today_key == habit.start_date:
            return True
        if habit.start_date < today_key:
            return weekday_name(today) in schedule.days
        return False

    if isinstance(schedule, Monthly):
        return parse_date_key(habit.start_date).day == today.day

    return False


def active_habits_for_date(
    habits: Iterable[Habit], moment: Moment, reset_hour: int, reset_minute: int
) -> list[Habit]:
    """Filter ``habits`` down to those scheduled on ``moment``'s habit day."""

    return [h for h in habits if is_active(h, moment, reset_hour, reset_minute)]


def with_completion(
    habits: Iterable[Habit], moment: Moment, reset_hour: int, reset_minute: int
) -> list[HabitView]:
    """Annotate each habit with its current cycle, completion and increment amount.

    Order preserving and total: every input habit yields exactly one view.
    """

    views = []
    for habit in habits:
        cycle = resolve_cycle_start(habit, moment, reset_hour, reset_minute)
        views.append(
            HabitView(
                habit=habit,
                cycle=cycle,
                completed=cycle in habit.completion_history,
                increment_amount=habit.increment_history.get(cycle, 0),
            )
        )
    return views


__all__ = [
    "active_habits_for_date",
    "is_active",
    "resolve_cycle_start",
    "with_completion",
]
