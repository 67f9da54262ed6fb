"""Conversion between remote/cached habit payloads and the domain model.

This is the only place open-ended frequency strings are accepted. Anything
the scheduling core would not understand is mapped to a safe schedule here.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional

from ..constants.habits import (
    DEFAULT_RESET_HOUR,
    DEFAULT_RESET_MINUTE,
    ONE_TIME_FREQUENCIES,
    WEEK_DAYS,
)
from ..domain.habit import Daily, Frequency, Habit, Monthly, OneTime, ResetBoundary, Schedule, Weekly

logger = logging.getLogger(__name__)


def _pick(payload: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """Return the first present key among camelCase/snake_case spellings."""

    for name in names:
        if name in payload and payload[name] is not None:
            return payload[name]
    return default


def _as_str_set(value: Any) -> frozenset[str]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(item) for item in value if isinstance(item, str) and item)
    return frozenset()


def _as_amounts(value: Any) -> dict[str, float]:
    if not isinstance(value, Mapping):
        return {}
    amounts: dict[str, float] = {}
    for key, amount in value.items():
        try:
            number = float(amount)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Dropping unreadable increment amount for {key!r}")
            continue
        if math.isfinite(number):
            amounts[str(key)] = number
    return amounts


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_bool(value: Any) -> bool:
    # Some rows carry booleans as text ("false", "0")
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


def _day_only(value: Any) -> Optional[str]:
    # Legacy rows stored full ISO timestamps ("2026-02-17T05:00:00Z")
    if not isinstance(value, str) or not value:
        return None
    return value[:10]


def schedule_from_fields(frequency: Any, selected_days: Any, *, habit_id: str = "?") -> Schedule:
    """Map a stored frequency string (and weekdays) onto a schedule variant."""

    if frequency is None or (isinstance(frequency, str) and frequency.strip() in ONE_TIME_FREQUENCIES):
        return OneTime()

    name = str(frequency).strip()
    if name == Frequency.DAILY.value:
        return Daily()
    if name == Frequency.WEEKLY.value:
        days = frozenset(day for day in _as_str_set(selected_days) if day in WEEK_DAYS)
        if not days:
            logger.warning(f"Habit {habit_id}: weekly schedule without valid selected days")
        return Weekly(days=days)
    if name == Frequency.MONTHLY.value:
        return Monthly()

    logger.warning(f"Habit {habit_id}: unrecognized frequency {frequency!r}, treating as daily")
    return Daily()


def habit_from_payload(payload: Mapping[str, Any]) -> Habit:
    """Build a :class:`Habit` from a remote row or cached JSON object.

    Raises:
        ValueError: when the payload has no id.
    """

    habit_id = _pick(payload, "id")
    if habit_id is None or str(habit_id) == "":
        raise ValueError("Habit payload is missing an id")
    habit_id = str(habit_id)

    return Habit(
        id=habit_id,
        name=str(_pick(payload, "name", default="")),
        start_date=_day_only(_pick(payload, "startDate", "start_date")) or "",
        schedule=schedule_from_fields(
            _pick(payload, "frequency"),
            _pick(payload, "selectedDays", "selected_days"),
            habit_id=habit_id,
        ),
        keep_until=_as_bool(_pick(payload, "keepUntil", "keep_until", default=False)),
        snoozed_until=_day_only(_pick(payload, "snoozedUntil", "snoozed_until")),
        completion_history=_as_str_set(_pick(payload, "completionHistory", "completion_history")),
        increment_history=_as_amounts(_pick(payload, "incrementHistory", "increment_history")),
        skipped_dates=_as_str_set(_pick(payload, "skippedDates", "skipped_dates")),
        reward_points=_as_int(_pick(payload, "rewardPoints", "reward_points")),
        increment=_as_bool(_pick(payload, "increment", default=False)),
        increment_goal=_as_float(_pick(payload, "incrementGoal", "increment_goal")),
        increment_type=_pick(payload, "incrementType", "increment_type"),
        streak=_as_int(_pick(payload, "streak")),
        best_streak=_as_int(_pick(payload, "bestStreak", "best_streak")),
        last_completed_date=_day_only(_pick(payload, "lastCompletedDate", "last_completed_date")),
    )


def habits_from_payloads(payloads: Iterable[Any]) -> list[Habit]:
    """Convert many payloads, dropping (and logging) the ones that cannot be read."""

    habits = []
    for payload in payloads:
        if not isinstance(payload, Mapping):
            logger.warning(f"Skipping habit payload of type {type(payload).__name__}")
            continue
        try:
            habits.append(habit_from_payload(payload))
        except ValueError as exc:
            logger.warning(f"Skipping unreadable habit payload: {exc}")
    return habits


def habit_to_payload(habit: Habit) -> dict[str, Any]:
    """Serialize a habit into the camelCase shape shared with the remote store."""

    return {
        "id": habit.id,
        "name": habit.name,
        "frequency": habit.frequency.value,
        "selectedDays": [day for day in WEEK_DAYS if day in habit.selected_days],
        "startDate": habit.start_date,
        "keepUntil": habit.keep_until,
        "snoozedUntil": habit.snoozed_until,
        "completionHistory": sorted(habit.completion_history),
        "incrementHistory": dict(sorted(habit.increment_history.items())),
        "skippedDates": sorted(habit.skipped_dates),
        "rewardPoints": habit.reward_points,
        "increment": habit.increment,
        "incrementGoal": habit.increment_goal,
        "incrementType": habit.increment_type,
        "streak": habit.streak,
        "bestStreak": habit.best_streak,
        "lastCompletedDate": habit.last_completed_date,
    }


def reset_from_user_settings(
    hour: Any,
    minute: Any,
    meridiem: Optional[str] = None,
) -> ResetBoundary:
    """Convert a stored end-of-day setting to a 24-hour :class:`ResetBoundary`.

    Older settings rows keep the hour on a 12-hour clock with an ``AM``/``PM``
    marker ("12 AM" is midnight, "12 PM" is noon). Unusable values fall back
    to the default boundary.
    """

    try:
        hour_value = int(str(hour).strip())
        minute_value = int(str(minute).strip())
    except (TypeError, ValueError):
        logger.warning(f"Unreadable end-of-day setting {hour!r}:{minute!r}, using default")
        return ResetBoundary(DEFAULT_RESET_HOUR, DEFAULT_RESET_MINUTE)

    marker = (meridiem or "").strip().upper()
    if marker in {"AM", "PM"}:
        if not 1 <= hour_value <= 12:
            logger.warning(f"Invalid 12-hour end-of-day hour {hour_value}, using default")
            return ResetBoundary(DEFAULT_RESET_HOUR, DEFAULT_RESET_MINUTE)
        if marker == "PM" and hour_value != 12:
            hour_value += 12
        elif marker == "AM" and hour_value == 12:
            hour_value = 0

    try:
        return ResetBoundary(hour_value, minute_value)
    except ValueError as exc:
        logger.warning(f"Invalid end-of-day setting: {exc}, using default")
        return ResetBoundary(DEFAULT_RESET_HOUR, DEFAULT_RESET_MINUTE)


__all__ = [
    "habit_from_payload",
    "habit_to_payload",
    "habits_from_payloads",
    "reset_from_user_settings",
    "schedule_from_fields",
]
