"""Local calendar arithmetic for habit scheduling.

Dates are keyed as ``YYYY-MM-DD`` strings built from local calendar fields;
nothing here converts to UTC. A habit "day" starts at the user's reset
boundary, so every scheduling computation goes through
:func:`effective_date` rather than ``datetime.date()``.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Union

from ..constants.habits import WEEK_DAYS

DATE_KEY_FORMAT = "%Y-%m-%d"

Moment = Union[date, datetime]


def date_key(value: date) -> str:
    """Return the canonical ``YYYY-MM-DD`` key for a date's local fields."""

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key back into a date.

    Raises:
        ValueError: when ``key`` is not a valid calendar date key.
    """

    if not isinstance(key, str) or len(key) != 10:
        raise ValueError(f"Invalid date key: {key!r}")
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def is_date_key(value: object) -> bool:
    """Return True when ``value`` is a well-formed date key."""

    try:
        parse_date_key(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return True


def effective_date(moment: Moment, reset_hour: int, reset_minute: int) -> date:
    """Return the habit day ``moment`` belongs to.

    A datetime earlier in the day than ``reset_hour:reset_minute`` still
    belongs to the previous day. A plain date has no time of day and is
    returned unchanged.
    """

    if isinstance(moment, datetime):
        if (moment.hour, moment.minute) < (reset_hour, reset_minute):
            return moment.date() - timedelta(days=1)
        return moment.date()
    return moment


def effective_date_key(moment: Moment, reset_hour: int, reset_minute: int) -> str:
    return date_key(effective_date(moment, reset_hour, reset_minute))


def weekday_name(value: date) -> str:
    return WEEK_DAYS[value.weekday()]


def weekday_of(moment: Moment, reset_hour: int, reset_minute: int) -> str:
    """Weekday name of the effective day, not of the raw calendar date."""

    return weekday_name(effective_date(moment, reset_hour, reset_minute))


def add_days(key: str, days: int) -> str:
    return date_key(parse_date_key(key) + timedelta(days=days))


def days_between(start: Moment, end: Moment) -> int:
    """Whole days from ``start`` to ``end``, with halves rounded up (toward +inf).

    Two datetimes are compared to the second; if either side is a plain
    date both sides are compared as calendar dates.
    """

    if isinstance(start, datetime) and isinstance(end, datetime):
        days = (end - start).total_seconds() / 86400
        return math.floor(days + 0.5)
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    return (end_day - start_day).days


def month_day_clamped(year: int, month: int, day: int) -> date:
    """Return ``year-month-day``, clamping ``day`` to the month's last day."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


__all__ = [
    "DATE_KEY_FORMAT",
    "Moment",
    "add_days",
    "date_key",
    "days_between",
    "effective_date",
    "effective_date_key",
    "is_date_key",
    "month_day_clamped",
    "parse_date_key",
    "previous_month",
    "weekday_name",
    "weekday_of",
]
