"""Local cache of habit state and the counters that share its storage.

The cache is an optimization, never a source of truth: every storage or
parse failure is logged and reported to the caller as "no data", so the
caller can always fall back to the habit store.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..constants.habits import (
    CACHE_WINDOW_DAYS,
    HABITS_CACHE_KEY,
    RESET_TIME_KEY,
    TOTAL_POINTS_KEY,
)
from ..domain.habit import Habit, ResetBoundary
from ..domain.repositories.storage import KeyValueStore
from .dates import Moment, days_between, effective_date_key
from .ingest import habit_to_payload, habits_from_payloads

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HabitsCache:
    """The persisted cache record."""

    habits: list[Habit]
    cached_at: Optional[datetime]
    cached_for_dates: list[str]

    def to_json(self) -> str:
        return json.dumps(
            {
                "habits": [habit_to_payload(h) for h in self.habits],
                "cachedAt": self.cached_at.isoformat() if self.cached_at else None,
                "cachedForDates": list(self.cached_for_dates),
            }
        )


def _parse_cached_at(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def decode_cache_payload(raw: str) -> Optional[HabitsCache]:
    """Decode a stored cache value, newest shape first.

    1. ``{"habits": [...], "cachedAt": ..., "cachedForDates": [...]}``
    2. a bare list of habits (written by older clients)

    Returns None for anything else.

    Raises:
        ValueError: when ``raw`` is not JSON at all.
    """

    parsed = json.loads(raw)

    if isinstance(parsed, dict) and isinstance(parsed.get("habits"), list):
        dates = parsed.get("cachedForDates")
        return HabitsCache(
            habits=habits_from_payloads(parsed["habits"]),
            cached_at=_parse_cached_at(parsed.get("cachedAt")),
            cached_for_dates=[d for d in dates if isinstance(d, str)] if isinstance(dates, list) else [],
        )

    if isinstance(parsed, list):
        return HabitsCache(habits=habits_from_payloads(parsed), cached_at=None, cached_for_dates=[])

    return None


class HabitCache:
    """Whole-record cache of a user's habits for the days around today."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        window_days: int = CACHE_WINDOW_DAYS,
        key: str = HABITS_CACHE_KEY,
    ):
        self.store = store
        self.window_days = window_days
        self.key = key
        self._write_lock = threading.Lock()

    def cache_window(self, reset: ResetBoundary, *, now: datetime) -> list[str]:
        """Effective date keys from ``now - window_days`` to ``now + window_days``."""

        return [
            effective_date_key(now + timedelta(days=offset), reset.hour, reset.minute)
            for offset in range(-self.window_days, self.window_days + 1)
        ]

    def is_within_window(self, moment: Moment, *, now: datetime) -> bool:
        """True when ``moment`` is at most ``window_days`` whole days from ``now``."""

        return abs(days_between(moment, now)) <= self.window_days

    def read_record(self) -> Optional[HabitsCache]:
        try:
            raw = self.store.get(self.key)
        except Exception as exc:
            logger.error(f"Error loading habits cache: {exc}", exc_info=True)
            return None
        if not raw:
            return None

        try:
            record = decode_cache_payload(raw)
        except Exception as exc:
            logger.error(f"Unparsable habits cache: {exc!r}", exc_info=True)
            return None
        if record is None:
            logger.warning("Invalid habits cache shape")
        return record

    def read(self) -> Optional[list[Habit]]:
        """Return the cached habits, or None on a miss."""

        record = self.read_record()
        if record is None:
            return None
        logger.debug(
            f"Habits cache loaded: {len(record.habits)} habits, cached at {record.cached_at}"
        )
        return record.habits

    def write(self, habits: Sequence[Habit], reset: ResetBoundary, *, now: datetime) -> None:
        """Replace the cached record with ``habits``; never merges."""

        record = HabitsCache(
            habits=list(habits),
            cached_at=now,
            cached_for_dates=self.cache_window(reset, now=now),
        )
        with self._write_lock:
            try:
                self.store.set(self.key, record.to_json())
            except Exception as exc:
                logger.error(f"Error saving habits cache: {exc}", exc_info=True)
                return
        logger.debug(f"Habits cached: {len(record.habits)} habits")

    def invalidate(self) -> None:
        with self._write_lock:
            try:
                self.store.delete(self.key)
            except Exception as exc:
                logger.error(f"Error clearing habits cache: {exc}", exc_info=True)


class PointsLedger:
    """Running total of reward points earned across all habits."""

    def __init__(self, store: KeyValueStore, *, key: str = TOTAL_POINTS_KEY):
        self.store = store
        self.key = key
        self._write_lock = threading.Lock()

    def total(self) -> float:
        """Return the stored total, 0 when absent or unreadable."""

        try:
            raw = self.store.get(self.key)
        except Exception as exc:
            logger.error(f"Error reading total points: {exc}", exc_info=True)
            return 0
        if not raw:
            return 0
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"Unreadable total points value {raw!r}")
            return 0
        if not math.isfinite(value):
            logger.warning(f"Non-finite total points value {raw!r}")
            return 0
        return int(value) if value.is_integer() else value

    def add(self, points: float) -> float:
        if points <= 0:
            return self.total()
        return self._store_total(lambda current: current + points)

    def subtract(self, points: float) -> float:
        if points <= 0:
            return self.total()
        return self._store_total(lambda current: max(0, current - points))

    def _store_total(self, update) -> float:
        with self._write_lock:
            new_total = update(self.total())
            try:
                self.store.set(self.key, str(new_total))
            except Exception as exc:
                logger.error(f"Error saving total points: {exc}", exc_info=True)
            return new_total


def load_reset_boundary(store: KeyValueStore, default: Optional[ResetBoundary] = None) -> ResetBoundary:
    """Return the locally cached reset boundary, or ``default`` (4:00) on a miss."""

    fallback = default or ResetBoundary()
    try:
        raw = store.get(RESET_TIME_KEY)
    except Exception as exc:
        logger.error(f"Error reading reset time: {exc}", exc_info=True)
        return fallback
    if not raw:
        return fallback
    try:
        data = json.loads(raw)
        return ResetBoundary(int(data["hour"]), int(data["minute"]))
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning(f"Unreadable cached reset time {raw!r}: {exc}")
        return fallback


def save_reset_boundary(store: KeyValueStore, reset: ResetBoundary) -> None:
    try:
        store.set(RESET_TIME_KEY, json.dumps(reset.as_dict()))
    except Exception as exc:
        logger.error(f"Error saving reset time: {exc}", exc_info=True)


__all__ = [
    "HabitCache",
    "HabitsCache",
    "PointsLedger",
    "decode_cache_payload",
    "load_reset_boundary",
    "save_reset_boundary",
]
