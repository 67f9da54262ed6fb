"""Habit day views: cache-first loading and persisted completion actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..domain.habit import Habit, HabitView, ResetBoundary
from ..domain.repositories.habit import HabitStore
from ..domain.repositories.storage import KeyValueStore
from . import actions
from .cache import HabitCache, PointsLedger, load_reset_boundary, save_reset_boundary
from .cycles import active_habits_for_date, resolve_cycle_start, with_completion
from .dates import Moment, effective_date, effective_date_key
from .habits import DayProgress, HabitStatus, app_streak, earned_points, habit_status, progress_for_day
from .ingest import reset_from_user_settings

logger = logging.getLogger(__name__)


class HabitStoreUnavailable(RuntimeError):
    """The habit store could not be reached and nothing usable was cached."""


class HabitNotFound(LookupError):
    """No habit with the requested id exists for the user."""


@dataclass(slots=True)
class DayView:
    """Everything a habit list needs to render one day."""

    date_key: str
    today_key: str
    reset: ResetBoundary
    habits: list[HabitView]
    statuses: dict[str, HabitStatus] = field(default_factory=dict)
    progress: DayProgress = field(default_factory=DayProgress)
    earned_points: int = 0
    total_points: float = 0
    app_streak: int = 0
    from_cache: bool = False

    @property
    def is_today(self) -> bool:
        return self.date_key == self.today_key


class HabitService:
    """Serves habits for a date and applies user actions to them."""

    def __init__(
        self,
        store: HabitStore,
        local_store: KeyValueStore,
        *,
        cache: Optional[HabitCache] = None,
        points: Optional[PointsLedger] = None,
        default_reset: Optional[ResetBoundary] = None,
    ):
        self.store = store
        self.local_store = local_store
        self.cache = cache or HabitCache(local_store)
        self.points = points or PointsLedger(local_store)
        self.default_reset = default_reset or ResetBoundary()

    # Reset boundary
    def reset_boundary(self, *, user_id: str) -> ResetBoundary:
        """Return the user's reset boundary, preferring the store over the local copy."""

        try:
            settings = self.store.get_user_settings(user_id=user_id)
        except Exception as exc:
            logger.warning(f"Could not load user settings, using cached reset time: {exc}")
            return load_reset_boundary(self.local_store, self.default_reset)

        if settings is None:
            return load_reset_boundary(self.local_store, self.default_reset)

        reset = reset_from_user_settings(
            settings.end_of_day_hour,
            settings.end_of_day_minute,
            settings.end_of_day_meridiem,
        )
        save_reset_boundary(self.local_store, reset)
        return reset

    # Loading
    def load_day(self, *, user_id: str, viewing: Moment, now: datetime) -> DayView:
        """Build the day view for ``viewing``.

        Inside the cache window the cached habits are used when the store
        cannot be reached; fresh store data always replaces the cache.
        """

        reset = self.reset_boundary(user_id=user_id)
        habits, from_cache = self._current_habits(user_id=user_id, viewing=viewing, reset=reset, now=now)
        return self.build_day_view(habits, viewing=viewing, reset=reset, now=now, from_cache=from_cache)

    def _current_habits(
        self, *, user_id: str, viewing: Moment, reset: ResetBoundary, now: datetime
    ) -> tuple[list[Habit], bool]:
        cached = None
        if self.cache.is_within_window(viewing, now=now):
            cached = self.cache.read()
            logger.debug(f"In cache window, cached habits: {len(cached) if cached else 0}")

        try:
            fresh = self.store.list_habits(user_id=user_id)
        except Exception as exc:
            if cached is not None:
                logger.warning(f"Habit store unavailable, serving cached habits: {exc}")
                return cached, True
            raise HabitStoreUnavailable(f"Could not load habits for user {user_id}") from exc

        self.cache.write(fresh, reset, now=now)
        return fresh, False

    def build_day_view(
        self,
        habits: Sequence[Habit],
        *,
        viewing: Moment,
        reset: ResetBoundary,
        now: datetime,
        from_cache: bool = False,
    ) -> DayView:
        day_key = effective_date_key(viewing, reset.hour, reset.minute)
        today = effective_date(now, reset.hour, reset.minute)
        today_key = effective_date_key(now, reset.hour, reset.minute)

        scheduled = active_habits_for_date(habits, viewing, reset.hour, reset.minute)
        views = with_completion(scheduled, viewing, reset.hour, reset.minute)
        statuses = {view.id: habit_status(view, day_key, today_key) for view in views}

        return DayView(
            date_key=day_key,
            today_key=today_key,
            reset=reset,
            habits=views,
            statuses=statuses,
            progress=progress_for_day(views, statuses),
            earned_points=earned_points(views),
            total_points=self.points.total(),
            app_streak=app_streak(habits, today=today),
            from_cache=from_cache,
        )

    # Actions
    def toggle(self, *, user_id: str, habit_id: str, viewing: Moment, now: datetime) -> DayView:
        """Complete (or un-complete) the habit's cycle for the viewed day."""

        pending = {"points": 0}

        def apply(habit: Habit, reset: ResetBoundary) -> Habit:
            cycle = resolve_cycle_start(habit, viewing, reset.hour, reset.minute)
            today = effective_date(now, reset.hour, reset.minute)
            updated, pending["points"] = actions.toggle_completion(habit, cycle, today=today)
            return updated

        def credit() -> None:
            delta = pending["points"]
            if delta > 0:
                self.points.add(delta)
            elif delta < 0:
                self.points.subtract(-delta)

        return self._apply(
            user_id=user_id, habit_id=habit_id, viewing=viewing, now=now, change=apply, on_saved=credit
        )

    def update_increment(
        self, *, user_id: str, habit_id: str, amount: float, viewing: Moment, now: datetime
    ) -> DayView:
        def apply(habit: Habit, reset: ResetBoundary) -> Habit:
            cycle = resolve_cycle_start(habit, viewing, reset.hour, reset.minute)
            return actions.set_increment(habit, cycle, amount)

        return self._apply(user_id=user_id, habit_id=habit_id, viewing=viewing, now=now, change=apply)

    def snooze(self, *, user_id: str, habit_id: str, viewing: Moment, now: datetime) -> DayView:
        def apply(habit: Habit, reset: ResetBoundary) -> Habit:
            return actions.snooze(habit, effective_date_key(viewing, reset.hour, reset.minute))

        return self._apply(user_id=user_id, habit_id=habit_id, viewing=viewing, now=now, change=apply)

    def skip(self, *, user_id: str, habit_id: str, viewing: Moment, now: datetime) -> DayView:
        def apply(habit: Habit, reset: ResetBoundary) -> Habit:
            return actions.skip(habit, effective_date_key(viewing, reset.hour, reset.minute))

        return self._apply(user_id=user_id, habit_id=habit_id, viewing=viewing, now=now, change=apply)

    def delete(self, *, user_id: str, habit_id: str, viewing: Moment, now: datetime) -> DayView:
        reset = self.reset_boundary(user_id=user_id)
        habits, _ = self._current_habits(user_id=user_id, viewing=viewing, reset=reset, now=now)
        if not any(h.id == habit_id for h in habits):
            raise HabitNotFound(habit_id)

        self.store.delete_habit(habit_id, user_id=user_id)
        remaining = [h for h in habits if h.id != habit_id]
        self.cache.write(remaining, reset, now=now)
        logger.info(f"Habit {habit_id} deleted, {len(remaining)} remaining")
        return self.build_day_view(remaining, viewing=viewing, reset=reset, now=now)

    def _apply(
        self,
        *,
        user_id: str,
        habit_id: str,
        viewing: Moment,
        now: datetime,
        change: Callable[[Habit, ResetBoundary], Habit],
        on_saved: Optional[Callable[[], None]] = None,
    ) -> DayView:
        reset = self.reset_boundary(user_id=user_id)
        habits, _ = self._current_habits(user_id=user_id, viewing=viewing, reset=reset, now=now)

        updated_habits = []
        found = False
        for habit in habits:
            if habit.id == habit_id:
                habit = self.store.save_habit(change(habit, reset), user_id=user_id)
                found = True
            updated_habits.append(habit)
        if not found:
            raise HabitNotFound(habit_id)
        if on_saved is not None:
            on_saved()

        self.cache.write(updated_habits, reset, now=now)
        return self.build_day_view(updated_habits, viewing=viewing, reset=reset, now=now)


__all__ = ["DayView", "HabitNotFound", "HabitService", "HabitStoreUnavailable"]
