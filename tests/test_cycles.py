"""Tests for cycle resolution across every schedule kind."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from habitloop.domain.habit import Habit, Weekly
from habitloop.services.cycles import resolve_cycle_start


def _cycle(habit: Habit, moment, reset_hour: int = 4, reset_minute: int = 0) -> str:
    return resolve_cycle_start(habit, moment, reset_hour, reset_minute)


class TestOneTimeAndDaily:
    def test_one_time_cycle_is_start_date(self, habit_factory):
        habit = habit_factory(frequency="None", start_date="2024-01-10")

        assert _cycle(habit, datetime(2024, 1, 10, 12, 0)) == "2024-01-10"
        assert _cycle(habit, datetime(2024, 3, 1, 12, 0)) == "2024-01-10"

    def test_daily_cycle_is_effective_date(self, habit_factory):
        habit = habit_factory(frequency="Daily", start_date="2024-01-01")

        assert _cycle(habit, datetime(2024, 1, 10, 3, 59)) == "2024-01-09"
        assert _cycle(habit, datetime(2024, 1, 10, 4, 0)) == "2024-01-10"

    def test_daily_cycle_for_plain_date(self, habit_factory):
        habit = habit_factory(frequency="Daily")

        assert _cycle(habit, date(2024, 2, 29)) == "2024-02-29"


class TestWeekly:
    """Weekly cycles start on the most recent selected weekday."""

    @pytest.fixture
    def mon_thu(self, habit_factory):
        # 2024-01-01 is a Monday
        return habit_factory(frequency="Weekly", start_date="2024-01-01", selected_days=["Monday", "Thursday"])

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 1, 1), "2024-01-01"),
            (date(2024, 1, 2), "2024-01-01"),
            (date(2024, 1, 3), "2024-01-01"),
            (date(2024, 1, 4), "2024-01-04"),
            (date(2024, 1, 5), "2024-01-04"),
            (date(2024, 1, 7), "2024-01-04"),
            (date(2024, 1, 8), "2024-01-08"),
        ],
    )
    def test_most_recent_selected_day(self, mon_thu, day, expected):
        assert _cycle(mon_thu, day) == expected

    def test_reset_boundary_keeps_previous_cycle(self, mon_thu):
        # Thursday 02:00 still belongs to Wednesday, so Monday's cycle
        assert _cycle(mon_thu, datetime(2024, 1, 4, 2, 0)) == "2024-01-01"
        assert _cycle(mon_thu, datetime(2024, 1, 4, 4, 0)) == "2024-01-04"

    def test_wraps_across_week_boundary(self, habit_factory):
        habit = habit_factory(frequency="Weekly", start_date="2024-01-01", selected_days=["Saturday"])

        # Tuesday 2024-01-09 looks back to Saturday 2024-01-06
        assert _cycle(habit, date(2024, 1, 9)) == "2024-01-06"

    def test_never_resolves_before_start_date(self, habit_factory):
        # Started on a Wednesday with only Monday selected
        habit = habit_factory(frequency="Weekly", start_date="2024-01-03", selected_days=["Monday"])

        assert _cycle(habit, date(2024, 1, 5)) == "2024-01-03"
        assert _cycle(habit, date(2024, 1, 8)) == "2024-01-08"

    def test_no_selected_days_falls_back_to_start(self, habit_factory):
        habit = habit_factory(frequency="Weekly", start_date="2024-01-01")

        assert habit.schedule == Weekly()
        assert _cycle(habit, date(2024, 1, 20)) == "2024-01-01"

    def test_cycle_is_never_after_effective_day(self, mon_thu):
        for day in range(1, 29):
            moment = date(2024, 2, day)
            assert _cycle(mon_thu, moment) <= moment.isoformat()


class TestMonthly:
    """Monthly cycles start on the start day of month, clamped to short months."""

    def test_same_month_after_start_day(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="2024-01-15")

        assert _cycle(habit, date(2024, 1, 20)) == "2024-01-15"
        assert _cycle(habit, date(2024, 3, 15)) == "2024-03-15"

    def test_before_start_day_uses_previous_month(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="2024-01-15")

        assert _cycle(habit, date(2024, 2, 10)) == "2024-01-15"

    def test_previous_month_wraps_year(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="2023-06-20")

        assert _cycle(habit, date(2024, 1, 5)) == "2023-12-20"

    def test_start_on_31st_in_february(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="2024-01-31")

        # Day 15 precedes the 31st, so the cycle is still January's
        assert _cycle(habit, date(2024, 2, 15)) == "2024-01-31"
        assert _cycle(habit, date(2024, 2, 29)) == "2024-01-31"

    def test_clamps_previous_month_to_its_last_day(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="2024-01-31")

        assert _cycle(habit, date(2024, 3, 15)) == "2024-02-29"
        assert _cycle(habit, date(2023, 3, 15)) == "2023-02-28"
        assert _cycle(habit, date(2024, 3, 31)) == "2024-03-31"

    def test_unparsable_start_date_uses_effective_day(self, habit_factory):
        habit = habit_factory(frequency="Monthly", start_date="not-a-date")

        assert _cycle(habit, datetime(2024, 5, 2, 1, 0)) == "2024-05-01"
