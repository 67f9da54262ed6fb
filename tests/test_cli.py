"""Tests for the click command line interface."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from habitloop.cli import cli
from habitloop.config import BaseConfig
from habitloop.context import create_app_context

USER = "user-1"


@pytest.fixture
def app(tmp_path, monkeypatch, habit_factory):
    monkeypatch.setenv("HABITLOOP_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HABITLOOP_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITLOOP_CACHE_URL", raising=False)
    context = create_app_context(BaseConfig())
    context.habit_store.save_habit(
        habit_factory(habit_id="read", name="Read", reward_points=5), user_id=USER
    )
    context.habit_store.save_habit(
        habit_factory(
            habit_id="water",
            name="Water",
            increment=True,
            increment_goal=8,
            increment_type="glasses",
            increment_history={"2024-01-10": 3},
        ),
        user_id=USER,
    )
    return context


@pytest.fixture
def run(app):
    runner = CliRunner()

    def _run(*args: str):
        return runner.invoke(cli, list(args), obj=app)

    return _run


def test_today_lists_scheduled_habits(run):
    result = run("today", "--user", USER, "--date", "2024-01-10")

    assert result.exit_code == 0, result.output
    assert "2024-01-10 (day resets at 04:00)" in result.output
    assert "[!] Read" in result.output
    assert "Water 3/8 glasses" in result.output
    assert "Progress: 0.375/2" in result.output


def test_today_with_nothing_scheduled(run):
    result = run("today", "--user", USER, "--date", "2023-12-01")

    assert result.exit_code == 0
    assert "No habits scheduled." in result.output


def test_today_rejects_bad_date(run):
    result = run("today", "--user", USER, "--date", "10/01/2024")

    assert result.exit_code == 2
    assert "YYYY-MM-DD" in result.output


def test_cache_show_and_clear(run):
    assert "Cache is empty." in run("cache", "show").output

    run("today", "--user", USER, "--date", "2024-01-10")
    shown = run("cache", "show").output
    assert "Habits: 2" in shown
    assert "Cached at:" in shown

    assert "Cache cleared." in run("cache", "clear").output
    assert "Cache is empty." in run("cache", "show").output


def test_reset_time_round_trip(run):
    assert run("reset-time", "show", "--user", USER).output.strip() == "04:00"

    result = run("reset-time", "set", "05:30", "--user", USER)

    assert result.exit_code == 0, result.output
    assert "Day now resets at 05:30" in result.output
    assert run("reset-time", "show", "--user", USER).output.strip() == "05:30"


@pytest.mark.parametrize("value", ["25:00", "7", "ab:cd", "12:60"])
def test_reset_time_rejects_invalid_values(run, value):
    result = run("reset-time", "set", value, "--user", USER)

    assert result.exit_code == 2
