"""Unit tests for repository implementations."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect

from habitloop.config import BaseConfig
from habitloop.domain.habit import Monthly, OneTime, Weekly
from habitloop.infra.database import bootstrap_databases
from habitloop.infra.repositories import SQLModelHabitStore, SQLModelKeyValueStore
from habitloop.models import HabitRecord, UserSettings

USER = "user-1"


class TestKeyValueStore:
    def test_get_missing_key(self, kv_store):
        assert kv_store.get("@nothing") is None

    def test_set_get_overwrite(self, kv_store):
        kv_store.set("@k", "one")
        kv_store.set("@k", "two")

        assert kv_store.get("@k") == "two"

    def test_delete(self, kv_store):
        kv_store.set("@k", "value")

        kv_store.delete("@k")
        kv_store.delete("@k")

        assert kv_store.get("@k") is None


class TestHabitStore:
    def test_save_and_list(self, habit_store, habit_factory):
        habit = habit_factory(
            frequency="Weekly",
            selected_days=["Monday", "Thursday"],
            completion_history={"2024-01-04"},
            increment_history={"2024-01-04": 2},
            reward_points=15,
        )

        saved = habit_store.save_habit(habit, user_id=USER)

        assert saved == habit
        assert habit_store.list_habits(user_id=USER) == [habit]

    def test_list_scoped_by_user(self, habit_store, habit_factory):
        habit_store.save_habit(habit_factory(habit_id="mine"), user_id=USER)
        habit_store.save_habit(habit_factory(habit_id="theirs"), user_id="user-2")

        assert [h.id for h in habit_store.list_habits(user_id=USER)] == ["mine"]

    def test_save_replaces_existing(self, habit_store, habit_factory):
        habit = habit_factory(habit_id="h1", frequency="Monthly")
        habit_store.save_habit(habit, user_id=USER)

        habit_store.save_habit(
            habit_factory(habit_id="h1", frequency="None", name="Renamed"), user_id=USER
        )

        (stored,) = habit_store.list_habits(user_id=USER)
        assert stored.name == "Renamed"
        assert stored.schedule == OneTime()

    def test_delete(self, habit_store, habit_factory):
        habit_store.save_habit(habit_factory(habit_id="h1"), user_id=USER)
        habit_store.save_habit(habit_factory(habit_id="h2"), user_id=USER)

        habit_store.delete_habit("h1", user_id=USER)
        habit_store.delete_habit("missing", user_id=USER)

        assert [h.id for h in habit_store.list_habits(user_id=USER)] == ["h2"]

    def test_rows_written_by_other_clients(self, habit_store, session_factory):
        with session_factory() as session:
            session.add(
                HabitRecord(
                    id="legacy",
                    user_id=USER,
                    frequency="Fortnightly",
                    start_date="2024-01-01",
                    snoozed_until="2024-01-05T04:00:00Z",
                )
            )
            session.add(
                HabitRecord(
                    id="weekly",
                    user_id=USER,
                    frequency="Weekly",
                    selected_days=["Tuesday", "Someday"],
                    start_date="2024-01-02",
                )
            )
            session.commit()

        habits = {h.id: h for h in habit_store.list_habits(user_id=USER)}

        assert habits["legacy"].frequency.value == "Daily"
        assert habits["legacy"].snoozed_until == "2024-01-05"
        assert habits["weekly"].schedule == Weekly(days=frozenset({"Tuesday"}))

    def test_user_settings(self, habit_store):
        assert habit_store.get_user_settings(user_id=USER) is None

        habit_store.save_user_settings(UserSettings(user_id=USER, end_of_day_hour="5", end_of_day_minute="15"))
        habit_store.save_user_settings(
            UserSettings(user_id=USER, end_of_day_hour="2", end_of_day_minute="30", end_of_day_meridiem="AM")
        )

        settings = habit_store.get_user_settings(user_id=USER)
        assert (settings.end_of_day_hour, settings.end_of_day_minute) == ("2", "30")
        assert settings.end_of_day_meridiem == "AM"


class TestBootstrapDatabases:
    @pytest.fixture
    def config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HABITLOOP_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("HABITLOOP_DATABASE_URL", raising=False)
        monkeypatch.delenv("HABITLOOP_CACHE_URL", raising=False)
        return BaseConfig()

    def test_store_and_cache_are_separate_databases(self, config, habit_factory):
        databases = bootstrap_databases(config)

        assert not databases.shared
        assert set(inspect(databases.store.engine).get_table_names()) == {"habit", "user_settings"}
        assert set(inspect(databases.cache.engine).get_table_names()) == {"stored_value"}

        SQLModelHabitStore(databases.store.session_factory).save_habit(
            habit_factory(habit_id="boot", frequency="Monthly"), user_id=USER
        )
        SQLModelKeyValueStore(databases.cache.session_factory).set("@k", "v")

        (habit,) = SQLModelHabitStore(databases.store.session_factory).list_habits(user_id=USER)
        assert habit.schedule == Monthly()
        assert SQLModelKeyValueStore(databases.cache.session_factory).get("@k") == "v"
        databases.dispose()

    def test_same_url_shares_one_engine(self, config, tmp_path):
        url = f"sqlite:///{tmp_path / 'single.db'}"
        config.DATABASE_URL = url
        config.CACHE_URL = url

        databases = bootstrap_databases(config)

        assert databases.shared
        assert set(inspect(databases.store.engine).get_table_names()) == {
            "habit",
            "user_settings",
            "stored_value",
        }
        databases.dispose()
