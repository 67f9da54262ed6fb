"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import BaseConfig
from .domain.habit import ResetBoundary
from .infra.database import Databases, bootstrap_databases
from .infra.repositories import SQLModelHabitStore, SQLModelKeyValueStore
from .services.cache import HabitCache, PointsLedger
from .services.habit_service import HabitService


@dataclass
class AppContext:
    """Wired stores and services for one configuration."""

    config: BaseConfig
    databases: Databases

    habit_store: SQLModelHabitStore
    local_store: SQLModelKeyValueStore
    cache: HabitCache
    points: PointsLedger
    habit_service: HabitService


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    databases = bootstrap_databases(config)

    habit_store = SQLModelHabitStore(databases.store.session_factory)
    local_store = SQLModelKeyValueStore(databases.cache.session_factory)
    cache = HabitCache(local_store, window_days=config.CACHE_WINDOW_DAYS)
    points = PointsLedger(local_store)
    service = HabitService(
        habit_store,
        local_store,
        cache=cache,
        points=points,
        default_reset=ResetBoundary(config.DEFAULT_RESET_HOUR, config.DEFAULT_RESET_MINUTE),
    )

    return AppContext(
        config=config,
        databases=databases,
        habit_store=habit_store,
        local_store=local_store,
        cache=cache,
        points=points,
        habit_service=service,
    )
