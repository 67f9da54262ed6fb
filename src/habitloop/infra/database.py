"""Engines and sessions for the two databases habitloop opens.

The habit store database owns the ``habit`` and ``user_settings`` tables.
The local cache database owns ``stored_value`` only. Both URLs may name the
same database, in which case one engine serves both.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, ContextManager, Iterator, Optional, Sequence

from sqlalchemy import Table
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..models import HabitRecord, StoredValue, UserSettings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]

STORE_TABLES: tuple[Table, ...] = (HabitRecord.__table__, UserSettings.__table__)  # type: ignore[attr-defined]
CACHE_TABLES: tuple[Table, ...] = (StoredValue.__table__,)  # type: ignore[attr-defined]


def create_session_factory(engine: Engine) -> SessionFactory:
    """Return a factory of sessions that commit on success and roll back on error."""

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@dataclass
class Database:
    """One bound engine with the tables created on it."""

    url: str
    engine: Engine
    session_factory: SessionFactory

    def dispose(self) -> None:
        self.engine.dispose()


@dataclass
class Databases:
    """The habit store and local cache databases of one configuration."""

    store: Database
    cache: Database

    @property
    def shared(self) -> bool:
        return self.store.engine is self.cache.engine

    def dispose(self) -> None:
        self.store.dispose()
        if not self.shared:
            self.cache.dispose()


def open_database(config: BaseConfig, url: str, tables: Sequence[Table]) -> Database:
    """Create an engine for ``url`` and make sure ``tables`` exist there."""

    engine = create_engine(url, **config.sqlalchemy_engine_options())
    SQLModel.metadata.create_all(engine, tables=list(tables))
    return Database(url=url, engine=engine, session_factory=create_session_factory(engine))


def bootstrap_databases(config: Optional[BaseConfig] = None) -> Databases:
    """Open the habit store (``DATABASE_URL``) and local cache (``CACHE_URL``)."""

    cfg = config or BaseConfig()
    store = open_database(cfg, cfg.DATABASE_URL, STORE_TABLES)

    if cfg.CACHE_URL == cfg.DATABASE_URL:
        SQLModel.metadata.create_all(store.engine, tables=list(CACHE_TABLES))
        cache = Database(url=store.url, engine=store.engine, session_factory=store.session_factory)
    else:
        cache = open_database(cfg, cfg.CACHE_URL, CACHE_TABLES)

    databases = Databases(store=store, cache=cache)
    logger.info(
        "Databases ready",
        extra={"store_url": store.url, "cache_url": cache.url, "shared": databases.shared},
    )
    return databases


__all__ = [
    "CACHE_TABLES",
    "Database",
    "Databases",
    "STORE_TABLES",
    "SessionFactory",
    "bootstrap_databases",
    "create_session_factory",
    "open_database",
]
