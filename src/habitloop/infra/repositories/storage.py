"""SQLModel implementation of durable key-value storage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.storage import StoredValue


class SQLModelKeyValueStore:
    """Key-value store backed by the ``stored_value`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            if row:
                row.value = value
                row.updated_at = datetime.now(timezone.utc)
            else:
                row = StoredValue(key=key, value=value)
            session.add(row)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            if row:
                session.delete(row)
                session.commit()


__all__ = ["SQLModelKeyValueStore"]
