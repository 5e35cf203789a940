"""Key/value media shared by the response cache and the rate-limit tracker."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from partnergrid.db.models.core import StoredItem
from partnergrid.db.session import Database
from partnergrid.services.exceptions import CacheReadCorruption, CacheWriteFailure


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...


class MemoryKeyValueStore:
    """Dict-backed medium; ``max_items`` emulates a storage quota."""

    def __init__(self, max_items: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self.max_items = max_items

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if (
            self.max_items is not None
            and key not in self._items
            and len(self._items) >= self.max_items
        ):
            raise CacheWriteFailure(f"Storage quota of {self.max_items} items exceeded.")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._items if key.startswith(prefix)]


class SqlKeyValueStore:
    """Durable medium persisted through SQLAlchemy."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def get_item(self, key: str) -> str | None:
        try:
            with self.database.session() as session:
                stmt = select(StoredItem.value).where(StoredItem.key == key)
                return session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise CacheReadCorruption(f"Failed to read {key!r}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            with self.database.session() as session:
                stmt = select(StoredItem).where(StoredItem.key == key)
                item = session.execute(stmt).scalar_one_or_none()
                if item is None:
                    session.add(StoredItem(key=key, value=value))
                else:
                    item.value = value
                session.commit()
        except SQLAlchemyError as exc:
            raise CacheWriteFailure(f"Failed to persist {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self.database.session() as session:
                session.execute(delete(StoredItem).where(StoredItem.key == key))
                session.commit()
        except SQLAlchemyError as exc:
            raise CacheWriteFailure(f"Failed to remove {key!r}: {exc}") from exc

    def keys(self, prefix: str = "") -> list[str]:
        try:
            with self.database.session() as session:
                stmt = select(StoredItem.key)
                if prefix:
                    stmt = stmt.where(StoredItem.key.startswith(prefix, autoescape=True))
                return list(session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise CacheReadCorruption(f"Failed to list keys: {exc}") from exc


__all__ = ["KeyValueStore", "MemoryKeyValueStore", "SqlKeyValueStore"]
