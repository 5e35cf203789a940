"""Shared pytest fixtures for store-backed service tests."""

from __future__ import annotations

from typing import Any

import pytest

from partnergrid.config import FinderSettings, StorageSettings
from partnergrid.db.session import Database
from partnergrid.db.store import MemoryKeyValueStore, SqlKeyValueStore
from partnergrid.services.exceptions import CacheReadCorruption


class UnreadableStore(MemoryKeyValueStore):
    """Medium that accepts writes but fails every read."""

    def get_item(self, key: str) -> str | None:
        raise CacheReadCorruption(f"Failed to read {key!r}: disk I/O error")


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def database():
    settings = FinderSettings(storage=StorageSettings(dsn="sqlite:///:memory:"))
    db = Database(settings=settings)
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def unreadable_store() -> UnreadableStore:
    return UnreadableStore()


@pytest.fixture
def sql_store(database) -> SqlKeyValueStore:
    return SqlKeyValueStore(database)


@pytest.fixture
def user_factory():
    def _make(user_id: int, login: str | None = None, **fields: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": user_id,
            "login": login or f"dev{user_id}",
            "bio": None,
            "location": None,
            "public_repos": 20,
            "followers": 100,
            "created_at": "2018-01-01T00:00:00Z",
        }
        payload.update(fields)
        return payload

    return _make
