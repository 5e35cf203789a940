"""SQLAlchemy session management for the local key/value medium.

Sessions are synchronous; cache and rate-limit access never suspends the
event loop.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from partnergrid.config import FinderSettings, get_settings
from partnergrid.db.base import Base
from partnergrid.db.models.core import StoredItem  # noqa: F401  registers the table
from partnergrid.logging import logger


class Database:
    """Lazy SQLAlchemy engine/session factory wrapper."""

    def __init__(self, settings: FinderSettings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def _ensure_engine(self) -> None:
        if self._engine is None:
            storage_cfg = self.settings.storage
            url = make_url(storage_cfg.dsn)
            engine_kwargs: dict = {"echo": storage_cfg.echo, "future": True}
            if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every session sees an empty database.
                engine_kwargs["connect_args"] = {"check_same_thread": False}
                engine_kwargs["poolclass"] = StaticPool
            self._engine = create_engine(url, **engine_kwargs)
            Base.metadata.create_all(self._engine)
            self._session_factory = sessionmaker(
                bind=self._engine,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.info("db_engine_initialized", dsn=storage_cfg.dsn)

    @property
    def engine(self) -> Engine:
        self._ensure_engine()
        assert self._engine is not None
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        self._ensure_engine()
        assert self._session_factory is not None
        return self._session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        factory = self.session_factory
        with factory() as session:
            try:
                yield session
            except Exception:
                session.rollback()
                raise

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


__all__ = ["Database"]
