"""Time-bounded response cache over request identity."""

from __future__ import annotations

import base64
import json
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

from pydantic import ValidationError

from partnergrid.db.store import KeyValueStore
from partnergrid.domain.models import CacheEntry
from partnergrid.logging import logger
from partnergrid.services.exceptions import CacheReadCorruption, CacheWriteFailure
from partnergrid.utils.datetime import epoch_ms

CACHE_PREFIX = "github_cache_"
CACHE_TTL_MS = 5 * 60 * 1000


def make_cache_key(method: str, url: str, params: Mapping[str, Any] | None = None) -> str:
    """Stable key for a request; parameter order and container identity do not matter."""

    pairs = sorted((str(name), str(value)) for name, value in (params or {}).items())
    query = urlencode(pairs)
    identity = f"{method.upper()} {url}"
    if query:
        identity = f"{identity}?{query}"
    encoded = base64.urlsafe_b64encode(identity.encode("utf-8")).decode("ascii")
    return f"{CACHE_PREFIX}{encoded}"


class CacheStore:
    """Best-effort cache: staleness is checked on read, write failures are swallowed."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self._store = store
        self._ttl_ms = ttl_ms
        self._clock = clock

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def get(self, key: str) -> Any | None:
        try:
            raw = self._store.get_item(key)
        except CacheReadCorruption as exc:
            logger.warning("cache_read_failed", key=key, error=str(exc))
            return None
        if raw is None:
            return None
        try:
            entry = self._decode(key, raw)
        except CacheReadCorruption as exc:
            logger.warning("cache_entry_corrupt", key=key, error=str(exc))
            self._discard(key)
            return None

        if self._clock() - entry.stored_at > self._ttl_ms:
            self._discard(key)
            return None
        return entry.payload

    def set(self, key: str, payload: Any) -> bool:
        entry = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        try:
            self._store.set_item(key, json.dumps({"data": entry.payload, "timestamp": entry.stored_at}))
        except (CacheWriteFailure, TypeError, ValueError) as exc:
            logger.warning("cache_write_failed", key=key, error=str(exc))
            self._discard(key)
            return False
        return True

    def invalidate(self, key: str) -> None:
        self._discard(key)

    @staticmethod
    def _decode(key: str, raw: str) -> CacheEntry:
        try:
            stored = json.loads(raw)
            return CacheEntry(key=key, payload=stored["data"], stored_at=stored["timestamp"])
        except (ValueError, TypeError, KeyError, ValidationError) as exc:
            raise CacheReadCorruption(f"Malformed cache entry {key!r}") from exc

    def _discard(self, key: str) -> None:
        try:
            self._store.remove_item(key)
        except CacheWriteFailure as exc:
            logger.warning("cache_discard_failed", key=key, error=str(exc))


__all__ = ["CACHE_PREFIX", "CACHE_TTL_MS", "CacheStore", "make_cache_key"]
