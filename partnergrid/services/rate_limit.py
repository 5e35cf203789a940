"""Last-known provider call budget, as reported by response headers."""

from __future__ import annotations

from typing import Mapping

from pydantic import ValidationError

from partnergrid.db.store import KeyValueStore
from partnergrid.domain.models import RateLimitState
from partnergrid.logging import logger
from partnergrid.services.exceptions import CacheReadCorruption, CacheWriteFailure

RATE_LIMIT_KEY = "github_rate_limit"

REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"
LIMIT_HEADER = "x-ratelimit-limit"


class RateLimitTracker:
    """Observational only: records the budget, never gates a request."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._state: RateLimitState | None = self._load()

    def update(self, remaining: int, reset_epoch_seconds: int, total: int) -> RateLimitState:
        state = RateLimitState(
            remaining=remaining,
            reset_at=reset_epoch_seconds * 1000,
            total=total,
        )
        self._state = state
        try:
            self._store.set_item(RATE_LIMIT_KEY, state.model_dump_json())
        except CacheWriteFailure as exc:
            logger.warning("rate_limit_persist_failed", error=str(exc))
        logger.debug("rate_limit_updated", remaining=remaining, total=total, reset_at=state.reset_at)
        return state

    def update_from_headers(self, headers: Mapping[str, str]) -> RateLimitState | None:
        """Apply the three rate headers; a partial or malformed set leaves state untouched."""

        lowered = {str(name).lower(): value for name, value in headers.items()}
        raw = [lowered.get(name) for name in (REMAINING_HEADER, RESET_HEADER, LIMIT_HEADER)]
        if any(value in (None, "") for value in raw):
            return None
        try:
            remaining, reset, total = (int(value) for value in raw)
        except ValueError:
            logger.warning("rate_limit_headers_invalid", headers=raw)
            return None
        return self.update(remaining, reset, total)

    def read(self) -> RateLimitState | None:
        return self._load() or self._state

    def is_low(self, threshold: int = 10) -> bool:
        state = self.read()
        return state is not None and state.remaining < threshold

    def _load(self) -> RateLimitState | None:
        try:
            raw = self._store.get_item(RATE_LIMIT_KEY)
        except CacheReadCorruption as exc:
            logger.warning("rate_limit_read_failed", error=str(exc))
            return None
        if raw is None:
            return None
        try:
            return RateLimitState.model_validate_json(raw)
        except ValidationError:
            logger.warning("rate_limit_state_corrupt")
            return None


__all__ = ["RATE_LIMIT_KEY", "RateLimitTracker"]
