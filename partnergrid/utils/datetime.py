"""Time utilities with timezone-aware defaults."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time with tzinfo."""

    return datetime.now(timezone.utc)


def epoch_ms(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for ``moment`` (defaults to now)."""

    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)


__all__ = ["epoch_ms", "utc_now"]
