"""SQLAlchemy models for the local key/value medium."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from partnergrid.db.base import Base
from partnergrid.utils.datetime import utc_now


class StoredItem(Base):
    __tablename__ = "stored_items"
    __table_args__ = (UniqueConstraint("key", name="uq_stored_items_key"),)

    key: Mapped[str] = mapped_column(String(1024), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


__all__ = ["StoredItem"]
