"""Declarative base for the tables backing the local key/value medium."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Surrogate integer key; each table names itself and its unique lookup column."""

    id: Mapped[int] = mapped_column(primary_key=True)


__all__ = ["Base"]
