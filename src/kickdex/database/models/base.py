"""Declarative base and shared mixins for the ORM models."""

from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kickdex.utils import utcnow


class Base(DeclarativeBase):
    """Base class for all models."""


class TimestampMixin:
    """Adds a creation timestamp column."""

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
