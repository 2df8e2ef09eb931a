# WorkTrack - Base Model and Mixins

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite has no time zone storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    def to_dict(self) -> dict[str, Any]:
        """Column name -> value for every mapped column."""
        mapper = inspect(type(self))
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in mapper.column_attrs
        }


class TimestampMixin:
    """Mixin that adds created_at timestamp to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False
    )


class TrackedMixin(TimestampMixin):
    """
    Mixin that adds created_at and updated_at.

    updated_at is stamped explicitly by the persistence layer on every
    UPDATE so generic Core statements keep it current too.
    """

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=True
    )
