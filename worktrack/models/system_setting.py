# WorkTrack - System Setting Model

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class SystemSetting(Base):
    """
    Key-value store for system configuration.

    Examples:
        - schema_version: "1.0.0"
        - overtime_daily_threshold: "8"

    Values are stored as strings and parsed by the application layer.
    """

    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(
        String(100),
        primary_key=True
    )

    # Value stored as string, parsed by application
    value: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    description: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<SystemSetting {self.key}={self.value}>"

    def get_int(self) -> int:
        """Parse value as integer."""
        return int(self.value)

    def get_float(self) -> float:
        """Parse value as float."""
        return float(self.value)

    def get_bool(self) -> bool:
        """Parse value as boolean."""
        return self.value.lower() in ("true", "1", "yes", "on")


SCHEMA_VERSION_KEY = "schema_version"
