# WorkTrack - Work Type Model

from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class WorkType(TimestampMixin, Base):
    """
    Time category selected on an entry (REGULAR, OVERTIME, HOLIDAY, ...).

    min_hours / max_hours describe the premium tier a type is meant for.
    They are advisory only: premium classification is always derived from
    the day's total hours, never from the type an entry was tagged with.
    """

    __tablename__ = "work_types"

    id: Mapped[str] = mapped_column(
        String(20),
        primary_key=True
    )

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )

    # Pay multiplier (1.0 regular, 1.5 overtime, 2.0 double time)
    multiplier: Mapped[Decimal] = mapped_column(
        Numeric(4, 2),
        default=Decimal("1.00"),
        nullable=False
    )

    min_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    description: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<WorkType {self.id} x{self.multiplier}>"

    @property
    def is_premium(self) -> bool:
        """Check if this type pays above straight time."""
        return self.multiplier is not None and self.multiplier > 1


# Default work types to seed on initial setup
DEFAULT_WORK_TYPES = [
    {"id": "REGULAR", "name": "Regular Time", "multiplier": "1.0", "maxHours": 8,
     "description": "Standard work hours (up to 8 hours)"},
    {"id": "OVERTIME", "name": "Overtime", "multiplier": "1.5", "minHours": 8, "maxHours": 12,
     "description": "Premium time (over 8 hours, up to 12 hours)"},
    {"id": "DOUBLETIME", "name": "Double Time", "multiplier": "2.0", "minHours": 12,
     "description": "Double premium time (over 12 hours)"},
    {"id": "HOLIDAY", "name": "Holiday", "multiplier": "2.0", "maxHours": 8,
     "description": "Holiday work (up to 8 hours)"},
    {"id": "SICK", "name": "Sick Leave", "multiplier": "1.0", "maxHours": 8,
     "description": "Paid sick leave"},
    {"id": "VACATION", "name": "Vacation", "multiplier": "1.0", "maxHours": 8,
     "description": "Paid vacation time"},
    {"id": "PERSONAL", "name": "Personal Time", "multiplier": "1.0", "maxHours": 8,
     "description": "Personal time off"},
]
