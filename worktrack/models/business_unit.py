# WorkTrack - Business Unit Model

from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TrackedMixin

if TYPE_CHECKING:
    from .employee import Employee
    from .project import Project


class BusinessUnit(TrackedMixin, Base):
    """
    Top-level organizational and billing grouping.

    Employees, projects and timesheet entries all belong to exactly one
    business unit. The six-digit code is the primary key and what callers
    enter on a timesheet.
    """

    __tablename__ = "business_units"

    code: Mapped[str] = mapped_column(
        String(6),
        primary_key=True
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    # Operating company grouping (e.g., "HENKELS")
    bu_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )

    customer_num: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    division: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Inactive units fail existence checks but keep historical entries
    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )

    # Relationships
    employees: Mapped[List["Employee"]] = relationship(
        "Employee",
        back_populates="business_unit_ref"
    )

    projects: Mapped[List["Project"]] = relationship(
        "Project",
        back_populates="business_unit_ref"
    )

    def __repr__(self) -> str:
        return f"<BusinessUnit {self.code} {self.name}>"


# Default business units to seed on initial setup
DEFAULT_BUSINESS_UNITS = [
    {
        "code": "220000", "name": "HENKELS WEST CONTROLS", "buType": "HENKELS",
        "customerNum": "HW001", "customerName": "Henkels West Operations",
        "region": "West Coast", "division": "Controls", "active": True,
    },
    {
        "code": "220001", "name": "HENKELS WEST INDUSTRIAL", "buType": "HENKELS",
        "customerNum": "HW002", "customerName": "Industrial Controls Division",
        "region": "West Coast", "division": "Industrial", "active": True,
    },
    {
        "code": "220002", "name": "HENKELS WEST COMMERCIAL", "buType": "HENKELS",
        "customerNum": "HW003", "customerName": "Commercial Systems",
        "region": "West Coast", "division": "Commercial", "active": True,
    },
    {
        "code": "220003", "name": "HENKELS WEST INFRASTRUCTURE", "buType": "HENKELS",
        "customerNum": "HW004", "customerName": "Infrastructure Projects",
        "region": "West Coast", "division": "Infrastructure", "active": True,
    },
    {
        "code": "220004", "name": "HENKELS WEST MAINTENANCE", "buType": "HENKELS",
        "customerNum": "HW005", "customerName": "Maintenance Operations",
        "region": "West Coast", "division": "Maintenance", "active": True,
    },
]
