# WorkTrack - Employee Model

from datetime import date
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Boolean, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TrackedMixin

if TYPE_CHECKING:
    from .business_unit import BusinessUnit
    from .timesheet_entry import TimesheetEntry


class Employee(TrackedMixin, Base):
    """
    Employee who records time.

    Organizational Hierarchy:
        Each employee belongs to one business unit and may report to a
        supervisor, who is another employee (or nobody at the top).

    The active flag gates visibility: inactive employees fail existence
    checks for new entries but their historical entries are kept.
    """

    __tablename__ = "employees"

    # Employee number, e.g. "EMP001"
    id: Mapped[str] = mapped_column(
        String(20),
        primary_key=True
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    role: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    business_unit: Mapped[str] = mapped_column(
        String(6),
        ForeignKey("business_units.code"),
        nullable=False,
        index=True
    )

    cost_center: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    pay_grade: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    hire_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Who this employee reports to
    supervisor: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("employees.id"),
        nullable=True
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )

    # Relationships
    business_unit_ref: Mapped["BusinessUnit"] = relationship(
        "BusinessUnit",
        back_populates="employees"
    )

    supervisor_ref: Mapped[Optional["Employee"]] = relationship(
        "Employee",
        remote_side=[id],
        back_populates="direct_reports"
    )

    direct_reports: Mapped[List["Employee"]] = relationship(
        "Employee",
        back_populates="supervisor_ref"
    )

    timesheet_entries: Mapped[List["TimesheetEntry"]] = relationship(
        "TimesheetEntry",
        back_populates="employee",
        foreign_keys="TimesheetEntry.employee_id"
    )

    def __repr__(self) -> str:
        status = "" if self.active else " [INACTIVE]"
        return f"<Employee {self.id} {self.name}{status}>"


# Standard role list; anything else is accepted with a warning
STANDARD_ROLES = [
    "Field Technician", "Senior Technician", "Lead Technician",
    "Electrician", "Senior Electrician", "Master Electrician",
    "Controls Engineer", "Senior Engineer", "Principal Engineer",
    "Project Manager", "Senior Project Manager",
    "Field Supervisor", "Operations Manager", "Division Manager",
]

STANDARD_PAY_GRADES = [
    "T1", "T2", "T3", "T4",
    "E1", "E2", "E3", "E4",
    "S1", "S2",
    "M1", "M2", "M3",
]


# Default employees to seed on initial setup.
# Supervisors are seeded before their reports (see ReferenceData.seed_rows).
DEFAULT_EMPLOYEES = [
    {
        "id": "EMP001", "name": "John Smith", "role": "Field Technician",
        "businessUnit": "220000", "costCenter": "CC001", "payGrade": "T3",
        "hireDate": "2023-01-15", "supervisor": "EMP010", "active": True,
    },
    {
        "id": "EMP002", "name": "Sarah Johnson", "role": "Project Manager",
        "businessUnit": "220000", "costCenter": "CC002", "payGrade": "M2",
        "hireDate": "2022-03-22", "supervisor": "EMP010", "active": True,
    },
    {
        "id": "EMP003", "name": "Mike Rodriguez", "role": "Senior Electrician",
        "businessUnit": "220001", "costCenter": "CC001", "payGrade": "T4",
        "hireDate": "2021-08-10", "supervisor": "EMP005", "active": True,
    },
    {
        "id": "EMP004", "name": "Lisa Chen", "role": "Controls Engineer",
        "businessUnit": "220000", "costCenter": "CC003", "payGrade": "E3",
        "hireDate": "2022-06-05", "supervisor": "EMP002", "active": True,
    },
    {
        "id": "EMP005", "name": "David Wilson", "role": "Field Supervisor",
        "businessUnit": "220002", "costCenter": "CC001", "payGrade": "S2",
        "hireDate": "2020-12-18", "supervisor": "EMP010", "active": True,
    },
    {
        "id": "EMP010", "name": "Robert Martinez", "role": "Operations Manager",
        "businessUnit": "220000", "costCenter": "CC010", "payGrade": "M3",
        "hireDate": "2019-04-12", "supervisor": None, "active": True,
    },
]
