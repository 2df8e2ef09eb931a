# WorkTrack - Timesheet Entry Model

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    String, Boolean, DateTime, Date, Integer,
    Numeric, ForeignKey, Index, CheckConstraint, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TrackedMixin

if TYPE_CHECKING:
    from .employee import Employee
    from .project import Project, Job, WorkOrder
    from .cost_code import CostCode
    from .work_type import WorkType


class TimesheetEntry(TrackedMixin, Base):
    """
    Hours one employee worked on one day against one hierarchy slot.

    Hierarchy:
        Every entry names a business unit and project; job, work order,
        cost code and work type are optional. At most one entry may exist
        per employee, date, project, job, work order and work type (see
        the uq_timesheet_entries_slot index below).

    Derived columns:
        billable_hours, calculated_rate and total_cost are computed by the
        persistence layer when the entry is written and stored as-is.
        They are never recomputed on read, so a later change to a cost
        code's billable flag or rate does not alter existing entries.

    Approval:
        approved and rejected are independent flags. Nothing prevents both
        being set; callers own that workflow.
    """

    __tablename__ = "timesheet_entries"

    __table_args__ = (
        CheckConstraint("hours_worked >= 0 AND hours_worked <= 24", name="ck_timesheet_entries_hours"),
        CheckConstraint("break_hours >= 0 AND break_hours <= 4", name="ck_timesheet_entries_break"),
        # Composite index for common query pattern: entries for employee on a date
        Index("ix_timesheet_entries_employee_date", "employee_id", "date"),
        Index("ix_timesheet_entries_approval", "approved", "approved_by"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Whose time is this?
    employee_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("employees.id"),
        nullable=False
    )

    # When? Column is named "date"; the attribute avoids shadowing datetime.date
    entry_date: Mapped[date] = mapped_column(
        "date",
        Date,
        nullable=False
    )

    # Where in the hierarchy?
    business_unit: Mapped[str] = mapped_column(
        String(6),
        ForeignKey("business_units.code"),
        nullable=False
    )

    project_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("projects.id"),
        nullable=False,
        index=True
    )

    job_id: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("jobs.id"),
        nullable=True
    )

    work_order_id: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("work_orders.id"),
        nullable=True
    )

    # What kind of time?
    work_type: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("work_types.id"),
        default="REGULAR",
        nullable=True
    )

    cost_code: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("cost_codes.code"),
        nullable=True
    )

    # How many hours? Precision 5,2 allows 0.00 to 999.99
    hours_worked: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False
    )

    break_hours: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0.00"),
        nullable=False
    )

    description: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    # Materialized at write time from the cost code
    billable_hours: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0.00"),
        nullable=False
    )

    calculated_rate: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0.00"),
        nullable=False
    )

    total_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0.00"),
        nullable=False
    )

    # Approval workflow
    approved: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False
    )

    approved_by: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("employees.id"),
        nullable=True
    )

    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True
    )

    rejected: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False
    )

    rejection_reason: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(
        "Employee",
        back_populates="timesheet_entries",
        foreign_keys=[employee_id]
    )

    approver: Mapped[Optional["Employee"]] = relationship(
        "Employee",
        foreign_keys=[approved_by]
    )

    project: Mapped["Project"] = relationship("Project")
    job: Mapped[Optional["Job"]] = relationship("Job")
    work_order: Mapped[Optional["WorkOrder"]] = relationship("WorkOrder")
    cost_code_ref: Mapped[Optional["CostCode"]] = relationship("CostCode")
    work_type_ref: Mapped[Optional["WorkType"]] = relationship("WorkType")

    def __repr__(self) -> str:
        status = ""
        if self.approved:
            status = " [APPROVED]"
        elif self.rejected:
            status = " [REJECTED]"
        return f"<TimesheetEntry {self.employee_id} {self.entry_date} {self.hours_worked}h {self.work_type}{status}>"


# One entry per employee per day per hierarchy slot per work type.
# COALESCE folds the optional columns so that a missing job, work order or
# work type occupies a single slot; a plain UNIQUE treats NULLs as distinct.
Index(
    "uq_timesheet_entries_slot",
    TimesheetEntry.employee_id,
    TimesheetEntry.entry_date,
    TimesheetEntry.project_id,
    func.coalesce(TimesheetEntry.job_id, ""),
    func.coalesce(TimesheetEntry.work_order_id, ""),
    func.coalesce(TimesheetEntry.work_type, ""),
    unique=True,
)


def compute_derived_amounts(
    hours_worked: Decimal,
    cost_code_billable: Optional[bool],
    cost_code_rate: Optional[Decimal],
    work_type_multiplier: Optional[Decimal],
) -> dict[str, Decimal]:
    """
    Compute the write-time derived columns for an entry.

    Args:
        hours_worked: Hours on the entry
        cost_code_billable: Billable flag of the referenced cost code, None if no code
        cost_code_rate: Hourly rate of the referenced cost code, None if no code
        work_type_multiplier: Multiplier of the referenced work type, None if none

    Returns:
        Dict with billable_hours, calculated_rate and total_cost
    """
    hours = Decimal(str(hours_worked or 0))
    billable_hours = hours if cost_code_billable else Decimal("0")

    rate = Decimal(str(cost_code_rate or 0))
    multiplier = Decimal(str(work_type_multiplier)) if work_type_multiplier is not None else Decimal("1")
    calculated_rate = (rate * multiplier).quantize(Decimal("0.01"))
    total_cost = (billable_hours * calculated_rate).quantize(Decimal("0.01"))

    return {
        "billable_hours": billable_hours.quantize(Decimal("0.01")),
        "calculated_rate": calculated_rate,
        "total_cost": total_cost,
    }
