# WorkTrack - Project Hierarchy Models
# Business Unit -> Project -> Job -> Work Order

from datetime import date
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Integer, Date, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TrackedMixin

if TYPE_CHECKING:
    from .business_unit import BusinessUnit


CONTRACT_TYPES = ("Time & Materials", "Fixed Bid", "Unit Price")
PROJECT_STATUSES = ("Active", "On Hold", "Completed", "Cancelled")
WORK_ORDER_PRIORITIES = ("Low", "Medium", "High", "Critical")
WORK_ORDER_STATUSES = ("Open", "In Progress", "Completed", "Cancelled")


def _in_list(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Project(TrackedMixin, Base):
    """
    Customer project owned by a business unit.

    Only projects with status 'Active' accept new time. The start and end
    dates bound which entry dates are allowed: before the start is an
    error, after the end only a warning.
    """

    __tablename__ = "projects"

    __table_args__ = (
        CheckConstraint(_in_list("contract_type", CONTRACT_TYPES), name="ck_projects_contract_type"),
        CheckConstraint(_in_list("status", PROJECT_STATUSES), name="ck_projects_status"),
    )

    id: Mapped[str] = mapped_column(
        String(20),
        primary_key=True
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False
    )

    business_unit: Mapped[str] = mapped_column(
        String(6),
        ForeignKey("business_units.code"),
        nullable=False,
        index=True
    )

    customer: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    contract_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default="Active",
        nullable=False
    )

    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    project_manager: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("employees.id"),
        nullable=True
    )

    estimated_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    actual_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    business_unit_ref: Mapped["BusinessUnit"] = relationship(
        "BusinessUnit",
        back_populates="projects"
    )

    jobs: Mapped[List["Job"]] = relationship(
        "Job",
        back_populates="project",
        order_by="Job.id",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Project {self.id} {self.name} ({self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status == "Active"


class Job(TrackedMixin, Base):
    """Breakdown of a project into a unit of work."""

    __tablename__ = "jobs"

    __table_args__ = (
        CheckConstraint(_in_list("status", PROJECT_STATUSES), name="ck_jobs_status"),
    )

    id: Mapped[str] = mapped_column(String(20), primary_key=True)

    project_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    estimated_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    actual_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="Active", nullable=False)

    project: Mapped["Project"] = relationship("Project", back_populates="jobs")

    work_orders: Mapped[List["WorkOrder"]] = relationship(
        "WorkOrder",
        back_populates="job",
        order_by="WorkOrder.id",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Job {self.id} {self.name}>"


class WorkOrder(TrackedMixin, Base):
    """Individual task under a job, tagged with the cost code it bills to."""

    __tablename__ = "work_orders"

    __table_args__ = (
        CheckConstraint(_in_list("priority", WORK_ORDER_PRIORITIES), name="ck_work_orders_priority"),
        CheckConstraint(_in_list("status", WORK_ORDER_STATUSES), name="ck_work_orders_status"),
    )

    id: Mapped[str] = mapped_column(String(20), primary_key=True)

    job_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # Plain string rather than a foreign key: work orders may be planned
    # against codes accounting has not published yet
    cost_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    estimated_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    actual_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default="Medium", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="Open", nullable=False)

    job: Mapped["Job"] = relationship("Job", back_populates="work_orders")

    def __repr__(self) -> str:
        return f"<WorkOrder {self.id} {self.description} ({self.priority})>"


# Default project trees to seed on initial setup.
# Jobs and work orders are nested; seeding flattens them and fills in
# project_id / job_id.
DEFAULT_PROJECTS = [
    {
        "id": "22009017",
        "name": "Industrial Controls Upgrade - Phase 1",
        "businessUnit": "220000",
        "customer": "HW001",
        "contractType": "Time & Materials",
        "status": "Active",
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
        "projectManager": "EMP002",
        "estimatedHours": 2400,
        "jobs": [
            {
                "id": "J001",
                "name": "Control Panel Installation",
                "description": "Install and configure main control panels",
                "estimatedHours": 800,
                "workOrders": [
                    {"id": "WO001", "description": "Panel Wiring", "costCode": "ELEC-WIRE",
                     "estimatedHours": 400, "priority": "High"},
                    {"id": "WO002", "description": "PLC Programming", "costCode": "PROG-PLC",
                     "estimatedHours": 400, "priority": "High"},
                ],
            },
            {
                "id": "J002",
                "name": "System Integration",
                "description": "Integrate new controls with existing systems",
                "estimatedHours": 600,
                "workOrders": [
                    {"id": "WO003", "description": "Network Configuration", "costCode": "NET-CONFIG",
                     "estimatedHours": 200, "priority": "Medium"},
                    {"id": "WO004", "description": "System Testing", "costCode": "SYS-TEST",
                     "estimatedHours": 400, "priority": "High"},
                ],
            },
        ],
    },
    {
        "id": "22009018",
        "name": "Commercial Building Automation",
        "businessUnit": "220002",
        "customer": "HW003",
        "contractType": "Fixed Bid",
        "status": "Active",
        "startDate": "2024-02-01",
        "endDate": "2024-08-30",
        "projectManager": "EMP005",
        "estimatedHours": 1600,
        "jobs": [
            {
                "id": "J003",
                "name": "HVAC Controls Installation",
                "description": "Install building automation for HVAC systems",
                "estimatedHours": 1000,
                "workOrders": [
                    {"id": "WO005", "description": "Thermostat Installation", "costCode": "HVAC-INST",
                     "estimatedHours": 400, "priority": "High"},
                    {"id": "WO006", "description": "System Commissioning", "costCode": "COMM-SYS",
                     "estimatedHours": 600, "priority": "High"},
                ],
            },
        ],
    },
    {
        "id": "22009019",
        "name": "Infrastructure Maintenance Contract",
        "businessUnit": "220004",
        "customer": "HW005",
        "contractType": "Unit Price",
        "status": "Active",
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
        "projectManager": "EMP010",
        "estimatedHours": 3200,
        "jobs": [
            {
                "id": "J004",
                "name": "Preventive Maintenance",
                "description": "Scheduled maintenance activities",
                "estimatedHours": 2000,
                "workOrders": [
                    {"id": "WO007", "description": "Equipment Inspection", "costCode": "MAINT-INSP",
                     "estimatedHours": 800, "priority": "Medium"},
                    {"id": "WO008", "description": "Component Replacement", "costCode": "MAINT-REPL",
                     "estimatedHours": 1200, "priority": "Medium"},
                ],
            },
        ],
    },
]
