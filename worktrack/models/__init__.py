# WorkTrack - SQLAlchemy Models

from .base import Base, TimestampMixin, TrackedMixin, utcnow
from .business_unit import BusinessUnit
from .employee import Employee
from .project import Project, Job, WorkOrder
from .cost_code import CostCode
from .work_type import WorkType
from .timesheet_entry import TimesheetEntry
from .audit_log import AuditLog
from .system_setting import SystemSetting

__all__ = [
    "Base",
    "TimestampMixin",
    "TrackedMixin",
    "utcnow",
    "BusinessUnit",
    "Employee",
    "Project",
    "Job",
    "WorkOrder",
    "CostCode",
    "WorkType",
    "TimesheetEntry",
    "AuditLog",
    "SystemSetting",
]
