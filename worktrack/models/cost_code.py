# WorkTrack - Cost Code Model

from decimal import Decimal

from sqlalchemy import String, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TrackedMixin


class CostCode(TrackedMixin, Base):
    """
    Billing category attached to work.

    Categories:
        - 'Labor': field labor (wiring, installation, inspection)
        - 'Technical': engineering and programming work
        - 'Overhead': travel, material handling, admin
        - 'Development': training

    The billable flag decides a timesheet entry's billable_hours when the
    entry is written; changing a code's flag later does not rewrite
    existing entries.
    """

    __tablename__ = "cost_codes"

    # Short code for data entry (e.g., "ELEC-WIRE")
    code: Mapped[str] = mapped_column(
        String(20),
        primary_key=True
    )

    description: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    category: Mapped[str] = mapped_column(
        String(30),
        nullable=False
    )

    # Hourly rate; precision 8,2 allows up to 999,999.99
    rate: Mapped[Decimal] = mapped_column(
        Numeric(8, 2),
        default=Decimal("0.00"),
        nullable=False
    )

    billable: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )

    def __repr__(self) -> str:
        flag = "billable" if self.billable else "non-billable"
        return f"<CostCode {self.code} ({self.category}, {flag})>"


# Default cost codes to seed on initial setup
DEFAULT_COST_CODES = [
    {"code": "ELEC-WIRE", "description": "Electrical Wiring", "category": "Labor", "rate": "75.00", "billable": True},
    {"code": "PROG-PLC", "description": "PLC Programming", "category": "Technical", "rate": "95.00", "billable": True},
    {"code": "NET-CONFIG", "description": "Network Configuration", "category": "Technical", "rate": "85.00", "billable": True},
    {"code": "SYS-TEST", "description": "System Testing", "category": "Technical", "rate": "80.00", "billable": True},
    {"code": "HVAC-INST", "description": "HVAC Installation", "category": "Labor", "rate": "68.00", "billable": True},
    {"code": "COMM-SYS", "description": "System Commissioning", "category": "Technical", "rate": "90.00", "billable": True},
    {"code": "MAINT-INSP", "description": "Maintenance Inspection", "category": "Labor", "rate": "65.00", "billable": True},
    {"code": "MAINT-REPL", "description": "Component Replacement", "category": "Labor", "rate": "70.00", "billable": True},
    {"code": "TRAVEL", "description": "Travel Time", "category": "Overhead", "rate": "50.00", "billable": True},
    {"code": "MATERIAL", "description": "Material Handling", "category": "Overhead", "rate": "45.00", "billable": False},
    {"code": "TRAINING", "description": "Training Activities", "category": "Development", "rate": "60.00", "billable": False},
    {"code": "ADMIN", "description": "Administrative Tasks", "category": "Overhead", "rate": "40.00", "billable": False},
]
