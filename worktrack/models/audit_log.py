# WorkTrack - Audit Log Model

from datetime import datetime
from typing import Optional, Any
import json

from sqlalchemy import String, Integer, DateTime, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


AUDIT_ACTIONS = ("INSERT", "UPDATE", "DELETE")


class AuditLog(Base):
    """
    Append-only audit log of every change made through the persistence layer.

    Every INSERT, UPDATE, and DELETE on an audited table creates exactly one
    record here. This provides:
        - Compliance trail for payroll and project-cost reporting
        - Ability to investigate discrepancies
        - Full reconstruction of a record's history

    old_values and new_values hold JSON snapshots of the row as written by
    AuditLogger; old_snapshot and new_snapshot decode them.

    Actions:
        - INSERT: new_values contains the created row
        - UPDATE: old_values and new_values show before/after
        - DELETE: old_values contains the deleted row, new_values is NULL
    """

    __tablename__ = "audit_log"

    __table_args__ = (
        CheckConstraint("action IN ('INSERT', 'UPDATE', 'DELETE')", name="ck_audit_log_action"),
        Index("ix_audit_log_table_record", "table_name", "record_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Which table was affected
    table_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    # Primary key of the affected record, as text (keys are codes or integers)
    record_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False
    )

    # What happened: INSERT, UPDATE, DELETE
    action: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True
    )

    # Which fields were changed (for UPDATE), comma-separated
    changed_fields: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    # JSON blob of previous state (for UPDATE and DELETE)
    old_values: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    # JSON blob of new state (for INSERT and UPDATE)
    new_values: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    # Who made the change; opaque actor id, may be absent
    performed_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True
    )

    # When did it happen (UTC)
    performed_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.table_name}:{self.record_id} by {self.performed_by}>"

    @property
    def old_snapshot(self) -> Optional[dict[str, Any]]:
        """Row as it was before the change; None for INSERT."""
        return json.loads(self.old_values) if self.old_values else None

    @property
    def new_snapshot(self) -> Optional[dict[str, Any]]:
        """Row as it was after the change; None for DELETE."""
        return json.loads(self.new_values) if self.new_values else None

    @property
    def changed_columns(self) -> list[str]:
        return [name for name in (self.changed_fields or "").split(",") if name]
