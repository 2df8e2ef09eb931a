# WorkTrack - Audit Logger
# Append-only change log for every mutation made through the persistence layer

import json
import logging
from datetime import datetime, date, timedelta
from decimal import Decimal
from typing import Optional, Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from worktrack.models.audit_log import AuditLog, AUDIT_ACTIONS
from worktrack.models.base import utcnow


logger = logging.getLogger(__name__)


def serialize_value(value: Any) -> Any:
    """
    Convert a value to a JSON-serializable format.

    Handles dates, decimals, and other special types.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float, str, bool)):
        return value
    # Anything else, just store the repr
    return str(value)


def capture_state(row: Optional[Mapping[str, Any]]) -> Optional[dict[str, Any]]:
    """
    Capture a row as a JSON-ready snapshot.

    Args:
        row: Column name -> value mapping, or None

    Returns:
        Dict of {column_name: serialized value}, or None for no row
    """
    if row is None:
        return None
    return {key: serialize_value(value) for key, value in row.items()}


def diff_states(
    old_state: Optional[dict[str, Any]],
    new_state: Optional[dict[str, Any]],
) -> list[str]:
    """
    Compare two states and return a sorted list of changed field names.
    """
    old_state = old_state or {}
    new_state = new_state or {}
    changed = []
    for key in set(old_state) | set(new_state):
        if old_state.get(key) != new_state.get(key):
            changed.append(key)
    return sorted(changed)


class AuditLogger:
    """
    Writes audit records in their own transaction.

    Usage:
        audit = AuditLogger(session_factory)

        await audit.append("timesheet_entries", 42, "UPDATE",
                           old_snapshot, new_snapshot, actor="EMP010")

    append() is called after the mutation it describes has committed. A
    failure here is logged and swallowed: losing an audit row must never
    undo or block the business change.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def append(
        self,
        table_name: str,
        record_id: Any,
        action: str,
        old_snapshot: Optional[dict[str, Any]] = None,
        new_snapshot: Optional[dict[str, Any]] = None,
        actor: Optional[str] = None,
    ) -> Optional[int]:
        """
        Record one change.

        Args:
            table_name: Name of the affected table
            record_id: Primary key of the affected record
            action: INSERT, UPDATE or DELETE
            old_snapshot: Row before the change (UPDATE/DELETE)
            new_snapshot: Row after the change (INSERT/UPDATE)
            actor: Who made the change, if known

        Returns:
            The audit row id, or None if the write failed
        """
        try:
            if action not in AUDIT_ACTIONS:
                raise ValueError(f"Unknown audit action: {action}")

            changed_fields = None
            if action == "UPDATE":
                changed_fields = diff_states(old_snapshot, new_snapshot)

            entry = AuditLog(
                table_name=table_name,
                record_id=str(record_id),
                action=action,
                old_values=json.dumps(old_snapshot, default=serialize_value) if old_snapshot is not None else None,
                new_values=json.dumps(new_snapshot, default=serialize_value) if new_snapshot is not None else None,
                changed_fields=",".join(changed_fields) if changed_fields else None,
                performed_by=actor,
                performed_at=utcnow(),
            )

            async with self.session_factory() as session:
                async with session.begin():
                    session.add(entry)
                    await session.flush()
                    audit_id = entry.id

            return audit_id
        except (SQLAlchemyError, ValueError, TypeError) as e:
            logger.warning(
                "Audit log write failed for %s %s:%s: %s",
                action, table_name, record_id, e,
            )
            return None


class AuditQuery:
    """
    Helper class for querying audit logs.

    Usage:
        query = AuditQuery(session_factory)

        # Get history for a specific record
        history = await query.get_record_history("timesheet_entries", 42)

        # Get all changes by an actor
        changes = await query.get_changes_by_actor("EMP010", limit=100)

        # Get recent changes across all tables
        recent = await query.get_recent_changes(hours=24)

    Like every read path, failures are logged and return an empty list.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _fetch(self, query, description: str) -> list[AuditLog]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Audit query failed (%s): %s", description, e)
            return []

    async def get_record_history(
        self,
        table_name: str,
        record_id: Any,
    ) -> list[AuditLog]:
        """
        Get the full audit history for a specific record.

        Returns entries in chronological order (oldest first).
        """
        query = (
            select(AuditLog)
            .where(
                AuditLog.table_name == table_name,
                AuditLog.record_id == str(record_id),
            )
            .order_by(AuditLog.performed_at.asc(), AuditLog.id.asc())
        )
        return await self._fetch(query, f"history {table_name}:{record_id}")

    async def get_changes_by_actor(
        self,
        actor: str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLog]:
        """
        Get all changes made by a specific actor.

        Returns entries in reverse chronological order (newest first).
        """
        query = (
            select(AuditLog)
            .where(AuditLog.performed_by == actor)
            .order_by(AuditLog.performed_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(query, f"actor {actor}")

    async def get_recent_changes(
        self,
        hours: int = 24,
        table_name: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditLog]:
        """
        Get recent changes across all tables.

        Args:
            hours: How far back to look
            table_name: Filter to specific table (optional)
            action: Filter to specific action type (optional)
            limit: Maximum records to return

        Returns entries in reverse chronological order.
        """
        cutoff = utcnow() - timedelta(hours=hours)

        query = select(AuditLog).where(AuditLog.performed_at >= cutoff)

        if table_name:
            query = query.where(AuditLog.table_name == table_name)

        if action:
            query = query.where(AuditLog.action == action)

        query = query.order_by(AuditLog.performed_at.desc(), AuditLog.id.desc()).limit(limit)
        return await self._fetch(query, "recent changes")
