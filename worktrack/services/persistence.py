# WorkTrack - Persistence Service
# Generic CRUD with audit logging, timesheet listing and daily totals

import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker

from worktrack.config import Settings, get_settings
from worktrack.database import create_engine, create_session_factory
from worktrack.models import (
    BusinessUnit,
    CostCode,
    Employee,
    Job,
    Project,
    TimesheetEntry,
    WorkOrder,
    WorkType,
)
from worktrack.models.base import utcnow
from worktrack.models.timesheet_entry import compute_derived_amounts
from worktrack.reference import ReferenceData
from worktrack.services.audit import AuditLogger, AuditQuery, capture_state
from worktrack.services.errors import (
    ConstraintError,
    ExecutionError,
    InitializationError,
    WorkTrackError,
)
from worktrack.services.records import (
    coerce_record,
    coerce_value,
    primary_key_column,
    resolve_table,
)
from worktrack.services.schema import SchemaManager, SeedReport
from worktrack.utils import to_snake_case


logger = logging.getLogger(__name__)


Row = dict[str, Any]

ZERO = Decimal("0.00")


@dataclass
class ExecutionResult:
    """Outcome of a raw statement."""

    rows: list[Row] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[int] = None


@dataclass
class EntryFilters:
    """
    Filters for the timesheet listing. Unset fields do not filter.

    date_from and date_to are inclusive.
    """

    employee_id: Optional[str] = None
    on_date: Optional[date] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    business_unit: Optional[str] = None
    project_id: Optional[str] = None
    approved: Optional[bool] = None

    @classmethod
    def from_mapping(cls, filters: Mapping[str, Any]) -> "EntryFilters":
        """
        Build from a mapping such as {"employeeId": "EMP001", "dateFrom": "2024-01-01"}.

        "date" maps to on_date. Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in filters.items():
            name = to_snake_case(key)
            if name == "date":
                name = "on_date"
            if name not in known:
                continue
            if name in ("on_date", "date_from", "date_to") and isinstance(value, str):
                value = date.fromisoformat(value)
            elif name == "approved":
                value = coerce_value(TimesheetEntry.__table__.c.approved, value)
            values[name] = value
        return cls(**values)


@dataclass
class DailyTotals:
    """Hours for one employee on one day, split into premium tiers."""

    employee_id: str
    date: date
    total_hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    doubletime_hours: Decimal = ZERO
    total_billable: Decimal = ZERO
    total_breaks: Decimal = ZERO
    entry_count: int = 0

    @classmethod
    def empty(cls, employee_id: str, on_date: date) -> "DailyTotals":
        return cls(employee_id=employee_id, date=on_date)


@dataclass
class HealthStatus:
    healthy: bool
    timestamp: datetime
    error: Optional[str] = None


def split_premium_hours(
    total: Decimal,
    regular_limit: Decimal,
    overtime_limit: Decimal,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Split a day's total into (regular, overtime, doubletime).

    The split depends only on the total, never on the work types the
    entries were tagged with:
        regular    = min(total, regular_limit)
        overtime   = clamp(total - regular_limit, 0, overtime_limit - regular_limit)
        doubletime = max(0, total - overtime_limit)
    """
    regular = min(total, regular_limit)
    overtime = min(max(total - regular_limit, Decimal("0")), overtime_limit - regular_limit)
    doubletime = max(Decimal("0"), total - overtime_limit)
    return regular, overtime, doubletime


class PersistenceService:
    """
    Single entry point to the timesheet store.

    Write paths (insert, update, delete, execute) log and raise. Every
    successful mutation is followed by exactly one audit record, written
    in its own transaction after the change commits.

    Read paths (get_by_id, get_all, get_timesheet_entries,
    calculate_daily_totals) never raise: failures are logged and an
    empty result comes back.

    Usage:
        async with PersistenceService("sqlite+aiosqlite:///worktrack.db") as store:
            entry_id = await store.insert("timesheet_entries", sanitized, actor="EMP010")
            await store.update("timesheet_entries", entry_id, {"approved": True}, actor="EMP010")
            rows = await store.get_timesheet_entries({"employeeId": "EMP001"})
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        reference: Optional[ReferenceData] = None,
        seed: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.database_url = database_url or self.settings.database_url
        self.reference = reference if reference is not None else ReferenceData.default()
        self.seed = self.settings.seed_on_initialize if seed is None else seed

        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self.audit: Optional[AuditLogger] = None
        self.schema: Optional[SchemaManager] = None
        self.seed_report: Optional[SeedReport] = None
        self._ready = False

    # Lifecycle

    @property
    def is_initialized(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        """
        Connect, create the schema and seed reference data.

        Safe to call again once initialized.

        Raises:
            InitializationError: If any step fails
        """
        if self._ready:
            return

        try:
            self.engine = create_engine(self.database_url, self.settings)
            self.session_factory = create_session_factory(self.engine)
            self.audit = AuditLogger(self.session_factory)
            self.schema = SchemaManager(self.engine)

            await self.schema.create_schema()
            if self.seed:
                self.seed_report = await self.schema.seed(self.reference)
        except (WorkTrackError, SQLAlchemyError, OSError) as e:
            logger.error("Database initialization failed: %s", e)
            await self.close()
            raise InitializationError(f"Database initialization failed: {e}") from e

        self._ready = True
        logger.info("Database initialized at %s", self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        """Dispose of the engine. The service can be initialized again."""
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self.audit = None
        self.schema = None
        self._ready = False

    async def __aenter__(self) -> "PersistenceService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def audit_query(self) -> AuditQuery:
        """Read helpers over the audit log."""
        self._require_ready("AUDIT QUERY")
        return AuditQuery(self.session_factory)

    def _require_ready(self, statement: Optional[str] = None) -> None:
        if not self._ready:
            raise InitializationError("Database not initialized", statement)

    # Raw statements

    async def execute(
        self,
        statement: str,
        params: Optional[Union[Mapping[str, Any], list[Mapping[str, Any]]]] = None,
    ) -> ExecutionResult:
        """
        Run a parametrized SQL statement in its own transaction.

        Named parameters use the :name form. Schema statements (CREATE ...)
        may run before initialize() finishes, once an engine exists.

        Raises:
            InitializationError: If the store is not initialized
            ConstraintError: If a constraint rejects the statement
            ExecutionError: If the statement fails
        """
        if not self._ready and not (self.engine is not None and "CREATE" in statement.upper()):
            raise InitializationError("Database not initialized", statement, params)

        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(text(statement), params or {})
                rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
                return ExecutionResult(
                    rows=rows,
                    rowcount=result.rowcount,
                    lastrowid=getattr(result, "lastrowid", None),
                )
        except IntegrityError as e:
            logger.error("Statement violated a constraint: %s", e.orig)
            raise ConstraintError(f"Constraint violation: {e.orig}", statement, params) from e
        except SQLAlchemyError as e:
            logger.error("Statement failed: %s", e)
            raise ExecutionError(f"Statement failed: {e}", statement, params) from e

    # Helpers

    @staticmethod
    async def _fetch_row(conn: AsyncConnection, table, record_id: Any) -> Optional[Row]:
        pk = primary_key_column(table)
        result = await conn.execute(select(table).where(pk == record_id))
        row = result.mappings().first()
        return dict(row) if row is not None else None

    @staticmethod
    async def _derive_amounts(conn: AsyncConnection, entry: Mapping[str, Any]) -> dict[str, Decimal]:
        """Derived columns for a timesheet entry from its cost code and work type."""
        billable = rate = multiplier = None

        if entry.get("cost_code"):
            result = await conn.execute(
                select(CostCode.billable, CostCode.rate).where(CostCode.code == entry["cost_code"])
            )
            cost_code = result.first()
            if cost_code is not None:
                billable, rate = cost_code.billable, cost_code.rate

        if entry.get("work_type"):
            result = await conn.execute(
                select(WorkType.multiplier).where(WorkType.id == entry["work_type"])
            )
            multiplier = result.scalar_one_or_none()

        return compute_derived_amounts(entry.get("hours_worked"), billable, rate, multiplier)

    # Write paths

    async def insert(
        self,
        table_name: str,
        record: Mapping[str, Any],
        actor: Optional[str] = None,
    ) -> Any:
        """
        Insert one row and audit it.

        Record keys may be column names or their camelCase form; keys that
        are not columns of the table are rejected.

        Returns:
            The primary key of the new row

        Raises:
            InitializationError: If the store is not initialized
            ConstraintError: On a uniqueness, foreign key or check violation
            ExecutionError: On any other failure
        """
        self._require_ready(f"INSERT INTO {table_name}")
        table = resolve_table(table_name, writable=True)
        values = coerce_record(table, record)
        pk = primary_key_column(table)

        try:
            async with self.engine.begin() as conn:
                if table_name == "timesheet_entries":
                    values.setdefault("work_type", "REGULAR")
                    values.update(await self._derive_amounts(conn, values))

                result = await conn.execute(table.insert().values(**values))
                record_id = values.get(pk.name)
                if record_id is None:
                    record_id = result.inserted_primary_key[0]

                stored = await self._fetch_row(conn, table, record_id)
        except IntegrityError as e:
            logger.error("Insert into %s violated a constraint: %s", table_name, e.orig)
            raise ConstraintError(
                f"Insert into {table_name} violated a constraint: {e.orig}", f"INSERT INTO {table_name}", values
            ) from e
        except SQLAlchemyError as e:
            logger.error("Insert into %s failed: %s", table_name, e)
            raise ExecutionError(f"Insert into {table_name} failed: {e}", f"INSERT INTO {table_name}", values) from e

        await self.audit.append(table_name, record_id, "INSERT", None, capture_state(stored), actor)
        return record_id

    async def update(
        self,
        table_name: str,
        record_id: Any,
        patch: Mapping[str, Any],
        actor: Optional[str] = None,
    ) -> bool:
        """
        Apply a partial update and audit it.

        Derived timesheet amounts are recomputed from the merged row.
        The primary key cannot be changed.

        Returns:
            True if a row changed, False if no row has that key

        Raises:
            InitializationError: If the store is not initialized
            ConstraintError: On a uniqueness, foreign key or check violation
            ExecutionError: On any other failure
        """
        self._require_ready(f"UPDATE {table_name}")
        table = resolve_table(table_name, writable=True)
        pk = primary_key_column(table)
        record_id = coerce_value(pk, record_id)
        values = coerce_record(table, patch)

        if pk.name in values:
            if values[pk.name] != record_id:
                raise ExecutionError(f"Primary key of {table_name} cannot be changed", f"UPDATE {table_name}", values)
            del values[pk.name]

        if "updated_at" in table.c:
            values["updated_at"] = utcnow()
        if not values:
            return False

        try:
            async with self.engine.begin() as conn:
                before = await self._fetch_row(conn, table, record_id)
                if before is None:
                    return False

                if table_name == "timesheet_entries":
                    values.update(await self._derive_amounts(conn, {**before, **values}))

                result = await conn.execute(table.update().where(pk == record_id).values(**values))
                changed = result.rowcount > 0
                after = await self._fetch_row(conn, table, record_id) if changed else None
        except IntegrityError as e:
            logger.error("Update of %s %s violated a constraint: %s", table_name, record_id, e.orig)
            raise ConstraintError(
                f"Update of {table_name} violated a constraint: {e.orig}", f"UPDATE {table_name}", values
            ) from e
        except SQLAlchemyError as e:
            logger.error("Update of %s %s failed: %s", table_name, record_id, e)
            raise ExecutionError(f"Update of {table_name} failed: {e}", f"UPDATE {table_name}", values) from e

        if changed:
            await self.audit.append(
                table_name, record_id, "UPDATE", capture_state(before), capture_state(after), actor
            )
        return changed

    async def delete(
        self,
        table_name: str,
        record_id: Any,
        actor: Optional[str] = None,
    ) -> bool:
        """
        Delete one row, auditing its last state.

        Returns:
            True if a row was deleted

        Raises:
            InitializationError: If the store is not initialized
            ConstraintError: If other rows still reference this one
            ExecutionError: On any other failure
        """
        self._require_ready(f"DELETE FROM {table_name}")
        table = resolve_table(table_name, writable=True)
        pk = primary_key_column(table)
        record_id = coerce_value(pk, record_id)

        try:
            async with self.engine.begin() as conn:
                before = await self._fetch_row(conn, table, record_id)
                if before is None:
                    return False
                result = await conn.execute(table.delete().where(pk == record_id))
                deleted = result.rowcount > 0
        except IntegrityError as e:
            logger.error("Delete from %s %s violated a constraint: %s", table_name, record_id, e.orig)
            raise ConstraintError(
                f"Delete from {table_name} violated a constraint: {e.orig}", f"DELETE FROM {table_name}", record_id
            ) from e
        except SQLAlchemyError as e:
            logger.error("Delete from %s %s failed: %s", table_name, record_id, e)
            raise ExecutionError(f"Delete from {table_name} failed: {e}", f"DELETE FROM {table_name}", record_id) from e

        if deleted:
            await self.audit.append(table_name, record_id, "DELETE", capture_state(before), None, actor)
        return deleted

    # Read paths

    async def get_by_id(self, table_name: str, record_id: Any) -> Optional[Row]:
        """The row with this primary key, or None."""
        try:
            self._require_ready(f"SELECT {table_name}")
            table = resolve_table(table_name)
            pk = primary_key_column(table)
            async with self.engine.connect() as conn:
                return await self._fetch_row(conn, table, coerce_value(pk, record_id))
        except (WorkTrackError, SQLAlchemyError) as e:
            logger.error("Reading %s %s failed: %s", table_name, record_id, e)
            return None

    async def get_all(
        self,
        table_name: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Row]:
        """
        Rows matching every equality filter.

        Args:
            table_name: Table to read
            filters: Column -> value; camelCase keys are accepted
            order_by: "column" or "column DESC"
            limit: Maximum rows to return
            offset: Rows to skip

        Returns:
            List of rows, empty on any failure
        """
        try:
            self._require_ready(f"SELECT {table_name}")
            table = resolve_table(table_name)
            query = select(table)

            for column_name, value in coerce_record(table, filters or {}).items():
                query = query.where(table.c[column_name] == value)

            if order_by:
                parts = order_by.split()
                column_name = to_snake_case(parts[0])
                direction = parts[1].upper() if len(parts) > 1 else "ASC"
                if column_name not in table.c or direction not in ("ASC", "DESC") or len(parts) > 2:
                    raise ExecutionError(f"Invalid ordering for {table_name}: {order_by}")
                column = table.c[column_name]
                query = query.order_by(column.desc() if direction == "DESC" else column.asc())

            if limit is not None:
                query = query.limit(limit)
            if offset is not None:
                query = query.offset(offset)

            async with self.engine.connect() as conn:
                result = await conn.execute(query)
                return [dict(row) for row in result.mappings().all()]
        except (WorkTrackError, SQLAlchemyError, TypeError) as e:
            logger.error("Reading %s failed: %s", table_name, e)
            return []

    async def get_timesheet_entries(
        self,
        filters: Optional[Union[EntryFilters, Mapping[str, Any]]] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        """
        Timesheet entries joined with their reference data.

        Each row carries the entry's columns plus employee_name,
        employee_role, business_unit_name, project_name, contract_type,
        job_name, work_order_description, cost_code_description,
        cost_code_rate, cost_code_billable, work_type_name and
        work_type_multiplier. Newest date first, then newest created.

        Returns:
            List of rows, empty on any failure
        """
        try:
            self._require_ready("SELECT timesheet_entries")
            if filters is None:
                filters = EntryFilters()
            elif not isinstance(filters, EntryFilters):
                filters = EntryFilters.from_mapping(filters)

            entries = TimesheetEntry.__table__
            query = (
                select(
                    entries,
                    Employee.name.label("employee_name"),
                    Employee.role.label("employee_role"),
                    BusinessUnit.name.label("business_unit_name"),
                    Project.name.label("project_name"),
                    Project.contract_type.label("contract_type"),
                    Job.name.label("job_name"),
                    WorkOrder.description.label("work_order_description"),
                    CostCode.description.label("cost_code_description"),
                    CostCode.rate.label("cost_code_rate"),
                    CostCode.billable.label("cost_code_billable"),
                    WorkType.name.label("work_type_name"),
                    WorkType.multiplier.label("work_type_multiplier"),
                )
                .select_from(entries)
                .outerjoin(Employee, Employee.id == entries.c.employee_id)
                .outerjoin(BusinessUnit, BusinessUnit.code == entries.c.business_unit)
                .outerjoin(Project, Project.id == entries.c.project_id)
                .outerjoin(Job, Job.id == entries.c.job_id)
                .outerjoin(WorkOrder, WorkOrder.id == entries.c.work_order_id)
                .outerjoin(CostCode, CostCode.code == entries.c.cost_code)
                .outerjoin(WorkType, WorkType.id == entries.c.work_type)
            )

            if filters.employee_id:
                query = query.where(entries.c.employee_id == filters.employee_id)
            if filters.on_date:
                query = query.where(entries.c.date == filters.on_date)
            if filters.date_from:
                query = query.where(entries.c.date >= filters.date_from)
            if filters.date_to:
                query = query.where(entries.c.date <= filters.date_to)
            if filters.business_unit:
                query = query.where(entries.c.business_unit == filters.business_unit)
            if filters.project_id:
                query = query.where(entries.c.project_id == filters.project_id)
            if filters.approved is not None:
                query = query.where(entries.c.approved == filters.approved)

            query = query.order_by(entries.c.date.desc(), entries.c.created_at.desc(), entries.c.id.desc())
            if limit:
                query = query.limit(limit)

            async with self.session_factory() as session:
                result = await session.execute(query)
                return [dict(row) for row in result.mappings().all()]
        except (WorkTrackError, SQLAlchemyError, ValueError, TypeError) as e:
            logger.error("Reading timesheet entries failed: %s", e)
            return []

    async def calculate_daily_totals(self, employee_id: str, on_date: Union[date, str]) -> DailyTotals:
        """
        Daily totals for one employee, split into premium tiers.

        Tiers come from the day's total hours alone; see split_premium_hours.
        Thresholds are the regular_hours_limit and overtime_hours_limit settings.

        Returns:
            DailyTotals, all zero on any failure
        """
        try:
            if isinstance(on_date, str):
                on_date = date.fromisoformat(on_date)
        except ValueError as e:
            logger.error("Invalid date for daily totals: %s", e)
            return DailyTotals.empty(employee_id, on_date)

        try:
            self._require_ready("SELECT daily totals")
            query = select(
                func.coalesce(func.sum(TimesheetEntry.hours_worked), 0).label("total_hours"),
                func.coalesce(func.sum(TimesheetEntry.billable_hours), 0).label("total_billable"),
                func.coalesce(func.sum(TimesheetEntry.break_hours), 0).label("total_breaks"),
                func.count(TimesheetEntry.id).label("entry_count"),
            ).where(
                TimesheetEntry.employee_id == employee_id,
                TimesheetEntry.entry_date == on_date,
            )

            async with self.session_factory() as session:
                result = await session.execute(query)
                row = result.one()
        except (WorkTrackError, SQLAlchemyError) as e:
            logger.error("Daily totals for %s on %s failed: %s", employee_id, on_date, e)
            return DailyTotals.empty(employee_id, on_date)

        cents = Decimal("0.01")
        total = Decimal(str(row.total_hours)).quantize(cents)
        regular, overtime, doubletime = split_premium_hours(
            total,
            Decimal(str(self.settings.regular_hours_limit)),
            Decimal(str(self.settings.overtime_hours_limit)),
        )

        return DailyTotals(
            employee_id=employee_id,
            date=on_date,
            total_hours=total,
            regular_hours=regular.quantize(cents),
            overtime_hours=overtime.quantize(cents),
            doubletime_hours=doubletime.quantize(cents),
            total_billable=Decimal(str(row.total_billable)).quantize(cents),
            total_breaks=Decimal(str(row.total_breaks)).quantize(cents),
            entry_count=row.entry_count,
        )

    async def health_check(self) -> HealthStatus:
        """Run a trivial query against the store."""
        if self.engine is None:
            return HealthStatus(healthy=False, timestamp=utcnow(), error="Database not initialized")
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return HealthStatus(healthy=True, timestamp=utcnow())
        except SQLAlchemyError as e:
            logger.error("Health check failed: %s", e)
            return HealthStatus(healthy=False, timestamp=utcnow(), error=str(e))

    async def load_reference_data(self) -> ReferenceData:
        """Build a catalog from the reference tables as currently stored."""
        return ReferenceData(
            business_units=await self.get_all("business_units"),
            employees=await self.get_all("employees"),
            projects=await self.get_all("projects"),
            cost_codes=await self.get_all("cost_codes"),
            work_types=await self.get_all("work_types"),
            jobs=await self.get_all("jobs"),
            work_orders=await self.get_all("work_orders"),
        )
