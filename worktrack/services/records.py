# WorkTrack - Record Helpers
# Column whitelisting and value coercion for generic CRUD

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, Table

from worktrack.models import Base
from worktrack.services.errors import ExecutionError
from worktrack.utils import to_snake_case


# Tables reachable through the generic CRUD surface
WRITABLE_TABLES = {
    "business_units",
    "employees",
    "projects",
    "jobs",
    "work_orders",
    "cost_codes",
    "work_types",
    "timesheet_entries",
    "system_settings",
}

# Readable but never written through insert/update/delete
READ_ONLY_TABLES = {"audit_log"}


def resolve_table(name: str, writable: bool = False) -> Table:
    """
    Look up a table declared on the models.

    Raises:
        ExecutionError: If the table is unknown, or read-only when writable is requested
    """
    allowed = WRITABLE_TABLES if writable else WRITABLE_TABLES | READ_ONLY_TABLES
    if name not in allowed:
        if name in READ_ONLY_TABLES:
            raise ExecutionError(f"Table {name} is append-only")
        raise ExecutionError(f"Unknown table: {name}")
    return Base.metadata.tables[name]


def primary_key_column(table: Table):
    """The single primary key column of a table."""
    return list(table.primary_key.columns)[0]


def coerce_value(column, value: Any) -> Any:
    """Convert an incoming value to the Python type the column expects."""
    if value is None:
        return None

    column_type = column.type
    try:
        if isinstance(column_type, DateTime):
            if isinstance(value, str):
                return datetime.fromisoformat(value)
        elif isinstance(column_type, Date):
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, str):
                return date.fromisoformat(value)
        elif isinstance(column_type, Numeric):
            if isinstance(value, bool):
                raise ValueError("boolean is not a number")
            if isinstance(value, (int, float, str)):
                return Decimal(str(value).strip())
        elif isinstance(column_type, Boolean):
            if isinstance(value, (int, str)) and not isinstance(value, bool):
                return str(value).strip().lower() in ("1", "true", "yes", "on")
        elif isinstance(column_type, Integer):
            if isinstance(value, str):
                return int(value.strip())
    except (ValueError, InvalidOperation) as exc:
        raise ExecutionError(
            f"Invalid value for {column.table.name}.{column.name}: {value!r}"
        ) from exc

    return value


def coerce_record(table: Table, record: Mapping[str, Any]) -> dict[str, Any]:
    """
    Whitelist and coerce a record against a table's declared columns.

    Keys may be column names or their camelCase form.

    Raises:
        ExecutionError: If a key does not name a column of the table
    """
    values: dict[str, Any] = {}
    for key, value in record.items():
        name = to_snake_case(key)
        if name not in table.c:
            raise ExecutionError(f"Unknown column for {table.name}: {key}")
        values[name] = coerce_value(table.c[name], value)
    return values
