#!/usr/bin/env python
"""
WorkTrack - Database Management CLI

Usage:
    python -m scripts.db_manage check                      # Test database connection
    python -m scripts.db_manage init                       # Create schema and seed reference data
    python -m scripts.db_manage version                    # Show stored schema version
    python -m scripts.db_manage entries EMP001             # List an employee's timesheet entries
    python -m scripts.db_manage totals EMP001 2024-01-15   # Daily totals with premium split
    python -m scripts.db_manage history timesheet_entries 1  # Audit history of a record
    python -m scripts.db_manage reset                      # Drop all and recreate (dev only)
"""

import asyncio
import logging
import sys

from worktrack.config import get_settings
from worktrack.database import check_connection, create_engine
from worktrack.models import Base
from worktrack.services import (
    SCHEMA_VERSION,
    InitializationError,
    PersistenceService,
    SchemaManager,
)


settings = get_settings()


async def cmd_check(args):
    """Test database connection."""
    print(f"Connecting to: {settings.database_url}")
    engine = create_engine(settings=settings)
    try:
        await check_connection(engine)
        print("Connection successful!")
        return True
    except Exception as e:
        print(f"Connection failed: {e}")
        return False
    finally:
        await engine.dispose()


async def cmd_init(args):
    """Create the schema and seed the default reference data."""
    store = PersistenceService(settings=settings, seed=True)
    try:
        await store.initialize()
    except InitializationError as e:
        print(f"Initialization failed: {e}")
        return False

    report = store.seed_report
    print(f"Schema version {SCHEMA_VERSION} ready")
    if report is not None:
        print(f"Reference data: {report.inserted} inserted, {report.skipped} already present, {report.failed} failed")
        for error in report.errors:
            print(f"  {error}")
    await store.close()
    return report is None or report.failed == 0


async def cmd_version(args):
    """Show the stored schema version and pending upgrade steps."""
    engine = create_engine(settings=settings)
    try:
        schema = SchemaManager(engine)
        stored = await schema.stored_version()
        print(f"Code schema version:   {SCHEMA_VERSION}")
        print(f"Stored schema version: {stored or '(none - run init)'}")
        for migration in await schema.pending_migrations():
            print(f"  pending {migration.version}: {migration.description}")
    finally:
        await engine.dispose()
    return True


async def cmd_entries(args):
    """List timesheet entries for an employee."""
    if not args:
        print("Usage: entries <employee_id> [limit]")
        return False

    limit = int(args[1]) if len(args) > 1 else 50

    async with PersistenceService(settings=settings, seed=False) as store:
        rows = await store.get_timesheet_entries({"employeeId": args[0].upper()}, limit=limit)

    if not rows:
        print("No entries found")
        return True

    for row in rows:
        flags = " [APPROVED]" if row["approved"] else (" [REJECTED]" if row["rejected"] else "")
        print(
            f"{row['id']:>6}  {row['date']}  {row['project_id']:<10} {row['work_type'] or '':<10} "
            f"{row['hours_worked']:>6}h  billable {row['billable_hours']:>6}h  "
            f"{row['project_name'] or ''}{flags}"
        )
    print(f"{len(rows)} entries")
    return True


async def cmd_totals(args):
    """Show the daily totals for an employee on a date."""
    if len(args) < 2:
        print("Usage: totals <employee_id> <YYYY-MM-DD>")
        return False

    async with PersistenceService(settings=settings, seed=False) as store:
        totals = await store.calculate_daily_totals(args[0].upper(), args[1])

    print(f"Employee:   {totals.employee_id}")
    print(f"Date:       {totals.date}")
    print(f"Entries:    {totals.entry_count}")
    print(f"Total:      {totals.total_hours}")
    print(f"Regular:    {totals.regular_hours}")
    print(f"Overtime:   {totals.overtime_hours}")
    print(f"Doubletime: {totals.doubletime_hours}")
    print(f"Billable:   {totals.total_billable}")
    print(f"Breaks:     {totals.total_breaks}")
    return True


async def cmd_history(args):
    """Show the audit history of one record."""
    if len(args) < 2:
        print("Usage: history <table> <record_id>")
        return False

    async with PersistenceService(settings=settings, seed=False) as store:
        history = await store.audit_query.get_record_history(args[0], args[1])

    if not history:
        print("No audit records found")
        return True

    for entry in history:
        changes = ", ".join(entry.changed_columns)
        print(f"{entry.performed_at:%Y-%m-%d %H:%M:%S}  {entry.action:<6}  {entry.performed_by or '-':<10} {changes}")
    return True


async def cmd_reset(args):
    """Drop all tables and recreate them."""
    if not settings.debug:
        print("ERROR: reset is only available in debug mode")
        return False

    confirm = input("This will DELETE ALL DATA. Type 'yes' to confirm: ")
    if confirm.lower() != "yes":
        print("Aborted")
        return False

    engine = create_engine(settings=settings)
    try:
        print("Dropping all tables...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    finally:
        await engine.dispose()

    print("Recreating schema...")
    success = await cmd_init(args)
    if success:
        print("Reset complete!")
    return success


async def cmd_help(args):
    """Show help."""
    print(__doc__)
    return True


COMMANDS = {
    "check": cmd_check,
    "init": cmd_init,
    "version": cmd_version,
    "entries": cmd_entries,
    "totals": cmd_totals,
    "history": cmd_history,
    "reset": cmd_reset,
    "help": cmd_help,
}


def main():
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if len(sys.argv) < 2:
        asyncio.run(cmd_help([]))
        sys.exit(1)

    command = sys.argv[1].lower()

    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        asyncio.run(cmd_help([]))
        sys.exit(1)

    success = asyncio.run(COMMANDS[command](sys.argv[2:]))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
