# WorkTrack - Schema Manager
# Idempotent schema creation, reference data seeding, version tag

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from worktrack.models import Base
from worktrack.models.system_setting import SCHEMA_VERSION_KEY
from worktrack.reference import ReferenceData
from worktrack.services.errors import ExecutionError
from worktrack.services.records import coerce_record, primary_key_column


logger = logging.getLogger(__name__)


SCHEMA_VERSION = "1.0.0"


@dataclass(frozen=True)
class Migration:
    """One upgrade step, applied when the stored version is older."""

    version: str
    description: str


# Ordered upgrade steps. Empty until the first schema change ships;
# there is no step runner yet.
MIGRATIONS: list[Migration] = []


def parse_version(version: str) -> tuple[int, ...]:
    """Parse "1.2.0" into (1, 2, 0)."""
    return tuple(int(part) for part in version.split("."))


@dataclass
class SeedReport:
    """Outcome of a seeding pass."""

    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.skipped + self.failed


class SchemaManager:
    """
    Creates the schema and seeds reference data.

    Both operations are safe to repeat:
        - create_schema() only creates tables and indexes that are missing
        - seed() inserts a row only when its primary key is not taken,
          never overwriting what is already stored

    Usage:
        schema = SchemaManager(engine)
        await schema.create_schema()
        report = await schema.seed(ReferenceData.default())
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def create_schema(self) -> None:
        """
        Create every table and index that does not exist yet.

        Raises:
            ExecutionError: If the DDL fails
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        except SQLAlchemyError as e:
            logger.error("Schema creation failed: %s", e)
            raise ExecutionError(f"Schema creation failed: {e}", "CREATE SCHEMA") from e

        await self.insert_if_absent(
            "system_settings",
            {
                "key": SCHEMA_VERSION_KEY,
                "value": SCHEMA_VERSION,
                "description": "Version of the schema the tables were created with",
            },
        )
        logger.info("Schema ready (version %s)", SCHEMA_VERSION)

    async def table_names(self) -> set[str]:
        """Names of the tables present in the store."""
        async with self.engine.connect() as conn:
            names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        return set(names)

    async def insert_if_absent(self, table_name: str, row: Mapping[str, Any]) -> bool:
        """
        Insert a row unless its primary key already exists.

        Returns:
            True if inserted, False if a row with that key was already there

        Raises:
            ExecutionError: If the row does not fit the table or the insert fails
        """
        table = Base.metadata.tables[table_name]
        values = coerce_record(table, row)
        pk = primary_key_column(table)

        try:
            async with self.engine.begin() as conn:
                existing = await conn.execute(select(pk).where(pk == values.get(pk.name)))
                if existing.first() is not None:
                    return False
                await conn.execute(table.insert().values(**values))
        except SQLAlchemyError as e:
            raise ExecutionError(f"Insert into {table_name} failed: {e}", table_name, values) from e
        return True

    async def seed(self, reference: ReferenceData) -> SeedReport:
        """
        Seed reference data with insert-or-ignore semantics.

        A row that fails is logged and counted; the remaining rows are
        still seeded.
        """
        report = SeedReport()

        for table_name, row in reference.seed_rows():
            try:
                if await self.insert_if_absent(table_name, row):
                    report.inserted += 1
                else:
                    report.skipped += 1
            except ExecutionError as e:
                report.failed += 1
                report.errors.append(str(e))
                logger.warning("Seeding %s row failed: %s", table_name, e)

        logger.info(
            "Seeded reference data: %d inserted, %d skipped, %d failed",
            report.inserted, report.skipped, report.failed,
        )
        return report

    async def stored_version(self) -> Optional[str]:
        """Schema version recorded in system_settings, or None."""
        table = Base.metadata.tables["system_settings"]
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(
                    select(table.c.value).where(table.c.key == SCHEMA_VERSION_KEY)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Reading schema version failed: %s", e)
            return None

    async def pending_migrations(self) -> list[Migration]:
        """Upgrade steps newer than the stored version, in order."""
        stored = await self.stored_version()
        if stored is None:
            return list(MIGRATIONS)
        current = parse_version(stored)
        return [m for m in MIGRATIONS if parse_version(m.version) > current]
