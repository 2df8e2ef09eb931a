# WorkTrack - Database Setup
# Async SQLAlchemy engine and session factory

from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from worktrack.config import Settings, get_settings


def create_engine(
    database_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> AsyncEngine:
    """
    Create the async engine for the timesheet store.

    Args:
        database_url: SQLAlchemy async URL; falls back to settings
        settings: Settings instance; falls back to get_settings()

    Returns:
        AsyncEngine with SQLite foreign-key enforcement turned on
    """
    settings = settings or get_settings()
    url = database_url or settings.database_url

    kwargs = {
        "echo": settings.db_echo,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }
    if url.startswith("sqlite") and (":memory:" in url or url.endswith("://")):
        # One shared connection, otherwise every checkout gets a fresh empty database
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", set_sqlite_options)

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the given engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,  # Prevent lazy-load issues after commit
    )


def set_sqlite_options(dbapi_connection, connection_record):
    """
    Set connection-level options for SQLite.

    This runs once when a new connection is created. SQLite ships with
    foreign keys disabled; referential checks on timesheet entries depend
    on them.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def check_connection(engine: AsyncEngine) -> bool:
    """
    Test the database connection.

    Returns True if connection succeeds, raises exception otherwise.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True
