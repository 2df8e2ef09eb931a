"""Pytest fixtures for WorkTrack tests."""

from datetime import date
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio

from worktrack.config import Settings
from worktrack.database import create_engine
from worktrack.reference import ReferenceData
from worktrack.services import (
    PersistenceService,
    ValidationEngine,
    build_default_registry,
)


# Validation "today" for every test; entries default to the Monday before
FIXED_TODAY = date(2024, 1, 20)
ENTRY_DATE = "2024-01-15"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'worktrack.db'}",
        seed_on_initialize=True,
    )


@pytest.fixture
def reference() -> ReferenceData:
    return ReferenceData.default()


@pytest_asyncio.fixture
async def engine(settings):
    """Bare engine, no schema."""
    engine = create_engine(settings=settings)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(settings, reference) -> AsyncGenerator[PersistenceService, None]:
    """Initialized store seeded with the default reference data."""
    service = PersistenceService(settings=settings, reference=reference)
    await service.initialize()
    yield service
    await service.close()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def validator(registry, reference, settings, today) -> ValidationEngine:
    return ValidationEngine(registry, reference, today=lambda: today, settings=settings)


def build_entry(**overrides: Any) -> dict[str, Any]:
    """A valid timesheet entry record against the default reference data."""
    entry = {
        "employeeId": "EMP001",
        "date": ENTRY_DATE,
        "businessUnit": "220000",
        "projectId": "22009017",
        "jobId": "J001",
        "workOrderId": "WO001",
        "hoursWorked": 8,
        "workType": "REGULAR",
        "costCode": "ELEC-WIRE",
        "description": "Panel wiring, bay 3",
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def make_entry():
    """Factory for valid timesheet entry records: make_entry(hoursWorked=10)."""
    return build_entry
