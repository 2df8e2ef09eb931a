"""End-to-end: validate, insert, read back."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from worktrack.reference import ReferenceData
from worktrack.services import (
    ConstraintError,
    PersistenceService,
    ValidationEngine,
    build_default_registry,
)


pytestmark = pytest.mark.asyncio


MINIMAL_DATASET = {
    "businessUnits": [
        {"code": "220000", "name": "HENKELS WEST CONTROLS", "buType": "HENKELS"},
    ],
    "employees": [
        {"id": "EMP001", "name": "John Smith", "role": "Field Technician", "businessUnit": "220000"},
    ],
    "projects": [
        {
            "id": "P1",
            "name": "Pilot Project",
            "businessUnit": "220000",
            "customer": "HW001",
            "contractType": "Time & Materials",
            "status": "Active",
            "startDate": "2024-01-01",
            "endDate": "2024-12-31",
        },
    ],
    "workTypes": [
        {"id": "REGULAR", "name": "Regular Time", "multiplier": "1.0"},
    ],
}


@pytest.fixture
def minimal_reference() -> ReferenceData:
    return ReferenceData.from_dataset(MINIMAL_DATASET)


@pytest_asyncio.fixture
async def minimal_store(settings, minimal_reference):
    service = PersistenceService(settings=settings, reference=minimal_reference)
    await service.initialize()
    yield service
    await service.close()


async def test_validate_insert_and_list(minimal_store, minimal_reference, settings):
    engine = ValidationEngine(
        build_default_registry(), minimal_reference, today=lambda: date(2024, 1, 20), settings=settings
    )
    record = {
        "employeeId": "EMP001",
        "date": "2024-01-15",
        "businessUnit": "220000",
        "projectId": "P1",
        "hoursWorked": 8,
        "workType": "REGULAR",
    }

    result = engine.validate("timesheet_entry", record)
    assert result.is_valid is True
    assert result.errors == []

    entry_id = await minimal_store.insert("timesheet_entries", result.sanitized, actor="EMP001")
    assert entry_id is not None

    rows = await minimal_store.get_timesheet_entries({"employeeId": "EMP001"})
    assert len(rows) == 1

    row = rows[0]
    assert row["hours_worked"] == Decimal("8")
    assert row["employee_name"] == "John Smith"
    assert row["project_name"] == "Pilot Project"
    assert row["business_unit_name"] == "HENKELS WEST CONTROLS"
    assert row["work_type_name"] == "Regular Time"
    assert row["billable_hours"] == Decimal("0")

    history = await minimal_store.audit_query.get_record_history("timesheet_entries", entry_id)
    assert [h.action for h in history] == ["INSERT"]


async def test_resubmitting_same_slot_is_rejected(minimal_store, minimal_reference, settings):
    engine = ValidationEngine(
        build_default_registry(), minimal_reference, today=lambda: date(2024, 1, 20), settings=settings
    )
    record = {
        "employeeId": "EMP001",
        "date": "2024-01-15",
        "businessUnit": "220000",
        "projectId": "P1",
        "hoursWorked": "8",
    }

    sanitized = engine.validate("timesheet_entry", record).sanitized
    await minimal_store.insert("timesheet_entries", sanitized)

    with pytest.raises(ConstraintError):
        await minimal_store.insert("timesheet_entries", sanitized)

    assert len(await minimal_store.get_timesheet_entries({"employeeId": "EMP001"})) == 1


class TestTimesheetListing:
    async def _seed(self, store, make_entry):
        await store.insert("timesheet_entries", make_entry(date="2024-01-15"))
        await store.insert("timesheet_entries", make_entry(date="2024-01-16", costCode="ADMIN"))
        await store.insert("timesheet_entries", make_entry(date="2024-01-17", projectId="22009019",
                                                           businessUnit="220004", jobId="J004",
                                                           workOrderId="WO007", costCode="MAINT-INSP"))
        await store.insert("timesheet_entries", make_entry(employeeId="EMP004", date="2024-01-16"))

    async def test_ordered_newest_first(self, store, make_entry):
        await self._seed(store, make_entry)

        rows = await store.get_timesheet_entries({"employeeId": "EMP001"})
        assert [row["date"] for row in rows] == [date(2024, 1, 17), date(2024, 1, 16), date(2024, 1, 15)]

    async def test_same_day_newest_created_first(self, store, make_entry):
        first = await store.insert("timesheet_entries", make_entry())
        second = await store.insert("timesheet_entries", make_entry(workType="OVERTIME", hoursWorked=2))

        rows = await store.get_timesheet_entries({"date": "2024-01-15"})
        assert [row["id"] for row in rows] == [second, first]

    async def test_filters(self, store, make_entry):
        await self._seed(store, make_entry)

        assert len(await store.get_timesheet_entries({"date": "2024-01-16"})) == 2
        assert len(await store.get_timesheet_entries({"dateFrom": "2024-01-16", "dateTo": "2024-01-17"})) == 3
        assert len(await store.get_timesheet_entries({"businessUnit": "220004"})) == 1
        assert len(await store.get_timesheet_entries({"projectId": "22009017"})) == 3
        assert len(await store.get_timesheet_entries({"approved": False})) == 4
        assert await store.get_timesheet_entries({"approved": True}) == []

    @pytest.mark.parametrize("flag", ["false", "0", "true", "yes"])
    async def test_approved_filter_from_text(self, store, make_entry, flag):
        approved_id = await store.insert("timesheet_entries", make_entry())
        await store.insert("timesheet_entries", make_entry(date="2024-01-16"))
        await store.update("timesheet_entries", approved_id, {"approved": True})

        rows = await store.get_timesheet_entries({"approved": flag})

        assert len(rows) == 1
        assert bool(rows[0]["approved"]) is (flag in ("true", "yes"))

    async def test_limit(self, store, make_entry):
        await self._seed(store, make_entry)
        assert len(await store.get_timesheet_entries(limit=2)) == 2

    async def test_denormalized_columns(self, store, make_entry):
        await store.insert("timesheet_entries", make_entry())

        row = (await store.get_timesheet_entries())[0]

        assert row["employee_role"] == "Field Technician"
        assert row["contract_type"] == "Time & Materials"
        assert row["job_name"] == "Control Panel Installation"
        assert row["work_order_description"] == "Panel Wiring"
        assert row["cost_code_description"] == "Electrical Wiring"
        assert row["cost_code_rate"] == Decimal("75.00")
        assert row["cost_code_billable"] is True
        assert row["work_type_multiplier"] == Decimal("1.0")

    async def test_bad_filter_returns_empty(self, store, make_entry):
        await store.insert("timesheet_entries", make_entry())
        assert await store.get_timesheet_entries({"date": "not-a-date"}) == []
