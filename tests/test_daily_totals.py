"""Tests for the daily premium-time aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from worktrack.config import Settings
from worktrack.services import PersistenceService
from worktrack.services.persistence import split_premium_hours


async def _log_hours(store, make_entry, *slots):
    """Insert one entry per (work_type, hours, cost_code) slot on the default day."""
    for work_type, hours, cost_code in slots:
        await store.insert(
            "timesheet_entries",
            make_entry(workType=work_type, hoursWorked=hours, costCode=cost_code),
        )


@pytest.mark.asyncio
async def test_ten_hour_day(store, make_entry):
    await _log_hours(store, make_entry, ("REGULAR", 8, "ELEC-WIRE"), ("OVERTIME", 2, "ELEC-WIRE"))

    totals = await store.calculate_daily_totals("EMP001", date(2024, 1, 15))

    assert totals.total_hours == Decimal("10")
    assert totals.regular_hours == Decimal("8")
    assert totals.overtime_hours == Decimal("2")
    assert totals.doubletime_hours == Decimal("0")
    assert totals.entry_count == 2


@pytest.mark.asyncio
async def test_thirteen_hour_day(store, make_entry):
    await _log_hours(store, make_entry, ("REGULAR", 8, "ELEC-WIRE"), ("OVERTIME", 5, "ELEC-WIRE"))

    totals = await store.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.total_hours == Decimal("13")
    assert totals.regular_hours == Decimal("8")
    assert totals.overtime_hours == Decimal("4")
    assert totals.doubletime_hours == Decimal("1")


@pytest.mark.asyncio
async def test_tiers_ignore_work_type_tags(store, make_entry):
    # Tagged doubletime, but the day only totals 6 hours
    await _log_hours(store, make_entry, ("DOUBLETIME", 6, "ELEC-WIRE"))

    totals = await store.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.regular_hours == Decimal("6")
    assert totals.overtime_hours == Decimal("0")
    assert totals.doubletime_hours == Decimal("0")


@pytest.mark.asyncio
async def test_billable_and_break_sums(store, make_entry):
    await store.insert("timesheet_entries", make_entry(hoursWorked=6, breakHours=0.5, costCode="ELEC-WIRE"))
    await store.insert(
        "timesheet_entries",
        make_entry(workType="OVERTIME", hoursWorked=2, breakHours=0.25, costCode="ADMIN"),
    )

    totals = await store.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.total_billable == Decimal("6")
    assert totals.total_breaks == Decimal("0.75")


@pytest.mark.asyncio
async def test_other_days_and_employees_excluded(store, make_entry):
    await store.insert("timesheet_entries", make_entry())
    await store.insert("timesheet_entries", make_entry(date="2024-01-16"))
    await store.insert("timesheet_entries", make_entry(employeeId="EMP004"))

    totals = await store.calculate_daily_totals("EMP001", "2024-01-15")
    assert totals.entry_count == 1
    assert totals.total_hours == Decimal("8")


@pytest.mark.asyncio
async def test_empty_day_is_all_zero(store):
    totals = await store.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.entry_count == 0
    assert totals.total_hours == Decimal("0")
    assert totals.regular_hours == Decimal("0")


@pytest.mark.asyncio
async def test_failure_returns_zero_totals(settings):
    service = PersistenceService(settings=settings)

    totals = await service.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.employee_id == "EMP001"
    assert totals.date == date(2024, 1, 15)
    assert totals.total_hours == Decimal("0")
    assert totals.entry_count == 0


@pytest.mark.asyncio
async def test_bad_date_returns_zero_totals(store):
    totals = await store.calculate_daily_totals("EMP001", "15/01/2024")
    assert totals.entry_count == 0


@pytest.mark.asyncio
async def test_thresholds_come_from_settings(tmp_path, reference, make_entry):
    settings = Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tiers.db'}",
        regular_hours_limit=Decimal("7.5"),
        overtime_hours_limit=Decimal("10"),
    )
    async with PersistenceService(settings=settings, reference=reference) as service:
        await service.insert("timesheet_entries", make_entry(hoursWorked=11))
        totals = await service.calculate_daily_totals("EMP001", "2024-01-15")

    assert totals.regular_hours == Decimal("7.5")
    assert totals.overtime_hours == Decimal("2.5")
    assert totals.doubletime_hours == Decimal("1")


@pytest.mark.parametrize(
    "total, expected",
    [
        ("0", ("0", "0", "0")),
        ("7.75", ("7.75", "0", "0")),
        ("8", ("8", "0", "0")),
        ("12", ("8", "4", "0")),
        ("16.5", ("8", "4", "4.5")),
    ],
)
def test_split_premium_hours(total, expected):
    split = split_premium_hours(Decimal(total), Decimal("8"), Decimal("12"))
    assert split == tuple(Decimal(value) for value in expected)
