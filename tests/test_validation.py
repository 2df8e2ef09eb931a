"""Tests for the validation engine and field validators."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from worktrack.services import ValidationEngine, build_default_registry
from worktrack.services.validators import (
    FieldResult,
    FieldValidator,
    KindRules,
    ValidatorRegistry,
    check_format,
)


class TestRequiredFields:
    def test_valid_entry(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry())

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_hours_worked(self, validator, make_entry):
        record = make_entry()
        del record["hoursWorked"]

        result = validator.validate("timesheet_entry", record)

        assert result.is_valid is False
        assert "Hours Worked is required" in result.errors

    def test_empty_string_is_missing(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(businessUnit=""))
        assert "Business Unit is required" in result.errors

    def test_none_is_missing(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(employeeId=None))
        assert "Employee ID is required" in result.errors

    def test_zero_hours_is_present(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=0))

        assert result.is_valid
        assert result.sanitized["hoursWorked"] == Decimal("0")

    def test_snake_case_keys_accepted(self, validator):
        record = {
            "employee_id": " emp001 ",
            "date": "2024-01-15",
            "business_unit": "220000",
            "project_id": "22009017",
            "hours_worked": "7.5",
        }

        result = validator.validate("timesheet_entry", record)

        assert result.is_valid, result.errors
        assert result.sanitized["employee_id"] == "EMP001"
        assert result.sanitized["hours_worked"] == Decimal("7.5")

    def test_unknown_kind(self, validator):
        result = validator.validate("invoice", {"id": 1})

        assert result.is_valid is False
        assert result.errors == ["Unknown validation type: invoice"]
        assert result.sanitized == {"id": 1}


class TestIdentifiers:
    def test_employee_id_normalized(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(employeeId="  emp001 "))
        assert result.sanitized["employeeId"] == "EMP001"
        assert result.is_valid

    def test_employee_id_format_and_existence_reported_separately(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(employeeId="E1"))

        assert "Employee ID must be in format EMP### (e.g., EMP001)" in result.errors
        assert "Employee ID not found in system" in result.errors

    def test_employee_id_well_formed_but_unknown(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(employeeId="EMP999"))
        assert result.errors == ["Employee ID not found in system"]

    def test_employee_id_must_be_string(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(employeeId=1))
        assert result.errors == ["Employee ID must be a string"]

    def test_business_unit(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(businessUnit="22000"))

        assert "Business unit code must be 6 digits (e.g., 220000)" in result.errors
        assert "Business unit code not found in system" in result.errors

    def test_unknown_project(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(projectId="99999999"))
        assert result.errors == ["Project ID not found or inactive"]

    def test_project_id_format(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(projectId="22009017!"))
        assert "Project ID must be 1-20 letters, digits or hyphens (e.g., 22009017)" in result.errors


class TestDate:
    def test_format(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(date="01/15/2024"))
        assert result.errors == ["Date must be in YYYY-MM-DD format"]

    def test_impossible_date(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(date="2024-02-30"))
        assert result.errors == ["Invalid date"]

    def test_366_days_past_is_error(self, validator, make_entry, today):
        entry_date = (today - timedelta(days=366)).isoformat()
        result = validator.validate("timesheet_entry", make_entry(date=entry_date))
        assert "Date cannot be more than one year in the past" in result.errors

    def test_365_days_past_is_allowed(self, validator, today):
        result = validator.validate_field("timesheet_entry", "date", (today - timedelta(days=365)).isoformat())
        assert result.errors == []

    def test_30_days_future_is_allowed(self, validator, make_entry, today):
        entry_date = (today + timedelta(days=30)).isoformat()
        result = validator.validate("timesheet_entry", make_entry(date=entry_date))

        assert result.is_valid
        assert result.errors == []

    def test_31_days_future_is_error(self, validator, make_entry, today):
        entry_date = (today + timedelta(days=31)).isoformat()
        result = validator.validate("timesheet_entry", make_entry(date=entry_date))
        assert "Date cannot be more than 30 days in the future" in result.errors

    def test_weekend_is_warning_only(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(date="2024-01-20"))

        assert result.is_valid
        assert result.warnings == ["Date falls on a weekend"]

    def test_date_object_accepted(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(date=date(2024, 1, 15)))

        assert result.is_valid
        assert result.sanitized["date"] == "2024-01-15"


class TestHours:
    def test_quarter_hour_warning(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=8.3))

        assert result.is_valid
        assert result.sanitized["hoursWorked"] == Decimal("8.3")
        assert "Hours should be in 15-minute increments (0.25)" in result.warnings

    def test_rounds_to_two_places(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked="8.333"))
        assert result.sanitized["hoursWorked"] == Decimal("8.33")

    def test_string_hours_coerced(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=" 7.75 "))

        assert result.is_valid
        assert result.warnings == []
        assert result.sanitized["hoursWorked"] == Decimal("7.75")

    def test_invalid_hours(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked="eight"))
        assert "Hours must be a valid number" in result.errors

    def test_negative_hours(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=-1))
        assert "Hours cannot be negative" in result.errors

    def test_more_than_24_hours(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=25))
        assert "Hours cannot exceed 24 per day" in result.errors

    def test_high_hours_warn(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=17))

        assert result.is_valid
        assert "Unusually high hours - please verify" in result.warnings

    @pytest.mark.parametrize("value", ["-2", "abc", -0.5, None, ""])
    def test_unusable_break_hours_become_zero(self, validator, make_entry, value):
        result = validator.validate("timesheet_entry", make_entry(breakHours=value))

        assert result.is_valid
        assert result.sanitized["breakHours"] == Decimal("0")

    def test_break_hours_over_four(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(breakHours=4.5))
        assert "Break hours cannot exceed 4 hours per day" in result.errors

    @pytest.mark.parametrize("value", ["1e30", "-1e30", 10**40])
    def test_huge_hours_rejected_by_range(self, validator, make_entry, value):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=value))

        assert not result.is_valid
        assert "Validation service error occurred" not in result.errors
        assert any(e.startswith("Hours cannot") for e in result.errors)

    def test_huge_hours_single_field(self, validator):
        result = validator.validate_field("timesheet_entry", "hoursWorked", "1e30")

        assert result is not None
        assert result.errors == ["Hours cannot exceed 24 per day"]

    def test_huge_break_hours(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(breakHours="1e30"))
        assert "Break hours cannot exceed 4 hours per day" in result.errors

        field = validator.validate_field("timesheet_entry", "breakHours", "1e30")
        assert field.errors == ["Break hours cannot exceed 4 hours per day"]


class TestEnumerations:
    def test_work_type_normalized(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(workType=" holiday "))
        assert result.sanitized["workType"] == "HOLIDAY"

    def test_unknown_work_type(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(workType="FLEX"))
        assert result.errors == ["Invalid work type"]

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_cost_code_normalizes_to_none(self, validator, make_entry, value):
        result = validator.validate("timesheet_entry", make_entry(costCode=value))

        assert result.is_valid
        assert result.sanitized["costCode"] is None

    def test_cost_code_upper_cased(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(costCode=" elec-wire "))
        assert result.sanitized["costCode"] == "ELEC-WIRE"

    def test_unknown_cost_code(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(costCode="NOPE"))
        assert result.errors == ["Cost code not found in system"]


class TestDescription:
    def test_angle_brackets_stripped(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(description="  <b>Panel</b> wiring "))
        assert result.sanitized["description"] == "bPanel/b wiring"

    def test_too_long(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(description="x" * 501))
        assert "Description cannot exceed 500 characters" in result.errors

    def test_blank_warns(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(description="   "))

        assert result.is_valid
        assert "Description is empty - consider adding details" in result.warnings


class TestCrossField:
    def test_hours_plus_break_over_24(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(hoursWorked=22, breakHours=3))
        assert "Total work and break hours cannot exceed 24 hours per day" in result.errors

    def test_before_project_start_is_error(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(projectId="22009018"))
        assert "Date is before project start date (2024-02-01)" in result.errors

    def test_after_project_end_is_warning(self, registry, reference, settings, make_entry):
        engine = ValidationEngine(registry, reference, today=lambda: date(2024, 9, 10), settings=settings)

        result = engine.validate("timesheet_entry", make_entry(projectId="22009018", date="2024-09-05"))

        assert result.is_valid
        assert "Date is after project end date (2024-08-30)" in result.warnings

    def test_overtime_with_eight_hours_warns(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(workType="overtime", hoursWorked=8))

        assert result.is_valid
        assert "Overtime work type selected but hours are 8 or less" in result.warnings

    def test_doubletime_with_twelve_hours_warns(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(workType="DOUBLETIME", hoursWorked=12))

        assert result.is_valid
        assert "Double time work type selected but hours are 12 or less" in result.warnings

    def test_overtime_with_ten_hours_is_clean(self, validator, make_entry):
        result = validator.validate("timesheet_entry", make_entry(workType="OVERTIME", hoursWorked=10))
        assert result.warnings == []

    def test_premium_warnings_follow_settings(self, registry, reference, settings, today, make_entry):
        tuned = settings.model_copy(update={
            "regular_hours_limit": Decimal("7.5"),
            "overtime_hours_limit": Decimal("10"),
        })
        engine = ValidationEngine(registry, reference, today=lambda: today, settings=tuned)

        overtime = engine.validate("timesheet_entry", make_entry(workType="OVERTIME", hoursWorked=7.5))
        doubletime = engine.validate("timesheet_entry", make_entry(workType="DOUBLETIME", hoursWorked=10))

        assert "Overtime work type selected but hours are 7.5 or less" in overtime.warnings
        assert "Double time work type selected but hours are 10 or less" in doubletime.warnings


class TestOtherKinds:
    def test_employee(self, validator):
        result = validator.validate("employee", {
            "id": "emp200",
            "name": "  mary   o'brien-smith ",
            "role": "Apprentice",
            "businessUnit": "220001",
            "payGrade": "t2",
        })

        assert result.is_valid, result.errors
        assert result.sanitized["id"] == "EMP200"
        assert result.sanitized["name"] == "Mary O'brien-smith"
        assert result.sanitized["payGrade"] == "T2"
        assert result.warnings == ['Role "Apprentice" is not in the standard role list']

    def test_employee_name_rules(self, validator):
        result = validator.validate("employee", {
            "id": "EMP200", "name": "J0hn", "role": "Electrician", "businessUnit": "220000",
        })
        assert result.errors == ["Name can only contain letters, spaces, hyphens, apostrophes, and periods"]

        result = validator.validate("employee", {
            "id": "EMP200", "name": "J", "role": "Electrician", "businessUnit": "220000",
        })
        assert result.errors == ["Name must be at least 2 characters long"]

    def test_unknown_pay_grade_warns(self, validator):
        result = validator.validate("employee", {
            "id": "EMP200", "name": "Ann Lee", "role": "Electrician", "businessUnit": "220000", "payGrade": "Z9",
        })

        assert result.is_valid
        assert result.warnings == ['Pay grade "Z9" is not in the standard grade list']

    def test_project_warnings_deduplicated(self, validator):
        result = validator.validate("project", {
            "id": "p-100",
            "name": "  Substation Retrofit ",
            "businessUnit": "220000",
            "contractType": "Fixed Bid",
            "startDate": "2024-01-13",
            "endDate": "2024-01-14",
        })

        assert result.is_valid, result.errors
        assert result.sanitized["id"] == "P-100"
        assert result.sanitized["name"] == "Substation Retrofit"
        assert result.warnings == ["Date falls on a weekend"]

    def test_project_contract_type_and_name(self, validator):
        result = validator.validate("project", {
            "id": "P1", "name": "AB", "businessUnit": "220000", "contractType": "Cost Plus",
        })

        assert "Project name must be at least 3 characters long" in result.errors
        assert "Invalid contract type. Must be: Time & Materials, Fixed Bid, or Unit Price" in result.errors


class TestRegistry:
    def test_default_kinds(self, registry):
        assert sorted(registry.kinds()) == ["employee", "project", "timesheet_entry"]
        assert "timesheet_entry" in registry

    def test_registries_are_independent(self):
        first = build_default_registry()
        second = build_default_registry()
        first.register("note", KindRules(required=("text",), validators={}))

        assert "note" in first
        assert "note" not in second

    def test_custom_kind(self, reference, settings):
        registry = ValidatorRegistry()
        registry.register(
            "note",
            KindRules(
                required=("text",),
                validators={
                    "text": FieldValidator("shout", lambda value, ctx: FieldResult(value.upper())),
                },
            ),
        )
        engine = ValidationEngine(registry, reference, settings=settings)

        result = engine.validate("note", {"text": "hello"})
        assert result.is_valid
        assert result.sanitized == {"text": "HELLO"}

        missing = engine.validate("note", {})
        assert missing.errors == ["Text is required"]

    def test_validator_exception_becomes_generic_error(self, reference, settings):
        def explode(value, ctx):
            raise RuntimeError("boom")

        registry = ValidatorRegistry()
        registry.register("note", KindRules(required=(), validators={"text": FieldValidator("explode", explode)}))
        engine = ValidationEngine(registry, reference, settings=settings)

        result = engine.validate("note", {"text": "hello"})

        assert result.is_valid is False
        assert result.errors == ["Validation service error occurred"]

    def test_validate_field_unknown(self, validator):
        assert validator.validate_field("timesheet_entry", "nickname", "x") is None
        assert validator.validate_field("invoice", "id", "x") is None


@pytest.mark.parametrize(
    "field_type, value, expected",
    [
        ("email", "jsmith@example.com", True),
        ("email", "jsmith@", False),
        ("phone", "+1 (555) 010-2000", True),
        ("phone", "555-01", False),
        ("ssn", "123-45-6789", True),
        ("time", "23:59", True),
        ("time", "24:00", False),
        ("badge", "anything", True),
    ],
)
def test_check_format(field_type, value, expected):
    assert check_format(field_type, value) is expected
