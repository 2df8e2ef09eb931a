# WorkTrack - Field Validators
# Per-field validate-and-sanitize functions and the registry that binds them to record kinds

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

from worktrack.config import Settings
from worktrack.models.employee import STANDARD_PAY_GRADES, STANDARD_ROLES
from worktrack.models.project import CONTRACT_TYPES
from worktrack.reference import ReferenceData


EMPLOYEE_ID_PATTERN = re.compile(r"^EMP\d{3,}$")
BUSINESS_UNIT_PATTERN = re.compile(r"^\d{6}$")
PROJECT_ID_PATTERN = re.compile(r"^[A-Z0-9-]{1,20}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'.]+$")

MAX_HOURS_PER_DAY = Decimal("24")
HIGH_HOURS_WARNING = Decimal("16")
MAX_BREAK_HOURS = Decimal("4")
QUARTER_HOUR_TOLERANCE = Decimal("0.001")
CENTS = Decimal("0.01")


@dataclass
class FieldResult:
    """Outcome of validating one field: messages plus the sanitized value."""

    sanitized: Any = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ValidationContext:
    """What validators may consult besides the value itself."""

    reference: ReferenceData
    today: date
    settings: Settings


@dataclass(frozen=True)
class FieldValidator:
    """
    A named validator function.

    Validators only run for present values. accepts_empty=True also runs
    the validator when the key is present but None or "", for fields whose
    empty form needs normalizing.
    """

    name: str
    func: Callable[[Any, ValidationContext], FieldResult]
    accepts_empty: bool = False

    def __call__(self, value: Any, ctx: ValidationContext) -> FieldResult:
        return self.func(value, ctx)


CrossFieldRule = Callable[[Mapping[str, Any], ValidationContext], tuple[list[str], list[str]]]


@dataclass
class KindRules:
    """Required fields, per-field validators and an optional cross-field rule for one kind."""

    required: tuple[str, ...]
    validators: dict[str, FieldValidator]
    cross_field: Optional[CrossFieldRule] = None


class ValidatorRegistry:
    """
    Maps a record kind to its rules.

    Built once (see build_default_registry) and handed to every
    ValidationEngine that needs it.
    """

    def __init__(self):
        self._kinds: dict[str, KindRules] = {}

    def register(self, kind: str, rules: KindRules) -> None:
        self._kinds[kind] = rules

    def get(self, kind: str) -> Optional[KindRules]:
        return self._kinds.get(kind)

    def kinds(self) -> list[str]:
        return list(self._kinds)

    def __contains__(self, kind: str) -> bool:
        return kind in self._kinds


# Coercion helpers

def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a number from int, float, Decimal or a numeric string; None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    if not isinstance(value, (int, float, Decimal, str)):
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _format_hours(value: Decimal) -> str:
    """Render an hour limit without trailing zeros: 8.00 -> 8, 7.50 -> 7.5."""
    return format(Decimal(value).normalize(), "f")


# Identifiers

def validate_employee_id(value: Any, ctx: ValidationContext) -> FieldResult:
    result = _check_employee_id_format(value)
    if isinstance(result.sanitized, str) and not ctx.reference.is_valid_employee(result.sanitized):
        result.errors.append("Employee ID not found in system")
    return result


def _check_employee_id_format(value: Any) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Employee ID must be a string"])

    sanitized = value.strip().upper()
    result = FieldResult(sanitized)
    if not EMPLOYEE_ID_PATTERN.match(sanitized):
        result.errors.append("Employee ID must be in format EMP### (e.g., EMP001)")
    return result


def validate_new_employee_id(value: Any, ctx: ValidationContext) -> FieldResult:
    """Format only; the employee being described need not exist yet."""
    return _check_employee_id_format(value)


def validate_business_unit(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Business unit code must be a string"])

    sanitized = value.strip()
    result = FieldResult(sanitized)
    if not BUSINESS_UNIT_PATTERN.match(sanitized):
        result.errors.append("Business unit code must be 6 digits (e.g., 220000)")
    if not ctx.reference.is_valid_business_unit(sanitized):
        result.errors.append("Business unit code not found in system")
    return result


def _check_project_id_format(value: Any) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Project ID must be a string"])

    sanitized = value.strip().upper()
    result = FieldResult(sanitized)
    if not PROJECT_ID_PATTERN.match(sanitized):
        result.errors.append("Project ID must be 1-20 letters, digits or hyphens (e.g., 22009017)")
    return result


def validate_project_id(value: Any, ctx: ValidationContext) -> FieldResult:
    result = _check_project_id_format(value)
    if isinstance(result.sanitized, str) and not ctx.reference.is_valid_project(result.sanitized):
        result.errors.append("Project ID not found or inactive")
    return result


def validate_new_project_id(value: Any, ctx: ValidationContext) -> FieldResult:
    """Format only; the project being described need not exist yet."""
    return _check_project_id_format(value)


# Free text

def validate_name(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Name must be a string"])

    collapsed = " ".join(value.split())
    sanitized = " ".join(word[:1].upper() + word[1:].lower() for word in collapsed.split(" "))

    result = FieldResult(sanitized)
    if len(sanitized) < 2:
        result.errors.append("Name must be at least 2 characters long")
    if len(sanitized) > 100:
        result.errors.append("Name cannot exceed 100 characters")
    if not NAME_PATTERN.match(sanitized):
        result.errors.append("Name can only contain letters, spaces, hyphens, apostrophes, and periods")
    return result


def validate_project_name(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Project name must be a string"])

    sanitized = value.strip()
    result = FieldResult(sanitized)
    if len(sanitized) < 3:
        result.errors.append("Project name must be at least 3 characters long")
    if len(sanitized) > 200:
        result.errors.append("Project name cannot exceed 200 characters")
    return result


def validate_description(value: Any, ctx: ValidationContext) -> FieldResult:
    sanitized = value.strip() if isinstance(value, str) else str(value or "")

    result = FieldResult()
    if len(sanitized) > 500:
        result.errors.append("Description cannot exceed 500 characters")
    if not sanitized:
        result.warnings.append("Description is empty - consider adding details")

    result.sanitized = sanitized.replace("<", "").replace(">", "")
    return result


# Enumerations

def validate_role(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Role must be a string"])

    sanitized = value.strip()
    result = FieldResult(sanitized)
    if sanitized not in STANDARD_ROLES:
        result.warnings.append(f'Role "{sanitized}" is not in the standard role list')
    return result


def validate_pay_grade(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value)

    sanitized = value.strip().upper()
    result = FieldResult(sanitized)
    if sanitized not in STANDARD_PAY_GRADES:
        result.warnings.append(f'Pay grade "{sanitized}" is not in the standard grade list')
    return result


def validate_contract_type(value: Any, ctx: ValidationContext) -> FieldResult:
    if not isinstance(value, str):
        return FieldResult(value, ["Contract type must be a string"])

    sanitized = value.strip()
    result = FieldResult(sanitized)
    if sanitized not in CONTRACT_TYPES:
        result.errors.append("Invalid contract type. Must be: Time & Materials, Fixed Bid, or Unit Price")
    return result


def validate_work_type(value: Any, ctx: ValidationContext) -> FieldResult:
    sanitized = value.strip().upper() if isinstance(value, str) else value
    result = FieldResult(sanitized)
    if not isinstance(sanitized, str) or not ctx.reference.is_valid_work_type(sanitized):
        result.errors.append("Invalid work type")
    return result


def validate_cost_code(value: Any, ctx: ValidationContext) -> FieldResult:
    """Optional. Empty input normalizes to None."""
    sanitized = value.strip().upper() if isinstance(value, str) else value
    if sanitized is None or sanitized == "":
        return FieldResult(None)

    result = FieldResult(sanitized)
    if not isinstance(sanitized, str) or not ctx.reference.is_valid_cost_code(sanitized):
        result.errors.append("Cost code not found in system")
    return result


# Dates and hours

def validate_date(value: Any, ctx: ValidationContext) -> FieldResult:
    """
    Strict YYYY-MM-DD inside the entry window around today.

    The window is max_days_past before and max_days_future after today,
    both inclusive. Weekends only warn.
    """
    if isinstance(value, date):
        value = value.isoformat()
    if not isinstance(value, str):
        return FieldResult(value, ["Date must be a string"])

    sanitized = value.strip()
    if not DATE_PATTERN.match(sanitized):
        return FieldResult(sanitized, ["Date must be in YYYY-MM-DD format"])

    try:
        parsed = date.fromisoformat(sanitized)
    except ValueError:
        return FieldResult(sanitized, ["Invalid date"])

    result = FieldResult(sanitized)
    if (ctx.today - parsed).days > ctx.settings.max_days_past:
        result.errors.append("Date cannot be more than one year in the past")
    if (parsed - ctx.today).days > ctx.settings.max_days_future:
        result.errors.append(f"Date cannot be more than {ctx.settings.max_days_future} days in the future")
    if parsed.weekday() >= 5:
        result.warnings.append("Date falls on a weekend")
    return result


def validate_hours(value: Any, ctx: ValidationContext) -> FieldResult:
    hours = to_decimal(value)
    if hours is None:
        return FieldResult(Decimal("0"), ["Hours must be a valid number"])

    # Out-of-range values are rejected before rounding; quantize cannot hold them
    if hours < 0:
        return FieldResult(hours, ["Hours cannot be negative"])
    if hours > MAX_HOURS_PER_DAY:
        return FieldResult(hours, ["Hours cannot exceed 24 per day"], ["Unusually high hours - please verify"])

    sanitized = round_hours(hours)
    result = FieldResult(sanitized)
    if sanitized > HIGH_HOURS_WARNING:
        result.warnings.append("Unusually high hours - please verify")

    quarters = sanitized * 4
    if abs(quarters - quarters.to_integral_value(rounding=ROUND_HALF_UP)) > QUARTER_HOUR_TOLERANCE:
        result.warnings.append("Hours should be in 15-minute increments (0.25)")
    return result


def validate_break_hours(value: Any, ctx: ValidationContext) -> FieldResult:
    """Unlike hours worked, unusable input quietly becomes 0."""
    hours = to_decimal(value)
    if hours is None or hours < 0:
        hours = Decimal("0")
    if hours > MAX_BREAK_HOURS:
        return FieldResult(hours, ["Break hours cannot exceed 4 hours per day"])
    return FieldResult(round_hours(hours))


# Cross-field rules

def timesheet_entry_rules(record: Mapping[str, Any], ctx: ValidationContext) -> tuple[list[str], list[str]]:
    """Rules spanning several fields of a sanitized timesheet entry."""
    errors: list[str] = []
    warnings: list[str] = []

    hours = to_decimal(record.get("hoursWorked")) or Decimal("0")
    break_hours = to_decimal(record.get("breakHours")) or Decimal("0")
    if hours + break_hours > MAX_HOURS_PER_DAY:
        errors.append("Total work and break hours cannot exceed 24 hours per day")

    project_id = record.get("projectId")
    entry_date = record.get("date")
    if isinstance(project_id, str) and isinstance(entry_date, str):
        project = ctx.reference.get_project(project_id)
        try:
            parsed = date.fromisoformat(entry_date)
        except ValueError:
            parsed = None

        if project and parsed:
            start_date = project.get("start_date")
            end_date = project.get("end_date")
            if start_date and parsed < start_date:
                errors.append(f"Date is before project start date ({start_date.isoformat()})")
            if end_date and parsed > end_date:
                warnings.append(f"Date is after project end date ({end_date.isoformat()})")

    work_type = record.get("workType")
    if work_type == "OVERTIME" and hours <= ctx.settings.regular_hours_limit:
        warnings.append(f"Overtime work type selected but hours are {_format_hours(ctx.settings.regular_hours_limit)} or less")
    if work_type == "DOUBLETIME" and hours <= ctx.settings.overtime_hours_limit:
        warnings.append(f"Double time work type selected but hours are {_format_hours(ctx.settings.overtime_hours_limit)} or less")

    return errors, warnings


# Quick single-value format checks for contact and clock fields
FORMAT_PATTERNS = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^\+?[\d\s\-()]{10,}$"),
    "ssn": re.compile(r"^\d{3}-\d{2}-\d{4}$"),
    "time": re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$"),
}


def check_format(field_type: str, value: Any) -> bool:
    """True if value matches the named format. Unknown formats pass."""
    pattern = FORMAT_PATTERNS.get(field_type)
    if pattern is None:
        return True
    return isinstance(value, str) and bool(pattern.match(value))


def build_default_registry() -> ValidatorRegistry:
    """Registry with the employee, timesheet_entry and project kinds."""
    registry = ValidatorRegistry()

    registry.register(
        "employee",
        KindRules(
            required=("id", "name", "role", "businessUnit"),
            validators={
                "id": FieldValidator("employee_id_format", validate_new_employee_id),
                "name": FieldValidator("person_name", validate_name),
                "role": FieldValidator("role", validate_role),
                "businessUnit": FieldValidator("business_unit", validate_business_unit),
                "payGrade": FieldValidator("pay_grade", validate_pay_grade),
            },
        ),
    )

    registry.register(
        "timesheet_entry",
        KindRules(
            required=("employeeId", "date", "businessUnit", "projectId", "hoursWorked"),
            validators={
                "employeeId": FieldValidator("employee_id", validate_employee_id),
                "date": FieldValidator("date", validate_date),
                "businessUnit": FieldValidator("business_unit", validate_business_unit),
                "projectId": FieldValidator("project_id", validate_project_id),
                "hoursWorked": FieldValidator("hours", validate_hours),
                "breakHours": FieldValidator("break_hours", validate_break_hours, accepts_empty=True),
                "workType": FieldValidator("work_type", validate_work_type),
                "costCode": FieldValidator("cost_code", validate_cost_code, accepts_empty=True),
                "description": FieldValidator("description", validate_description),
            },
            cross_field=timesheet_entry_rules,
        ),
    )

    registry.register(
        "project",
        KindRules(
            required=("id", "name", "businessUnit", "contractType"),
            validators={
                "id": FieldValidator("project_id_format", validate_new_project_id),
                "name": FieldValidator("project_name", validate_project_name),
                "businessUnit": FieldValidator("business_unit", validate_business_unit),
                "contractType": FieldValidator("contract_type", validate_contract_type),
                "startDate": FieldValidator("date", validate_date),
                "endDate": FieldValidator("date", validate_date),
            },
        ),
    )

    return registry
