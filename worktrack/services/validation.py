# WorkTrack - Validation Engine
# Validates and sanitizes candidate records before they reach the store

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Optional

from worktrack.config import Settings, get_settings
from worktrack.reference import ReferenceData
from worktrack.services.validators import (
    ValidationContext,
    ValidatorRegistry,
    build_default_registry,
)
from worktrack.utils import to_snake_case


logger = logging.getLogger(__name__)


FIELD_LABELS = {
    "employeeId": "Employee ID",
    "businessUnit": "Business Unit",
    "projectId": "Project ID",
    "hoursWorked": "Hours Worked",
    "breakHours": "Break Hours",
    "workType": "Work Type",
    "costCode": "Cost Code",
    "contractType": "Contract Type",
    "payGrade": "Pay Grade",
}


def field_label(name: str) -> str:
    """User-facing label for a record key ("hoursWorked" -> "Hours Worked")."""
    return FIELD_LABELS.get(name) or name[:1].upper() + name[1:]


def is_present(value: Any) -> bool:
    """A value counts as given unless it is None or an empty string. 0 and False are present."""
    return value is not None and value != ""


def _dedupe(messages: list[str]) -> list[str]:
    return list(dict.fromkeys(messages))


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    sanitized: dict[str, Any] = field(default_factory=dict)


class ValidationEngine:
    """
    Validates a record of a named kind and returns it sanitized.

    Record keys are the camelCase field names ("hoursWorked"); the
    snake_case column names are accepted too. The sanitized record keeps
    the caller's keys, so it can go straight to PersistenceService.insert.

    Usage:
        engine = ValidationEngine(build_default_registry(), ReferenceData.default())

        result = engine.validate("timesheet_entry", {
            "employeeId": "emp001",
            "date": "2024-01-15",
            "businessUnit": "220000",
            "projectId": "22009017",
            "hoursWorked": "8",
        })
        if result.is_valid:
            await store.insert("timesheet_entries", result.sanitized)

    Validation failures are returned, never raised.
    """

    def __init__(
        self,
        registry: Optional[ValidatorRegistry] = None,
        reference: Optional[ReferenceData] = None,
        today: Optional[Callable[[], date]] = None,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry if registry is not None else build_default_registry()
        self.reference = reference if reference is not None else ReferenceData.default()
        self.today = today or date.today
        self.settings = settings or get_settings()

    def _context(self) -> ValidationContext:
        return ValidationContext(reference=self.reference, today=self.today(), settings=self.settings)

    @staticmethod
    def _key_for(record: Mapping[str, Any], field_name: str) -> Optional[str]:
        """The key under which a field appears in the record, camelCase first."""
        if field_name in record:
            return field_name
        snake = to_snake_case(field_name)
        if snake in record:
            return snake
        return None

    def validate(self, kind: str, record: Mapping[str, Any]) -> ValidationResult:
        """
        Validate and sanitize one record.

        Steps: required fields, then each present field's validator, then
        the kind's cross-field rule on the sanitized values. Valid iff no
        errors; warnings never block.
        """
        rules = self.registry.get(kind)
        if rules is None:
            return ValidationResult(False, [f"Unknown validation type: {kind}"], [], dict(record))

        try:
            ctx = self._context()
            errors: list[str] = []
            warnings: list[str] = []
            sanitized = dict(record)

            for field_name in rules.required:
                key = self._key_for(record, field_name)
                if key is None or not is_present(record[key]):
                    errors.append(f"{field_label(field_name)} is required")

            # Canonical field name -> sanitized value, for the cross-field rule
            canonical: dict[str, Any] = {}

            for field_name, validator in rules.validators.items():
                key = self._key_for(record, field_name)
                if key is None:
                    continue
                value = record[key]
                if not is_present(value) and not validator.accepts_empty:
                    continue

                result = validator(value, ctx)
                errors.extend(result.errors)
                warnings.extend(result.warnings)
                sanitized[key] = result.sanitized
                canonical[field_name] = result.sanitized

            if rules.cross_field is not None:
                view = {**sanitized, **canonical}
                cross_errors, cross_warnings = rules.cross_field(view, ctx)
                errors.extend(cross_errors)
                warnings.extend(cross_warnings)

            return ValidationResult(
                is_valid=not errors,
                errors=_dedupe(errors),
                warnings=_dedupe(warnings),
                sanitized=sanitized,
            )
        except Exception:
            logger.exception("Validation of %s record failed", kind)
            return ValidationResult(False, ["Validation service error occurred"], [], dict(record))

    def validate_field(self, kind: str, field_name: str, value: Any) -> Optional[ValidationResult]:
        """
        Validate a single field of a kind, for as-you-type checks.

        Returns None when the kind or field has no validator.
        """
        rules = self.registry.get(kind)
        validator = rules.validators.get(field_name) if rules else None
        if validator is None:
            return None

        result = validator(value, self._context())
        return ValidationResult(
            is_valid=result.is_valid,
            errors=_dedupe(result.errors),
            warnings=_dedupe(result.warnings),
            sanitized={field_name: result.sanitized},
        )
