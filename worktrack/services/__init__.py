# WorkTrack - Services
# Persistence, validation, schema and audit layers

from .audit import AuditLogger, AuditQuery
from .errors import ConstraintError, ExecutionError, InitializationError, WorkTrackError
from .persistence import (
    DailyTotals,
    EntryFilters,
    ExecutionResult,
    HealthStatus,
    PersistenceService,
)
from .schema import SCHEMA_VERSION, SchemaManager, SeedReport
from .validation import ValidationEngine, ValidationResult
from .validators import ValidatorRegistry, build_default_registry

__all__ = [
    "AuditLogger",
    "AuditQuery",
    "WorkTrackError",
    "ExecutionError",
    "InitializationError",
    "ConstraintError",
    "PersistenceService",
    "ExecutionResult",
    "EntryFilters",
    "DailyTotals",
    "HealthStatus",
    "SCHEMA_VERSION",
    "SchemaManager",
    "SeedReport",
    "ValidationEngine",
    "ValidationResult",
    "ValidatorRegistry",
    "build_default_registry",
]
