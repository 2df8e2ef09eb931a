# WorkTrack - Service Errors

from typing import Optional


class WorkTrackError(Exception):
    """Base class for persistence-layer failures."""


class ExecutionError(WorkTrackError):
    """
    A statement against the store failed.

    Attributes:
        statement: The SQL (or a short description of the operation)
        params: Parameters that were bound, if any
    """

    def __init__(self, message: str, statement: Optional[str] = None, params=None):
        super().__init__(message)
        self.statement = statement
        self.params = params


class InitializationError(ExecutionError):
    """The store is not ready: initialize() was not called or failed."""


class ConstraintError(ExecutionError):
    """
    A uniqueness, referential or check constraint rejected a write.

    Raised for IntegrityError from the driver, so callers can tell a
    duplicate timesheet slot apart from an outage.
    """
