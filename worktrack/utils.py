# WorkTrack - Shared helpers

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(key: str) -> str:
    """Map a camelCase record key to its column name ("hoursWorked" -> "hours_worked")."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()
