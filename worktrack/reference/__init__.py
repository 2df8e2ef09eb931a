# WorkTrack - Reference Data

from .catalog import ReferenceData
from .defaults import DEFAULT_REFERENCE_DATA

__all__ = [
    "ReferenceData",
    "DEFAULT_REFERENCE_DATA",
]
