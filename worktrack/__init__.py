# WorkTrack - Timesheet persistence and validation core

__version__ = "1.0.0"
