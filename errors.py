# errors.py
from __future__ import annotations


class TimecardError(Exception):
    """Base class for every user-facing timecard error."""


class ValidationError(TimecardError):
    """An entry draft was rejected before anything was mutated."""


class MissingField(ValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class InvalidDay(ValidationError):
    def __init__(self, day: str):
        self.day = day
        super().__init__(f"Invalid day: {day!r}")


class InvalidTimeFormat(ValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time {value!r}, expected HH:MM")


class InvalidTimeRange(ValidationError):
    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"End time {end} must be later than start time {start}")


class EntryNotFound(TimecardError):
    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} not found")


class TimecardNotFound(TimecardError):
    def __init__(self, timecard_id):
        self.timecard_id = timecard_id
        super().__init__(f"Timecard {timecard_id} not found")


class TimecardLocked(TimecardError):
    def __init__(self, timecard_id):
        self.timecard_id = timecard_id
        super().__init__(f"Timecard {timecard_id} is completed and can no longer be modified")


class DuplicateWeek(TimecardError):
    def __init__(self, week_start_date):
        self.week_start_date = week_start_date
        super().__init__(f"A timecard for the week of {week_start_date} already exists.")


class NotAuthorized(TimecardError):
    def __init__(self, message: str = "Not allowed"):
        super().__init__(message)


__all__ = [
    "TimecardError",
    "ValidationError",
    "MissingField",
    "InvalidDay",
    "InvalidTimeFormat",
    "InvalidTimeRange",
    "EntryNotFound",
    "TimecardNotFound",
    "TimecardLocked",
    "DuplicateWeek",
    "NotAuthorized",
]
