# domain.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping
from uuid import uuid4

from errors import (
    EntryNotFound,
    InvalidDay,
    InvalidTimeRange,
    MissingField,
    TimecardLocked,
)
from timecalc import duration_hours

logger = logging.getLogger(__name__)

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# wire (camelCase) name -> attribute name
_DRAFT_KEYS = {
    "day": "day",
    "jobName": "job_name",
    "job_name": "job_name",
    "startTime": "start_time",
    "start_time": "start_time",
    "endTime": "end_time",
    "end_time": "end_time",
    "description": "description",
}


@dataclass
class EntryDraft:
    """Unvalidated entry as typed in by the employee."""
    day: str | None = None
    job_name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    description: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping) -> "EntryDraft":
        values = {}
        for key, attr in _DRAFT_KEYS.items():
            if key in payload and payload[key] is not None:
                values[attr] = payload[key]
        return cls(**values)


@dataclass(frozen=True)
class TimecardEntry:
    """A single day/job/time-range line of a timecard."""
    id: str
    day: str
    job_name: str
    start_time: str
    end_time: str
    description: str = ""

    @property
    def hours(self) -> float:
        return duration_hours(self.start_time, self.end_time)

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "day": self.day,
            "jobName": self.job_name,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "description": self.description,
        }


class EntryValidator:
    """Checks a draft and turns it into a TimecardEntry with a fresh id."""
    REQUIRED = ("day", "job_name", "start_time", "end_time")

    def __init__(self, id_factory=None):
        self.id_factory = id_factory or (lambda: uuid4().hex)

    def validate(self, draft: EntryDraft | Mapping) -> TimecardEntry:
        if not isinstance(draft, EntryDraft):
            draft = EntryDraft.from_payload(draft)

        for name in self.REQUIRED:
            value = getattr(draft, name)
            if value is None or not str(value).strip():
                raise MissingField(name)

        day = str(draft.day).strip()
        if day not in DAYS_OF_WEEK:
            raise InvalidDay(draft.day)

        start, end = str(draft.start_time).strip(), str(draft.end_time).strip()
        if duration_hours(start, end) <= 0:
            raise InvalidTimeRange(start, end)

        return TimecardEntry(
            id=self.id_factory(),
            day=day,
            job_name=str(draft.job_name).strip(),
            start_time=start,
            end_time=end,
            description=str(draft.description or "").strip(),
        )


@dataclass
class Employee:
    id: int
    name: str
    is_manager: bool = False

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""


@dataclass(frozen=True)
class Caller:
    """Authenticated identity making a request. Resolved by the transport layer."""
    employee_id: int
    is_manager: bool = False


@dataclass
class Timecard:
    """
    One employee's week of entries.

    `total_hours` is derived: every mutator recomputes it from `entries` before
    returning, and a completed timecard refuses entry changes.
    """
    id: int | None
    employee_id: int
    week_start_date: date
    entries: list[TimecardEntry] = field(default_factory=list)
    total_hours: float = 0.0
    completed: bool = False
    created_at: datetime | None = None

    def __post_init__(self):
        self.entries = list(self.entries)
        self.total_hours = self.compute_total(self.entries)

    @staticmethod
    def compute_total(entries: Iterable[TimecardEntry]) -> float:
        return sum(e.hours for e in entries)

    @property
    def iso_year_week(self) -> tuple[int, int]:
        """Returns (ISO year, ISO week number) of the week start."""
        iso = self.week_start_date.isocalendar()
        return (iso[0], iso[1])

    def _ensure_open(self) -> None:
        if self.completed:
            raise TimecardLocked(self.id)

    def _set_entries(self, entries: list[TimecardEntry]) -> None:
        total = self.compute_total(entries)
        self.entries, self.total_hours = entries, total

    def add_entry(self, draft: EntryDraft | Mapping, validator: EntryValidator | None = None) -> "Timecard":
        self._ensure_open()
        entry = (validator or EntryValidator()).validate(draft)
        self._set_entries(self.entries + [entry])
        return self

    def remove_entry(self, entry_id: str) -> "Timecard":
        self._ensure_open()
        remaining = [e for e in self.entries if e.id != entry_id]
        if len(remaining) == len(self.entries):
            raise EntryNotFound(entry_id)
        self._set_entries(remaining)
        return self

    def replace_entries(self, drafts: Iterable[EntryDraft | Mapping],
                        validator: EntryValidator | None = None) -> "Timecard":
        self._ensure_open()
        validator = validator or EntryValidator()
        entries = [validator.validate(d) for d in drafts]
        self._set_entries(entries)
        return self

    def complete(self) -> "Timecard":
        if not self.completed:
            logger.debug(f"Completing timecard {self.id}")
        self.completed = True
        return self

    def to_payload(self) -> dict:
        return {
            "_id": self.id,
            "employeeId": self.employee_id,
            "weekStartDate": self.week_start_date.isoformat(),
            "entries": [e.to_payload() for e in self.entries],
            "totalHours": self.total_hours,
            "completed": self.completed,
        }


__all__ = [
    "DAYS_OF_WEEK",
    "EntryDraft",
    "TimecardEntry",
    "EntryValidator",
    "Employee",
    "Caller",
    "Timecard",
]
