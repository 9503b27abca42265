# timecalc.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from config import TZ
from errors import InvalidTimeFormat


def parse_hhmm(s: str) -> tuple[int, int]:
    """Parses 'HH:MM' (or 'H:MM') into (hour, minute)."""
    if not isinstance(s, str):
        raise InvalidTimeFormat(s)
    parts = s.strip().split(":")
    if len(parts) != 2:
        raise InvalidTimeFormat(s)
    hh, mm = parts
    if not (hh.isascii() and hh.isdigit() and mm.isascii() and mm.isdigit()):
        raise InvalidTimeFormat(s)
    if len(hh) not in (1, 2) or len(mm) != 2:
        raise InvalidTimeFormat(s)
    hour, minute = int(hh), int(mm)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidTimeFormat(s)
    return hour, minute


def minutes_since_midnight(s: str) -> int:
    hour, minute = parse_hhmm(s)
    return hour * 60 + minute


def duration_hours(start: str, end: str) -> float:
    """Signed hours between two same-day times. Negative if end precedes start."""
    return (minutes_since_midnight(end) - minutes_since_midnight(start)) / 60.0


def today_local(tz: ZoneInfo | None = None) -> date:
    return datetime.now(tz or TZ).date()


def current_week_monday(today: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Monday of the week containing `today`, as a date (time of day dropped)."""
    if isinstance(today, datetime):
        if today.tzinfo is not None:
            today = today.astimezone(tz or TZ)
        today = today.date()
    # isoweekday: Monday=1 ... Sunday=7, so Sunday goes back 6 days
    return today - timedelta(days=today.isoweekday() - 1)


def week_range(monday: date) -> tuple[date, date]:
    return monday, monday + timedelta(days=6)


__all__ = [
    "parse_hhmm",
    "minutes_since_midnight",
    "duration_hours",
    "today_local",
    "current_week_monday",
    "week_range",
]
