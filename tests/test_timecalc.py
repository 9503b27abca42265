"""
Tests for hours arithmetic and the Monday week key.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from errors import InvalidTimeFormat
from timecalc import current_week_monday, duration_hours, parse_hhmm, week_range


def test_duration_hours_basic():
    assert duration_hours("09:00", "17:30") == 8.5
    assert duration_hours("20:00", "20:15") == 0.25
    assert duration_hours("04:00", "21:45") == 17.75


def test_duration_hours_is_exact_minutes_over_sixty():
    for start_min in range(4 * 60, 20 * 60, 45):
        for end_min in range(start_min + 15, 22 * 60, 75):
            start = f"{start_min // 60:02d}:{start_min % 60:02d}"
            end = f"{end_min // 60:02d}:{end_min % 60:02d}"
            assert duration_hours(start, end) == (end_min - start_min) / 60


def test_duration_hours_negative_is_not_clamped():
    assert duration_hours("17:00", "09:00") == -8.0
    assert duration_hours("12:00", "12:00") == 0.0


@pytest.mark.parametrize("value", ["", "9", "24:00", "12:60", "12:5", "ab:cd", "12:00:00", "-1:30", None, 930])
def test_invalid_time_format(value):
    with pytest.raises(InvalidTimeFormat):
        duration_hours(value, "12:00")


def test_parse_hhmm_accepts_single_digit_hour():
    assert parse_hhmm("9:05") == (9, 5)
    assert parse_hhmm(" 23:59 ") == (23, 59)


def test_current_week_monday_every_day_of_a_week():
    monday = date(2024, 3, 4)
    for offset in range(7):
        assert current_week_monday(monday + timedelta(days=offset)) == monday


def test_current_week_monday_sunday_goes_back_six_days():
    assert current_week_monday(date(2024, 3, 10)) == date(2024, 3, 4)


def test_current_week_monday_properties_over_a_year():
    d = date(2023, 12, 20)
    for _ in range(400):
        monday = current_week_monday(d)
        assert monday.weekday() == 0
        assert 0 <= (d - monday).days <= 6
        d += timedelta(days=1)


def test_current_week_monday_matches_sunday_zero_convention():
    """Same answer as the getDay()-style rule where Sunday is 0."""
    d = date(2024, 1, 1)
    for _ in range(30):
        js_day = (d.weekday() + 1) % 7
        expected = d - timedelta(days=6 if js_day == 0 else js_day - 1)
        assert current_week_monday(d) == expected
        d += timedelta(days=1)


def test_current_week_monday_drops_time_of_day():
    assert current_week_monday(datetime(2024, 3, 6, 23, 59)) == date(2024, 3, 4)


def test_current_week_monday_uses_reference_timezone_for_aware_datetimes():
    # Monday 02:00 UTC is still Sunday evening in New York
    moment = datetime(2024, 3, 11, 2, 0, tzinfo=timezone.utc)
    assert current_week_monday(moment, tz=ZoneInfo("America/New_York")) == date(2024, 3, 4)
    assert current_week_monday(moment, tz=ZoneInfo("UTC")) == date(2024, 3, 11)


def test_week_range():
    assert week_range(date(2024, 3, 4)) == (date(2024, 3, 4), date(2024, 3, 10))
