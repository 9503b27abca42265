"""
Tests for the pandas projections and time option lists.
"""

from datetime import date

from domain import Timecard
from utils import (
    END_TIME_OPTIONS,
    START_TIME_OPTIONS,
    end_options_after,
    entries_to_dataframe,
    format_week,
    hours_by_day,
    timecards_to_dataframe,
)


def test_time_options_are_quarter_hours_in_range():
    assert START_TIME_OPTIONS[0] == "04:00"
    assert START_TIME_OPTIONS[-1] == "20:45"
    assert END_TIME_OPTIONS[-1] == "21:45"
    assert "20:15" in START_TIME_OPTIONS
    assert all(o.split(":")[1] in ("00", "15", "30", "45") for o in END_TIME_OPTIONS)


def test_end_options_after():
    opts = end_options_after("20:00")
    assert opts[0] == "20:15"
    assert "20:00" not in opts


def test_entries_to_dataframe(monday, morning_draft, afternoon_draft):
    card = Timecard(id=1, employee_id=1, week_start_date=monday)
    assert entries_to_dataframe(card).empty
    card.add_entry(morning_draft)
    card.add_entry({**afternoon_draft, "day": "Tuesday"})

    df = entries_to_dataframe(card)
    assert list(df["Hours"]) == [4.0, 3.0]
    assert list(df["Day"]) == ["Monday", "Tuesday"]


def test_hours_by_day_orders_weekdays(monday, morning_draft, afternoon_draft):
    card = Timecard(id=1, employee_id=1, week_start_date=monday)
    card.add_entry({**afternoon_draft, "day": "Friday"})
    card.add_entry(morning_draft)
    card.add_entry(afternoon_draft)

    df = hours_by_day(card)
    assert list(df["Day"]) == ["Monday", "Friday"]
    assert list(df["Hours"]) == [7.0, 3.0]


def test_timecards_to_dataframe_sorted_by_week(morning_draft):
    older = Timecard(id=1, employee_id=1, week_start_date=date(2024, 1, 1))
    newer = Timecard(id=2, employee_id=1, week_start_date=date(2024, 1, 8))
    newer.add_entry(morning_draft)
    newer.complete()

    df = timecards_to_dataframe([older, newer])
    assert list(df["Week Start"]) == ["2024-01-08", "2024-01-01"]
    assert df.loc[0, "ISO Week"] == "2024-W02"
    assert df.loc[0, "Total Hours"] == 4.0
    assert bool(df.loc[0, "Completed"]) is True
    assert timecards_to_dataframe([]).empty


def test_format_week():
    assert format_week(date(2024, 3, 4)) == "March 4, 2024 – March 10, 2024"
