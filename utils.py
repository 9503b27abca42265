# utils.py
import pandas as pd
from datetime import date
from typing import Iterable
from domain import DAYS_OF_WEEK, Timecard
from timecalc import week_range


def time_options(start_hour: int, end_hour: int, step_min: int = 15) -> list[str]:
    """Every step from start_hour:00 through end_hour:45 (for 15-minute steps)."""
    opts = []
    for h in range(start_hour, end_hour + 1):
        for m in range(0, 60, step_min):
            opts.append(f"{h:02d}:{m:02d}")
    return opts


START_TIME_OPTIONS = time_options(4, 20)
END_TIME_OPTIONS = time_options(4, 21)


def end_options_after(start: str) -> list[str]:
    """End times strictly after the chosen start."""
    if start not in END_TIME_OPTIONS:
        return END_TIME_OPTIONS
    return END_TIME_OPTIONS[END_TIME_OPTIONS.index(start) + 1:]


def format_week(monday: date) -> str:
    d1, d2 = week_range(monday)
    return f"{d1.strftime('%B')} {d1.day}, {d1.year} – {d2.strftime('%B')} {d2.day}, {d2.year}"


def entries_to_dataframe(timecard: Timecard) -> pd.DataFrame:
    rows = []
    for e in timecard.entries:
        rows.append({
            "ID": e.id,
            "Day": e.day,
            "Job": e.job_name,
            "Start": e.start_time,
            "End": e.end_time,
            "Hours": round(e.hours, 2),
            "Description": e.description,
        })
    return pd.DataFrame(rows, columns=["ID", "Day", "Job", "Start", "End", "Hours", "Description"])


def timecards_to_dataframe(timecards: Iterable[Timecard]) -> pd.DataFrame:
    rows = []
    for t in timecards:
        year, week = t.iso_year_week
        rows.append({
            "ID": t.id,
            "Week Start": t.week_start_date.isoformat(),
            "ISO Week": f"{year}-W{week:02d}",
            "Entries": len(t.entries),
            "Total Hours": round(t.total_hours, 2),
            "Completed": t.completed,
        })
    df = pd.DataFrame(rows, columns=["ID", "Week Start", "ISO Week", "Entries", "Total Hours", "Completed"])
    if not df.empty:
        df = df.sort_values(["Week Start"], ascending=False).reset_index(drop=True)
    return df


def hours_by_day(timecard: Timecard) -> pd.DataFrame:
    """Hours per weekday, Monday first; days without entries are left out."""
    df = entries_to_dataframe(timecard)
    if df.empty:
        return pd.DataFrame(columns=["Day", "Hours"])
    totals = df.groupby("Day", sort=False)["Hours"].sum()
    ordered = [d for d in DAYS_OF_WEEK if d in totals.index]
    return pd.DataFrame({"Day": ordered, "Hours": [float(totals[d]) for d in ordered]})
