# app.py
# -----------------------------------------------
# ⏱️ Weekly timecards (Streamlit)
# -----------------------------------------------
# Requires: streamlit, sqlmodel, pandas, psycopg2-binary (when using Postgres)
# Identity comes from the hosting layer; locally a sidebar picker stands in for it.

import logging
import os

import streamlit as st

import config
from domain import DAYS_OF_WEEK, Caller, EntryDraft
from errors import TimecardError
from repository import TimecardStore
from services import TimecardService
from timecalc import current_week_monday, today_local
from utils import (
    START_TIME_OPTIONS,
    end_options_after,
    entries_to_dataframe,
    format_week,
    hours_by_day,
    timecards_to_dataframe,
)

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
TITLE = "Timecards"
st.set_page_config(page_title=TITLE, page_icon="⏱️", layout="centered")

DB_URL = config.database_url()

# Hosting must provide Postgres
if ("RENDER" in os.environ or "SPACE_ID" in os.environ or os.getenv("STREAMLIT_RUNTIME") == "cloud"):
    if DB_URL.startswith("sqlite"):
        st.error("DATABASE_URL (Postgres) is missing. Set it in the hosting environment.")


@st.cache_resource
def get_service(url: str) -> TimecardService:
    return TimecardService(TimecardStore(url, echo=False))


service = get_service(DB_URL)


# =========================
# State helpers
# =========================
def _flash_if_any():
    msg = st.session_state.pop("_flash_error", None)
    if msg:
        st.error(msg)
    msg = st.session_state.pop("_flash_success", None)
    if msg:
        st.success(msg)


def run_action(action, success: str | None = None):
    """Runs a service call, turning domain errors into a flash message."""
    try:
        action()
    except TimecardError as e:
        st.session_state["_flash_error"] = str(e)
    else:
        if success:
            st.session_state["_flash_success"] = success
    st.rerun()


def current_caller() -> Caller | None:
    employees = service.store.list_employees()
    if not employees:
        st.info("No employees yet.")
        return None
    labels = {f"{e.name} #{e.id}{' (manager)' if e.is_manager else ''}": e for e in employees}
    choice = st.sidebar.selectbox("Signed in as", list(labels))
    emp = labels[choice]
    return Caller(employee_id=emp.id, is_manager=emp.is_manager)


# =========================
# Employee dashboard
# =========================
def entry_form(caller: Caller, timecard_id: int, scope: str, employee_id: int | None = None):
    day = st.selectbox("Day", DAYS_OF_WEEK, key=f"day_{scope}_{timecard_id}")
    job = st.text_input("Job", key=f"job_{scope}_{timecard_id}")
    start = st.selectbox("Start", START_TIME_OPTIONS, key=f"start_{scope}_{timecard_id}")
    end = st.selectbox("End", end_options_after(start), key=f"end_{scope}_{timecard_id}")
    notes = st.text_input("Description", key=f"desc_{scope}_{timecard_id}")
    if st.button("Add entry", key=f"add_{scope}_{timecard_id}", use_container_width=True):
        draft = EntryDraft(day=day, job_name=job, start_time=start, end_time=end, description=notes)
        run_action(lambda: service.add_entry(caller, timecard_id, draft, employee_id=employee_id), "Entry added.")


def delete_button(caller: Caller, card, scope: str, employee_id: int | None = None):
    if not service.can_delete(caller, card):
        return
    if st.button("Delete timecard", key=f"del_{scope}_{card.id}", use_container_width=True):
        run_action(lambda: service.delete_timecard(caller, card.id, employee_id=employee_id),
                   "Timecard deleted.")


def render_timecard(caller: Caller, card, scope: str, employee_id: int | None = None):
    status = "✅ completed" if card.completed else "open"
    label = f"{format_week(card.week_start_date)} · {card.total_hours:.2f} h · {status}"
    with st.expander(label, expanded=False):
        df = entries_to_dataframe(card)
        if df.empty:
            st.caption("No entries yet.")
        else:
            st.dataframe(df.drop(columns=["ID"]), use_container_width=True, hide_index=True)
            st.bar_chart(hours_by_day(card), x="Day", y="Hours")

        if card.completed:
            delete_button(caller, card, scope, employee_id)
            return

        for e in card.entries:
            if st.button(f"Remove {e.day} · {e.job_name} ({e.start_time}–{e.end_time})",
                         key=f"rm_{scope}_{card.id}_{e.id}"):
                run_action(lambda e=e: service.remove_entry(caller, card.id, e.id, employee_id=employee_id))

        entry_form(caller, card.id, scope, employee_id=employee_id)
        if st.button("Complete timecard", key=f"done_{scope}_{card.id}", use_container_width=True):
            run_action(lambda: service.complete_timecard(caller, card.id, employee_id=employee_id),
                       "Timecard completed.")
        delete_button(caller, card, scope, employee_id)


def employee_page(caller: Caller):
    st.subheader(f"Welcome, {service.greeting_name(caller)}")
    today = today_local()
    exists = service.has_current_week_timecard(caller, today=today)
    if st.button("New Time Card", disabled=exists, use_container_width=True):
        run_action(lambda: service.create_timecard(caller, today=today),
                   f"Timecard for the week of {current_week_monday(today).isoformat()} created.")
    for card in service.list_timecards(caller):
        render_timecard(caller, card, scope="own")


# =========================
# Manager dashboard
# =========================
def manager_page(caller: Caller):
    st.subheader("Employee timecards")
    full = st.toggle("Show full history", value=False)
    limit = None if full else service.manager_recent_limit
    for emp, cards in service.manager_overview(caller, limit=limit):
        st.markdown(f"**{emp.name}**")
        if not cards:
            st.caption("No timecards.")
            continue
        st.dataframe(timecards_to_dataframe(cards), use_container_width=True, hide_index=True)
        for card in cards:
            render_timecard(caller, card, scope="team", employee_id=emp.id)


st.title(f"⏱️ {TITLE}")
_flash_if_any()
caller = current_caller()
if caller is not None:
    if caller.is_manager:
        tab_own, tab_team = st.tabs(["My timecards", "Team"])
        with tab_own:
            employee_page(caller)
        with tab_team:
            manager_page(caller)
    else:
        employee_page(caller)
