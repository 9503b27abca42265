# services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Mapping, Tuple

import config
from domain import Caller, Employee, EntryDraft, Timecard
from errors import NotAuthorized
from repository import TimecardRepository, TimecardStore
from timecalc import current_week_monday, today_local

logger = logging.getLogger(__name__)

# manager_overview default: the configured recent window
RECENT = object()


class TimecardService:
    """
    Timecard operations as seen by the dashboards.

    Every call carries the authenticated `Caller`. Employees may only touch
    their own timecards; managers may act on anyone's and may delete completed
    timecards. Whether an employee may delete a completed timecard is a
    setting (`EMPLOYEE_CAN_DELETE_COMPLETED`).
    """

    def __init__(self, store: TimecardStore, employee_delete_completed: bool | None = None,
                 manager_recent_limit: int | None = None):
        self.store = store
        if employee_delete_completed is None:
            employee_delete_completed = config.EMPLOYEE_CAN_DELETE_COMPLETED
        self.employee_delete_completed = employee_delete_completed
        self.manager_recent_limit = (
            config.MANAGER_RECENT_LIMIT if manager_recent_limit is None else manager_recent_limit
        )

    def _repo(self, caller: Caller, employee_id: int | None) -> TimecardRepository:
        target = caller.employee_id if employee_id is None else employee_id
        if target != caller.employee_id and not caller.is_manager:
            logger.warning(f"Employee {caller.employee_id} tried to access timecards of {target}")
            raise NotAuthorized("You can only manage your own timecards.")
        allow_delete = caller.is_manager or self.employee_delete_completed
        return self.store.for_employee(target, allow_delete_completed=allow_delete)

    # GET timecards
    def list_timecards(self, caller: Caller, employee_id: int | None = None,
                       limit: int | None = None) -> List[Timecard]:
        return self._repo(caller, employee_id).list(limit=limit)

    def get_timecard(self, caller: Caller, timecard_id: int, employee_id: int | None = None) -> Timecard:
        return self._repo(caller, employee_id).get(timecard_id)

    # POST timecards
    def create_timecard(self, caller: Caller, week_start_date: date | None = None,
                        employee_id: int | None = None, today: date | None = None) -> Timecard:
        """Creates the timecard for `week_start_date`, or for the current week when omitted."""
        repo = self._repo(caller, employee_id)
        if week_start_date is None:
            week_start_date = current_week_monday(today or today_local())
        return repo.create(week_start_date)

    # PUT timecards/:id
    def update_timecard(self, caller: Caller, timecard_id: int, entries: Iterable[EntryDraft | Mapping],
                        total_hours: float | None = None, employee_id: int | None = None) -> Timecard:
        card = self._repo(caller, employee_id).update(timecard_id, entries)
        if total_hours is not None and abs(total_hours - card.total_hours) > 1e-9:
            logger.debug(
                f"Ignored client total {total_hours} for timecard {timecard_id}; recomputed {card.total_hours}"
            )
        return card

    def add_entry(self, caller: Caller, timecard_id: int, draft: EntryDraft | Mapping,
                  employee_id: int | None = None) -> Timecard:
        return self._repo(caller, employee_id).add_entry(timecard_id, draft)

    def remove_entry(self, caller: Caller, timecard_id: int, entry_id: str,
                     employee_id: int | None = None) -> Timecard:
        return self._repo(caller, employee_id).remove_entry(timecard_id, entry_id)

    def can_delete(self, caller: Caller, card: Timecard) -> bool:
        """Whether a delete action should be offered for `card`."""
        if not card.completed:
            return True
        return caller.is_manager or self.employee_delete_completed

    # DELETE timecards/:id
    def delete_timecard(self, caller: Caller, timecard_id: int, employee_id: int | None = None) -> None:
        self._repo(caller, employee_id).delete(timecard_id)

    # PUT timecards/:id/complete
    def complete_timecard(self, caller: Caller, timecard_id: int, employee_id: int | None = None) -> Timecard:
        return self._repo(caller, employee_id).complete(timecard_id)

    # GET timecards/check-current-week
    def has_current_week_timecard(self, caller: Caller, employee_id: int | None = None,
                                  today: date | None = None) -> bool:
        monday = current_week_monday(today or today_local())
        return self._repo(caller, employee_id).has_week(monday)

    def manager_overview(self, caller: Caller, limit=RECENT) -> List[Tuple[Employee, List[Timecard]]]:
        """Each employee with their most recent timecards. limit=None returns the full history."""
        if not caller.is_manager:
            raise NotAuthorized("Only managers can review all timecards.")
        if limit is RECENT:
            limit = self.manager_recent_limit
        return [
            (emp, self.store.for_employee(emp.id).list(limit=limit))
            for emp in self.store.list_employees()
        ]

    def greeting_name(self, caller: Caller) -> str:
        emp = self.store.get_employee(caller.employee_id)
        return emp.first_name if emp else ""


__all__ = ["RECENT", "TimecardService"]
