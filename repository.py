# repository.py
from __future__ import annotations

import logging
import threading
import weakref
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Mapping

from sqlalchemy import UniqueConstraint, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, Field, Session, create_engine, select

from domain import Employee, EntryDraft, EntryValidator, Timecard, TimecardEntry
from errors import DuplicateWeek, TimecardLocked, TimecardNotFound
from timecalc import current_week_monday

logger = logging.getLogger(__name__)


class EmployeeDB(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
    is_manager: bool = False


class TimecardDB(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("employee_id", "week_start_date", name="uq_timecard_employee_week"),
        # ids are never reused after a delete
        {"sqlite_autoincrement": True},
    )

    id: int | None = Field(default=None, primary_key=True)
    employee_id: int = Field(index=True)
    week_start_date: date = Field(index=True)
    total_hours: float = 0.0
    completed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TimecardEntryDB(SQLModel, table=True):
    # autoincrement pk keeps insertion order within a timecard
    pk: int | None = Field(default=None, primary_key=True)
    entry_id: str = Field(index=True)
    timecard_id: int = Field(index=True, foreign_key="timecarddb.id")
    day: str
    job_name: str
    start_time: str
    end_time: str
    description: str = ""


def build_engine(db_url: str, echo: bool = False):
    is_sqlite = db_url.startswith("sqlite")
    kwargs = {
        "echo": echo,
        "pool_pre_ping": True,
        "connect_args": {},
    }
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Serverless PG (Neon/Supabase): no local pool, short connect timeout
        kwargs["poolclass"] = NullPool
        kwargs["connect_args"] = {"connect_timeout": 10}
        if "sslmode=" not in db_url:
            db_url += ("&" if "?" in db_url else "?") + "sslmode=require"
    return create_engine(db_url, **kwargs)


class LockRegistry:
    """Hands out one threading.Lock per key (timecard id, or employee-week).

    Entries live only while some caller still holds the lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def get(self, key) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def discard(self, key) -> None:
        with self._guard:
            self._locks.pop(key, None)

    def __contains__(self, key) -> bool:
        with self._guard:
            return key in self._locks


def _entry_to_domain(r: TimecardEntryDB) -> TimecardEntry:
    return TimecardEntry(
        id=r.entry_id,
        day=r.day,
        job_name=r.job_name,
        start_time=r.start_time,
        end_time=r.end_time,
        description=r.description or "",
    )


def _employee_to_domain(r: EmployeeDB) -> Employee:
    return Employee(id=r.id, name=r.name, is_manager=r.is_manager)


class TimecardRepository:
    """One employee's timecards. At most one timecard per week."""

    def __init__(self, engine, employee_id: int, locks: LockRegistry | None = None,
                 allow_delete_completed: bool = True, validator: EntryValidator | None = None):
        self.engine = engine
        self.employee_id = employee_id
        self.locks = locks or LockRegistry()
        self.allow_delete_completed = allow_delete_completed
        self.validator = validator or EntryValidator()

    # ----- loading / saving -----

    def _entry_rows(self, session: Session, timecard_id: int) -> List[TimecardEntryDB]:
        return session.exec(
            select(TimecardEntryDB)
            .where(TimecardEntryDB.timecard_id == timecard_id)
            .order_by(TimecardEntryDB.pk)
        ).all()

    def _to_domain(self, session: Session, row: TimecardDB) -> Timecard:
        return Timecard(
            id=row.id,
            employee_id=row.employee_id,
            week_start_date=row.week_start_date,
            entries=[_entry_to_domain(r) for r in self._entry_rows(session, row.id)],
            completed=row.completed,
            created_at=row.created_at,
        )

    def _load(self, session: Session, timecard_id: int) -> tuple[TimecardDB, Timecard]:
        row = session.get(TimecardDB, timecard_id)
        if row is None or row.employee_id != self.employee_id:
            raise TimecardNotFound(timecard_id)
        return row, self._to_domain(session, row)

    def _save(self, session: Session, row: TimecardDB, card: Timecard) -> None:
        for old in self._entry_rows(session, row.id):
            session.delete(old)
        for e in card.entries:
            session.add(TimecardEntryDB(
                entry_id=e.id,
                timecard_id=row.id,
                day=e.day,
                job_name=e.job_name,
                start_time=e.start_time,
                end_time=e.end_time,
                description=e.description,
            ))
        row.total_hours = card.total_hours
        row.completed = card.completed
        session.add(row)
        session.commit()

    def _mutate(self, timecard_id: int, action: Callable[[Timecard], object]) -> Timecard:
        with self.locks.get(("timecard", timecard_id)):
            with Session(self.engine) as session:
                row, card = self._load(session, timecard_id)
                try:
                    action(card)
                except TimecardLocked:
                    logger.warning(f"Rejected change to completed timecard {timecard_id}")
                    raise
                self._save(session, row, card)
                return card

    # ----- queries -----

    def list(self, limit: int | None = None) -> List[Timecard]:
        """Most recently created first."""
        with Session(self.engine) as session:
            stmt = (
                select(TimecardDB)
                .where(TimecardDB.employee_id == self.employee_id)
                .order_by(TimecardDB.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return [self._to_domain(session, r) for r in session.exec(stmt).all()]

    def get(self, timecard_id: int) -> Timecard:
        with Session(self.engine) as session:
            return self._load(session, timecard_id)[1]

    def find_by_week(self, week_start_date: date) -> Timecard | None:
        week = current_week_monday(week_start_date)
        with Session(self.engine) as session:
            row = session.exec(
                select(TimecardDB).where(
                    TimecardDB.employee_id == self.employee_id,
                    TimecardDB.week_start_date == week,
                )
            ).first()
            return self._to_domain(session, row) if row else None

    def has_week(self, week_start_date: date) -> bool:
        return self.find_by_week(week_start_date) is not None

    # ----- commands -----

    def create(self, week_start_date: date) -> Timecard:
        week = current_week_monday(week_start_date)
        with self.locks.get(("week", self.employee_id, week)):
            with Session(self.engine) as session:
                existing = session.exec(
                    select(TimecardDB).where(
                        TimecardDB.employee_id == self.employee_id,
                        TimecardDB.week_start_date == week,
                    )
                ).first()
                if existing is not None:
                    logger.warning(f"Employee {self.employee_id} already has a timecard for {week}")
                    raise DuplicateWeek(week)

                row = TimecardDB(employee_id=self.employee_id, week_start_date=week)
                session.add(row)
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    logger.warning(f"Concurrent create for employee {self.employee_id}, week {week}")
                    raise DuplicateWeek(week) from None
                session.refresh(row)
                logger.info(f"Created timecard {row.id} for employee {self.employee_id}, week {week}")
                return self._to_domain(session, row)

    def update(self, timecard_id: int, entries: Iterable[EntryDraft | Mapping]) -> Timecard:
        drafts = list(entries)
        return self._mutate(timecard_id, lambda c: c.replace_entries(drafts, self.validator))

    def add_entry(self, timecard_id: int, draft: EntryDraft | Mapping) -> Timecard:
        return self._mutate(timecard_id, lambda c: c.add_entry(draft, self.validator))

    def remove_entry(self, timecard_id: int, entry_id: str) -> Timecard:
        return self._mutate(timecard_id, lambda c: c.remove_entry(entry_id))

    def complete(self, timecard_id: int) -> Timecard:
        card = self._mutate(timecard_id, lambda c: c.complete())
        logger.info(f"Timecard {timecard_id} marked completed")
        return card

    def delete(self, timecard_id: int) -> None:
        with self.locks.get(("timecard", timecard_id)):
            with Session(self.engine) as session:
                row, card = self._load(session, timecard_id)
                if card.completed and not self.allow_delete_completed:
                    logger.warning(f"Refused to delete completed timecard {timecard_id}")
                    raise TimecardLocked(timecard_id)
                for e in self._entry_rows(session, row.id):
                    session.delete(e)
                session.flush()
                session.delete(row)
                session.commit()
        self.locks.discard(("timecard", timecard_id))
        logger.info(f"Deleted timecard {timecard_id} of employee {self.employee_id}")


class TimecardStore:
    """Owns the engine and hands out per-employee repositories. Hosted deployments pass a Postgres URL."""

    def __init__(self, url: str = "sqlite:///timecards.db", echo: bool = False):
        self.primary_url = url
        self.engine = build_engine(url, echo=echo)
        self.locks = LockRegistry()

        # Postgres: fail fast if unreachable
        if not url.startswith("sqlite"):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("select 1"))
            except SQLAlchemyError as e:
                raise RuntimeError(f"Could not connect to Postgres: {e}") from e

        SQLModel.metadata.create_all(self.engine)

    def for_employee(self, employee_id: int, allow_delete_completed: bool = True) -> TimecardRepository:
        return TimecardRepository(
            self.engine,
            employee_id,
            locks=self.locks,
            allow_delete_completed=allow_delete_completed,
        )

    def add_employee(self, name: str, is_manager: bool = False) -> Employee:
        with Session(self.engine) as session:
            row = EmployeeDB(name=name, is_manager=is_manager)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _employee_to_domain(row)

    def get_employee(self, employee_id: int) -> Employee | None:
        with Session(self.engine) as session:
            row = session.get(EmployeeDB, employee_id)
            return _employee_to_domain(row) if row else None

    def list_employees(self) -> List[Employee]:
        with Session(self.engine) as session:
            rows = session.exec(select(EmployeeDB).order_by(EmployeeDB.name, EmployeeDB.id)).all()
            return [_employee_to_domain(r) for r in rows]


__all__ = [
    "EmployeeDB",
    "TimecardDB",
    "TimecardEntryDB",
    "LockRegistry",
    "TimecardRepository",
    "TimecardStore",
    "build_engine",
]
