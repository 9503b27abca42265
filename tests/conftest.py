"""
Pytest configuration: a throwaway SQLite store per test plus a few callers.
"""

import os
import sys
from datetime import date

import pytest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain import Caller
from repository import TimecardStore
from services import TimecardService


@pytest.fixture
def store(tmp_path):
    return TimecardStore(f"sqlite:///{(tmp_path / 'timecards.db').as_posix()}")


@pytest.fixture
def employee(store):
    return store.add_employee("Dana Reyes")


@pytest.fixture
def other_employee(store):
    return store.add_employee("Sam Okafor")


@pytest.fixture
def manager(store):
    return store.add_employee("Morgan Lee", is_manager=True)


@pytest.fixture
def employee_caller(employee):
    return Caller(employee_id=employee.id)


@pytest.fixture
def manager_caller(manager):
    return Caller(employee_id=manager.id, is_manager=True)


@pytest.fixture
def service(store):
    return TimecardService(store, employee_delete_completed=False, manager_recent_limit=3)


@pytest.fixture
def monday():
    return date(2024, 3, 4)


@pytest.fixture
def morning_draft():
    return {
        "day": "Monday",
        "jobName": "Site A",
        "startTime": "08:00",
        "endTime": "12:00",
        "description": "setup",
    }


@pytest.fixture
def afternoon_draft():
    return {
        "day": "Monday",
        "jobName": "Site A",
        "startTime": "13:00",
        "endTime": "16:00",
        "description": "framing",
    }
