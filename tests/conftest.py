# File: tests/conftest.py
"""
Pytest configuration and shared fixtures.
Provides a small group calendar and wired services for all tests.
"""

import pytest
from datetime import date, datetime, time, timedelta
from pathlib import Path
import sys

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.availability.models import BusyInterval, DaySchedule, Member
from src.availability.service import AvailabilityService
from src.calendar.calendar_store import InMemoryCalendarStore, InMemoryGroupDirectory, load_fixture


# ==================== Calendar Fixtures ====================

@pytest.fixture
def meeting_day():
    """A date in the near future so that nothing is already over."""
    return date.today() + timedelta(days=1)


@pytest.fixture
def now(meeting_day):
    """08:00 on the meeting day."""
    return datetime.combine(meeting_day, time(8, 0))


@pytest.fixture
def members():
    return [Member("a", "Alice"), Member("b", "Bob"), Member("c", "Chloe")]


@pytest.fixture
def calendar_data(meeting_day):
    """Group 'team': a is busy 10-11, b is busy 14-15, c is free all day."""
    day = meeting_day.isoformat()
    return {
        "groups": {
            "team": [
                {"id": "a", "display_name": "Alice"},
                {"id": "b", "display_name": "Bob"},
                {"id": "c", "display_name": "Chloe"},
            ],
        },
        "events": {
            "a": [{"date": day, "start_time": "10:00", "end_time": "11:00", "title": "Standup"}],
            "b": [{"date": day, "start_time": "14:00", "end_time": "15:00", "title": "Dentist"}],
            "c": [],
        },
    }


@pytest.fixture
def store_and_directory(calendar_data):
    return load_fixture(calendar_data)


@pytest.fixture
def service(store_and_directory):
    store, directory = store_and_directory
    return AvailabilityService(store, directory)


@pytest.fixture
def day_schedule(meeting_day):
    """The 'team' calendar as a normalized DaySchedule."""
    return DaySchedule(
        date=meeting_day,
        per_member={
            "a": [BusyInterval("a", meeting_day, 600, 660)],
            "b": [BusyInterval("b", meeting_day, 840, 900)],
            "c": [],
        },
    )


@pytest.fixture
def make_service():
    """Factory for a service over an ad-hoc calendar.

    Groups default to one group 'g' holding every member in ``events``.
    """
    def _make(events, groups=None, unavailable=None, store=None, **kwargs):
        if groups is None:
            groups = {"g": [Member(member_id) for member_id in events]}
        store = store or InMemoryCalendarStore(events, unavailable)
        return AvailabilityService(store, InMemoryGroupDirectory(groups), **kwargs)
    return _make
