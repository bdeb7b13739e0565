"""
Calendar store and group directory collaborators
"""
import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.availability.errors import MemberDataUnavailable
from src.availability.models import Member, parse_date

logger = logging.getLogger(__name__)


class CalendarStore:
    """Source of members' calendar records"""

    def get_busy_intervals(self, member_id: str, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """
        Return raw records ``{date, start_time?, end_time?, all_day, end_date?}``
        touching [start_date, end_date]. Raise MemberDataUnavailable when the
        member's calendar cannot be read.
        """
        raise NotImplementedError


class GroupDirectory:
    """Resolves a group id to its members"""

    def get_members(self, group_id: str) -> List[Member]:
        raise NotImplementedError


class InMemoryCalendarStore(CalendarStore):
    """Calendar store backed by a dict of member id -> records"""

    def __init__(self, events: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 unavailable: Optional[Dict[str, str]] = None):
        self.events = {member_id: list(records) for member_id, records in (events or {}).items()}
        self.unavailable = dict(unavailable or {})

    def add_event(self, member_id: str, record: Dict[str, Any]) -> None:
        self.events.setdefault(member_id, []).append(record)

    def get_busy_intervals(self, member_id: str, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        if member_id in self.unavailable:
            raise MemberDataUnavailable(member_id, self.unavailable[member_id])

        records = []
        for record in self.events.get(member_id, []):
            if self._touches_range(record, start_date, end_date):
                records.append(dict(record))

        logger.info(f"📋 Loaded {len(records)} records for {member_id} ({start_date} to {end_date})")
        return records

    @staticmethod
    def _touches_range(record: Dict[str, Any], start_date: date, end_date: date) -> bool:
        # Malformed records are passed through so the normalizer can report them
        try:
            first = parse_date(record.get("date") or record.get("event_date"))
            last = parse_date(record.get("end_date")) if record.get("end_date") else first
        except (TypeError, ValueError):
            return True
        # A timed event may run past midnight into the first requested date
        return first <= end_date and last >= start_date - timedelta(days=1)


class InMemoryGroupDirectory(GroupDirectory):

    def __init__(self, groups: Optional[Dict[str, List[Member]]] = None):
        self.groups = {group_id: list(members) for group_id, members in (groups or {}).items()}

    def get_members(self, group_id: str) -> List[Member]:
        return list(self.groups.get(group_id, []))


def load_fixture(source: Union[str, Path, Dict[str, Any]]):
    """
    Build an in-memory store and directory from a JSON document:

        {"groups": {"g1": [{"id": "a", "display_name": "A"}]},
         "events": {"a": [{"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00"}]},
         "unavailable": {"b": "token expired"}}
    """
    if isinstance(source, dict):
        data = source
    else:
        with open(source, 'r', encoding='utf-8') as f:
            data = json.load(f)

    groups = {}
    for group_id, members in data.get("groups", {}).items():
        groups[group_id] = [
            Member(id=m["id"], display_name=m.get("display_name", "")) if isinstance(m, dict) else Member(id=str(m))
            for m in members
        ]

    store = InMemoryCalendarStore(data.get("events", {}), data.get("unavailable", {}))
    return store, InMemoryGroupDirectory(groups)
