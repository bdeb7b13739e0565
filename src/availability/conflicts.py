"""
Single-member conflict checking and free-gap lookup
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from config.settings import Config
from src.availability.errors import InvalidRequest
from src.availability.models import (
    MINUTES_PER_DAY, AvailableSlot, BusyInterval, SlotType, TimeRange, format_minute, parse_time_of_day,
)
from src.availability.normalizer import IntervalNormalizer

logger = logging.getLogger(__name__)


def conflicts(target: TimeRange, existing: Iterable[BusyInterval]) -> List[BusyInterval]:
    """Return the intervals in ``existing`` that strictly overlap ``target``.

    Intervals are half-open, so ranges that only touch at an endpoint
    (``target.end_minute == interval.start_minute`` or vice versa) are not
    conflicts.
    """
    return [
        interval for interval in existing
        if target.start_minute < interval.end_minute and target.end_minute > interval.start_minute
    ]


@dataclass
class ConflictReport:
    member_id: str
    date: date
    target: TimeRange
    conflicts: List[BusyInterval] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)

    @property
    def message(self) -> str:
        if self.has_conflict:
            return f"Conflict with {len(self.conflicts)} event(s) at that time."
        return "No conflicting events at that time."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "date": self.date.isoformat(),
            "start_time": format_minute(self.target.start_minute),
            "end_time": format_minute(min(self.target.end_minute, MINUTES_PER_DAY)),
            "has_conflict": self.has_conflict,
            "conflicts": [interval.to_dict() for interval in self.conflicts],
            "message": self.message,
        }


def _to_minute(value: Union[str, int]) -> int:
    if isinstance(value, int):
        return value
    try:
        return parse_time_of_day(value)
    except ValueError as e:
        raise InvalidRequest(str(e))


def check_event_conflicts(member_id: str, day: date, start_time: Union[str, int],
                          records: Iterable[Any],
                          duration_minutes: Optional[int] = None,
                          end_time: Optional[Union[str, int]] = None,
                          normalizer: Optional[IntervalNormalizer] = None) -> ConflictReport:
    """
    Check a candidate event against a member's existing calendar records
    before it is saved. The records are normalized first so multi-day and
    all-day events are taken into account. A candidate running past
    midnight is also checked against the next day.
    """
    normalizer = normalizer or IntervalNormalizer()

    start = _to_minute(start_time)
    if end_time is not None:
        end = _to_minute(end_time)
    else:
        end = start + (duration_minutes or Config.DEFAULT_EVENT_DURATION)

    if start >= MINUTES_PER_DAY or end <= start:
        raise InvalidRequest("Candidate event must start before midnight and end after it starts")

    next_day = day + timedelta(days=1)
    normalized = normalizer.normalize(member_id, records, day, next_day)

    found = conflicts(TimeRange(start, min(end, MINUTES_PER_DAY)), normalized.intervals_on(day))
    if end > MINUTES_PER_DAY:
        found += conflicts(TimeRange(0, end - MINUTES_PER_DAY), normalized.intervals_on(next_day))

    report = ConflictReport(member_id=member_id, date=day, target=TimeRange(start, end), conflicts=found)
    logger.info(f"🔍 Conflict check for {member_id} on {day}: {report.message}")
    return report


def find_free_slots(member_id: str, intervals: List[BusyInterval], day: date,
                    required_duration: int, work_start: int, work_end: int) -> List[AvailableSlot]:
    """Free gaps of at least ``required_duration`` minutes inside the work window.

    ``intervals`` must be the member's normalized (sorted, merged) intervals
    for ``day``.
    """
    free_slots = []
    cursor = work_start

    for interval in intervals:
        if interval.end_minute <= cursor:
            continue
        if interval.start_minute >= work_end:
            break
        gap = interval.start_minute - cursor
        if gap > 0 and gap >= required_duration:
            free_slots.append(AvailableSlot(day, cursor, interval.start_minute, SlotType.AVAILABLE, [member_id]))
        cursor = max(cursor, interval.end_minute)

    if work_end > cursor and work_end - cursor >= required_duration:
        free_slots.append(AvailableSlot(day, cursor, work_end, SlotType.AVAILABLE, [member_id]))

    return free_slots
