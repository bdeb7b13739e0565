"""
Availability aggregation - intersects members' busy intervals into classified slots
"""
import logging
from bisect import bisect_right
from datetime import date
from typing import Dict, Iterable, List, Optional

from config.settings import Config
from src.availability.models import (
    MINUTES_PER_DAY, AvailableSlot, BusyInterval, DaySchedule, FreeSegment, Member, SlotType, iter_dates,
)
from src.availability.normalizer import NormalizationResult

logger = logging.getLogger(__name__)


def build_day_schedules(members: List[Member], normalized: Dict[str, NormalizationResult],
                        start_date: date, end_date: date) -> List[DaySchedule]:
    """Assemble one DaySchedule per date from each known member's normalized intervals"""
    schedules = []
    for day in iter_dates(start_date, end_date):
        per_member = {
            member.id: normalized[member.id].intervals_on(day)
            for member in members
            if member.id in normalized
        }
        schedules.append(DaySchedule(date=day, per_member=per_member))
    return schedules


class AvailabilityAggregator:
    """
    Boundary-sweep intersection of member calendars.

    For every date the sweep only visits interval endpoints and the
    working-hours bounds, so each minimal segment is either fully inside or
    fully outside any given member's busy interval.
    """

    def __init__(self, work_start: Optional[int] = None, work_end: Optional[int] = None,
                 minimum_slot_duration: Optional[int] = None):
        default_start, default_end = Config.work_window_minutes()
        self.work_start = default_start if work_start is None else work_start
        self.work_end = default_end if work_end is None else work_end
        self.minimum_slot_duration = (
            Config.MIN_SLOT_DURATION if minimum_slot_duration is None else minimum_slot_duration
        )

        if not 0 <= self.work_start < self.work_end <= MINUTES_PER_DAY:
            raise ValueError(f"Invalid working hours window: {self.work_start}-{self.work_end}")
        if self.minimum_slot_duration < 0:
            raise ValueError("Minimum slot duration cannot be negative")

    def aggregate(self, members: List[Member], day_schedules: Iterable[DaySchedule]) -> List[AvailableSlot]:
        """Slots for every date, concatenated in date order"""
        slots: List[AvailableSlot] = []
        for schedule in sorted(day_schedules, key=lambda s: s.date):
            slots.extend(self.aggregate_day(members, schedule))
        return slots

    def aggregate_day(self, members: List[Member], schedule: DaySchedule) -> List[AvailableSlot]:
        member_ids = [member.id for member in members]
        if not member_ids:
            return []

        segments = self._classify_segments(member_ids, schedule)
        merged = self._merge_segments(segments)

        slots = []
        for segment in merged:
            if segment.end_minute - segment.start_minute < self.minimum_slot_duration:
                continue
            slots.append(self._to_slot(member_ids, segment))

        logger.debug(f"📅 {schedule.date}: {len(segments)} segments, {len(merged)} merged, {len(slots)} slots")
        return slots

    def _boundaries(self, schedule: DaySchedule) -> List[int]:
        points = {self.work_start, self.work_end}
        for intervals in schedule.per_member.values():
            for interval in intervals:
                for point in (interval.start_minute, interval.end_minute):
                    if self.work_start < point < self.work_end:
                        points.add(point)
        return sorted(points)

    def _classify_segments(self, member_ids: List[str], schedule: DaySchedule) -> List[FreeSegment]:
        boundaries = self._boundaries(schedule)
        everyone = frozenset(member_ids)
        intervals = {member_id: schedule.per_member.get(member_id, []) for member_id in member_ids}
        starts = {member_id: [i.start_minute for i in intervals[member_id]] for member_id in member_ids}

        segments = []
        for seg_start, seg_end in zip(boundaries, boundaries[1:]):
            busy = frozenset(
                member_id for member_id in member_ids
                if self._is_busy(intervals[member_id], starts[member_id], seg_start, seg_end)
            )
            free = everyone - busy
            # Nobody free: no slot for this segment
            if not free:
                continue
            segments.append(FreeSegment(schedule.date, seg_start, seg_end, free, busy))

        return segments

    @staticmethod
    def _is_busy(intervals: List[BusyInterval], starts: List[int], seg_start: int, seg_end: int) -> bool:
        index = bisect_right(starts, seg_start) - 1
        return index >= 0 and intervals[index].end_minute >= seg_end

    @staticmethod
    def _merge_segments(segments: List[FreeSegment]) -> List[FreeSegment]:
        merged: List[FreeSegment] = []
        for segment in segments:
            previous = merged[-1] if merged else None
            if (previous is not None
                    and previous.end_minute == segment.start_minute
                    and previous.free_members == segment.free_members
                    and previous.busy_members == segment.busy_members):
                previous.end_minute = segment.end_minute
            else:
                merged.append(FreeSegment(segment.date, segment.start_minute, segment.end_minute,
                                          segment.free_members, segment.busy_members))
        return merged

    @staticmethod
    def _to_slot(member_ids: List[str], segment: FreeSegment) -> AvailableSlot:
        available = [m for m in member_ids if m in segment.free_members]
        conflicting = [m for m in member_ids if m in segment.busy_members]
        slot_type = SlotType.NEGOTIABLE if conflicting else SlotType.AVAILABLE
        return AvailableSlot(
            date=segment.date,
            start_minute=segment.start_minute,
            end_minute=segment.end_minute,
            type=slot_type,
            available_members=available,
            conflicting_members=conflicting,
        )
