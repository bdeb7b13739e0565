"""
Specialized logging utilities for group availability requests
"""
import logging
from datetime import date
from typing import Dict, List

from src.availability.models import AvailableSlot, BusyInterval, SlotType, format_minute

logger = logging.getLogger(__name__)


class MeetingLogger:
    """Specialized logger for availability computation steps"""

    @staticmethod
    def log_member_intervals(member_id: str, intervals_by_date: Dict[date, List[BusyInterval]],
                             work_start: int, work_end: int):
        """Log a member's normalized busy intervals before aggregation"""

        total = sum(len(intervals) for intervals in intervals_by_date.values())
        logger.info(f"📋 MEMBER ANALYSIS - {member_id}")
        logger.info(f"   📊 Busy intervals: {total} across {len(intervals_by_date)} day(s)")

        if not total:
            logger.info(f"   ✅ No busy time found for {member_id}")
            return

        for day, intervals in sorted(intervals_by_date.items()):
            inside = [i for i in intervals if i.start_minute < work_end and i.end_minute > work_start]
            outside = len(intervals) - len(inside)
            logger.debug(f"   📅 {day}: {len(inside)} in working hours, {outside} outside")
            for interval in inside:
                logger.debug(f"      🏢 {format_minute(interval.start_minute)}-{format_minute(interval.end_minute)}")

    @staticmethod
    def log_unavailable_members(unavailable: Dict[str, str]):
        """Log members excluded from the computation"""
        if not unavailable:
            return

        logger.warning(f"⚠️  {len(unavailable)} member(s) excluded, result is partial:")
        for member_id, reason in sorted(unavailable.items()):
            logger.warning(f"   ❓ {member_id}: {reason}")

    @staticmethod
    def log_slot_summary(group_id: str, slots: List[AvailableSlot]):
        """Log the classified slots of a group request"""
        available = [s for s in slots if s.type == SlotType.AVAILABLE]
        negotiable = [s for s in slots if s.type == SlotType.NEGOTIABLE]

        logger.info(f"📊 SLOT SUMMARY for group {group_id}:")
        logger.info(f"   ✅ Available slots: {len(available)}")
        logger.info(f"   🤝 Negotiable slots: {len(negotiable)}")

        for slot in slots[:10]:
            marker = "✅" if slot.type == SlotType.AVAILABLE else "🤝"
            details = f" (conflicting: {', '.join(slot.conflicting_members)})" if slot.conflicting_members else ""
            logger.debug(f"   {marker} {slot.date} {slot.start_time}-{slot.end_time}{details}")
