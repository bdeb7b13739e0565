"""
Availability service - orchestrates one group availability or recommendation request
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple, Union

from config.settings import Config
from src.availability.aggregator import AvailabilityAggregator, build_day_schedules
from src.availability.conflicts import ConflictReport, check_event_conflicts, find_free_slots
from src.availability.errors import EmptyGroup, MemberDataUnavailable
from src.availability.models import (
    AvailabilityResult, AvailableSlot, Member, MemberFetchResult, RecommendationResult,
)
from src.availability.normalizer import IntervalNormalizer, NormalizationResult
from src.availability.recommender import SlotRecommender
from src.calendar.calendar_store import CalendarStore, GroupDirectory
from utils.meeting_logger import MeetingLogger
from utils.validators import RequestValidator

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Request-scoped pipeline: resolve members, fetch calendars concurrently,
    normalize, aggregate and rank. Nothing is kept between calls, so one
    instance can serve concurrent requests.
    """

    def __init__(self, calendar_store: CalendarStore, group_directory: GroupDirectory,
                 normalizer: Optional[IntervalNormalizer] = None,
                 recommender: Optional[SlotRecommender] = None,
                 max_workers: Optional[int] = None,
                 member_timeout: Optional[float] = None,
                 request_deadline: Optional[float] = None):
        self.config = Config()
        self.calendar_store = calendar_store
        self.group_directory = group_directory
        self.normalizer = normalizer or IntervalNormalizer()
        self.recommender = recommender or SlotRecommender()
        self.max_workers = max_workers or self.config.FETCH_MAX_WORKERS
        self.member_timeout = member_timeout or self.config.MEMBER_FETCH_TIMEOUT
        self.request_deadline = request_deadline or self.config.API_TIMEOUT

    def resolve_members(self, group_id: str) -> List[Member]:
        """Group members in directory order, without duplicates"""
        members = []
        seen = set()
        for member in self.group_directory.get_members(group_id):
            if member.id not in seen:
                seen.add(member.id)
                members.append(member)

        if not members:
            raise EmptyGroup(group_id)
        return members

    def fetch_member_calendars(self, members: List[Member], start_date: date,
                               end_date: date) -> List[MemberFetchResult]:
        """Fetch every member's records in parallel.

        A member whose fetch fails or exceeds its timeout (or the request
        deadline) comes back as an unavailable result instead of an error.
        """
        logger.info(f"🔄 Fetching calendars for {len(members)} members ({start_date} to {end_date})")

        deadline = time.monotonic() + self.request_deadline
        executor = ThreadPoolExecutor(max_workers=min(len(members), self.max_workers))
        results = []
        try:
            futures = {
                member.id: executor.submit(self.calendar_store.get_busy_intervals, member.id, start_date, end_date)
                for member in members
            }

            for member in members:
                future = futures[member.id]
                timeout = max(0.0, min(self.member_timeout, deadline - time.monotonic()))
                try:
                    records = future.result(timeout=timeout)
                    results.append(MemberFetchResult.success(member.id, records))
                except FutureTimeoutError:
                    future.cancel()
                    logger.warning(f"⏱️  Calendar fetch timed out for {member.id}")
                    results.append(MemberFetchResult.unavailable(member.id, "calendar fetch timed out"))
                except MemberDataUnavailable as e:
                    logger.warning(f"⚠️  {e}")
                    results.append(MemberFetchResult.unavailable(member.id, e.reason))
                except Exception as e:
                    logger.error(f"Failed to get events for {member.id}: {e}")
                    results.append(MemberFetchResult.unavailable(member.id, "calendar fetch failed"))
        finally:
            # Stragglers are abandoned rather than awaited
            executor.shutdown(wait=False, cancel_futures=True)

        return results

    def get_availability(self, group_id: str,
                         start_date: Optional[date] = None,
                         end_date: Optional[date] = None,
                         min_duration: Optional[int] = None,
                         work_start: Optional[int] = None,
                         work_end: Optional[int] = None,
                         today: Optional[date] = None) -> AvailabilityResult:
        """Classified available/negotiable slots of a group over a date range"""
        start, end = RequestValidator.resolve_date_range(
            start_date, end_date, today or date.today(),
            self.config.DEFAULT_RANGE_DAYS, self.config.MAX_RANGE_DAYS
        )
        default_start, default_end = self.config.work_window_minutes()
        work_start = default_start if work_start is None else work_start
        work_end = default_end if work_end is None else work_end
        RequestValidator.validate_work_window(work_start, work_end)

        members = self.resolve_members(group_id)
        logger.info(f"🗓️  Availability for group {group_id}: {len(members)} members, {start} to {end}")

        fetch_results = self.fetch_member_calendars(members, start, end)
        normalized, unavailable, invalid = self._normalize_all(fetch_results, start, end, work_start, work_end)

        known_members = [member for member in members if member.id in normalized]
        aggregator = AvailabilityAggregator(work_start, work_end, min_duration)
        schedules = build_day_schedules(known_members, normalized, start, end)
        slots = aggregator.aggregate(known_members, schedules)

        MeetingLogger.log_slot_summary(group_id, slots)

        return AvailabilityResult(
            slots=slots,
            start_date=start,
            end_date=end,
            member_count=len(members),
            unavailable_members=unavailable,
            invalid_records=invalid,
        )

    def get_recommendations(self, group_id: str,
                            date_range: Optional[Tuple[Optional[date], Optional[date]]] = None,
                            target_duration: Optional[int] = None,
                            now: Optional[datetime] = None) -> RecommendationResult:
        """Best and alternative meeting times for a group"""
        now = now or datetime.now()
        start_date, end_date = date_range or (None, None)

        availability = self.get_availability(
            group_id, start_date, end_date, min_duration=target_duration, today=now.date()
        )
        result = self.recommender.recommend(availability.slots, target_duration, now)
        result.unavailable_members = availability.unavailable_members
        return result

    def check_conflicts(self, member_id: str, day: date, start_time: Union[str, int],
                        duration: Optional[int] = None,
                        end_time: Optional[Union[str, int]] = None) -> ConflictReport:
        """Conflicts of a candidate event with a member's calendar before it is saved"""
        records = self.calendar_store.get_busy_intervals(
            member_id, day - timedelta(days=1), day + timedelta(days=1)
        )
        return check_event_conflicts(
            member_id, day, start_time, records,
            duration_minutes=duration, end_time=end_time, normalizer=self.normalizer
        )

    def find_member_free_slots(self, member_id: str, day: date,
                               duration: Optional[int] = None,
                               work_start: Optional[int] = None,
                               work_end: Optional[int] = None) -> List[AvailableSlot]:
        """Free gaps in a single member's day"""
        default_start, default_end = self.config.work_window_minutes()
        work_start = default_start if work_start is None else work_start
        work_end = default_end if work_end is None else work_end
        RequestValidator.validate_work_window(work_start, work_end)

        records = self.calendar_store.get_busy_intervals(member_id, day - timedelta(days=1), day)
        normalized = self.normalizer.normalize(member_id, records, day, day)
        return find_free_slots(
            member_id, normalized.intervals_on(day), day,
            duration or self.config.DEFAULT_MEETING_DURATION, work_start, work_end
        )

    def _normalize_all(self, fetch_results: List[MemberFetchResult], start: date, end: date,
                       work_start: int, work_end: int):
        normalized: Dict[str, NormalizationResult] = {}
        unavailable: Dict[str, str] = {}
        invalid = []

        for result in fetch_results:
            if not result.ok:
                unavailable[result.member_id] = result.unavailable_reason
                continue

            member_intervals = self.normalizer.normalize(result.member_id, result.records, start, end)
            normalized[result.member_id] = member_intervals
            invalid.extend(error.to_dict() for error in member_intervals.invalid)
            MeetingLogger.log_member_intervals(
                result.member_id, member_intervals.intervals_by_date, work_start, work_end
            )

        MeetingLogger.log_unavailable_members(unavailable)
        return normalized, unavailable, invalid
