"""
Interval normalization - turns raw calendar records into sorted, merged busy intervals
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config.settings import Config
from src.availability.errors import InvalidInterval
from src.availability.models import MINUTES_PER_DAY, BusyInterval, RawEvent, iter_dates

logger = logging.getLogger(__name__)


def merge_intervals(member_id: str, day: date, ranges: Iterable[Tuple[int, int]]) -> List[BusyInterval]:
    """Sort ranges by start and merge overlapping or touching ones in one sweep"""
    merged: List[List[int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    return [BusyInterval(member_id, day, start, end) for start, end in merged]


@dataclass
class NormalizationResult:
    intervals_by_date: Dict[date, List[BusyInterval]] = field(default_factory=dict)
    invalid: List[InvalidInterval] = field(default_factory=list)

    def intervals_on(self, day: date) -> List[BusyInterval]:
        return self.intervals_by_date.get(day, [])


class IntervalNormalizer:
    """
    Expands multi-day and all-day records, defaults missing end times,
    splits at midnight and merges each member's intervals per date.
    """

    def __init__(self, default_duration: Optional[int] = None):
        self.default_duration = Config.DEFAULT_EVENT_DURATION if default_duration is None else default_duration

    def normalize(self, member_id: str, records: Iterable[Any],
                  start_date: Optional[date] = None,
                  end_date: Optional[date] = None) -> NormalizationResult:
        """Normalize one member's records, optionally keeping only dates in [start_date, end_date]"""
        pieces: Dict[date, List[Tuple[int, int]]] = defaultdict(list)
        result = NormalizationResult()

        for record in records:
            try:
                for day, start, end in self._expand(member_id, record):
                    pieces[day].append((start, end))
            except InvalidInterval as e:
                logger.warning(f"⚠️  Dropping invalid record for {member_id}: {e.reason}")
                result.invalid.append(e)

        for day in sorted(pieces):
            if start_date and day < start_date:
                continue
            if end_date and day > end_date:
                continue
            result.intervals_by_date[day] = merge_intervals(member_id, day, pieces[day])

        return result

    def _expand(self, member_id: str, record: Any) -> List[Tuple[date, int, int]]:
        """Turn one record into (date, start, end) pieces that each fit inside a day"""
        try:
            event = record if isinstance(record, RawEvent) else RawEvent.from_dict(record)
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidInterval(f"Unparseable record: {e}", member_id, record)

        last_date = event.end_date or event.date
        if last_date < event.date:
            raise InvalidInterval("End date is before start date", member_id, record)

        # Records without a start time block the whole day, like all-day events
        if event.all_day or event.start_minute is None:
            return [(day, 0, MINUTES_PER_DAY) for day in iter_dates(event.date, last_date)]

        start = event.start_minute
        if start >= MINUTES_PER_DAY:
            raise InvalidInterval("Start time must be before midnight", member_id, record)

        span_days = (last_date - event.date).days
        if event.end_minute is not None:
            end = span_days * MINUTES_PER_DAY + event.end_minute
        elif span_days:
            end = (span_days + 1) * MINUTES_PER_DAY
        else:
            end = start + self.default_duration

        if end <= start:
            raise InvalidInterval("End time is not after start time", member_id, record)

        # Offsets are relative to midnight of the first date
        pieces = []
        day_index = start // MINUTES_PER_DAY
        cursor = start
        while cursor < end:
            day_start = day_index * MINUTES_PER_DAY
            piece_end = min(end, day_start + MINUTES_PER_DAY)
            pieces.append((event.date + timedelta(days=day_index), cursor - day_start, piece_end - day_start))
            cursor = piece_end
            day_index += 1

        return pieces
