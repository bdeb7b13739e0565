"""
Data models for group availability computation
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

MINUTES_PER_DAY = 1440


def parse_time_of_day(value: str) -> int:
    """Parse "HH:MM" (or "HH:MM:SS") into minutes since midnight.

    "24:00" is accepted and maps to 1440, the exclusive end of a day.
    """
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= minutes < 60) or not (0 <= hours <= 24) or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def format_minute(minute: int) -> str:
    """Format minutes since midnight as "HH:MM" """
    return f"{minute // 60:02d}:{minute % 60:02d}"


def parse_date(value: Any) -> date:
    """Parse a YYYY-MM-DD string (or pass through a date)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


_FLAG_VALUES = {"true": True, "1": True, "false": False, "0": False, "": False}


def _parse_flag(value: Any) -> bool:
    """Parse a boolean record field; JSON and form sources may send strings"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    key = str(value).strip().lower()
    if key not in _FLAG_VALUES:
        raise ValueError(f"Invalid boolean flag: {value!r}")
    return _FLAG_VALUES[key]


def iter_dates(start_date: date, end_date: date):
    """Yield every date from start_date to end_date inclusive"""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class Member:
    """Group member identity"""
    id: str
    display_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "display_name": self.display_name or self.id}


@dataclass
class RawEvent:
    """One calendar record as supplied by a calendar store."""
    date: date
    start_minute: Optional[int] = None
    end_minute: Optional[int] = None
    all_day: bool = False
    end_date: Optional[date] = None
    title: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawEvent":
        """Build from a store record, accepting database column names too"""
        event_date = data.get("date") or data.get("event_date")
        if not event_date:
            raise ValueError("Record has no date")

        start_time = data.get("start_time") or data.get("startTime")
        end_time = data.get("end_time") or data.get("endTime")
        end_date = data.get("end_date") or data.get("endDate")
        all_day = data.get("all_day", data.get("is_all_day", data.get("allDay", False)))

        return cls(
            date=parse_date(event_date),
            start_minute=parse_time_of_day(start_time) if start_time else None,
            end_minute=parse_time_of_day(end_time) if end_time else None,
            all_day=_parse_flag(all_day),
            end_date=parse_date(end_date) if end_date else None,
            title=data.get("title") or data.get("summary") or "",
        )


@dataclass(frozen=True)
class TimeRange:
    """Half-open [start_minute, end_minute) candidate interval"""
    start_minute: int
    end_minute: int

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute


@dataclass(frozen=True)
class BusyInterval:
    """Half-open [start_minute, end_minute) range when a member is unavailable"""
    member_id: str
    date: date
    start_minute: int
    end_minute: int

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "date": self.date.isoformat(),
            "start_time": format_minute(self.start_minute),
            "end_time": format_minute(self.end_minute),
        }


@dataclass
class DaySchedule:
    """Normalized busy intervals of every known member for one date"""
    date: date
    per_member: Dict[str, List[BusyInterval]] = field(default_factory=dict)


@dataclass
class FreeSegment:
    """Minimal segment between two boundary points with its free/busy split"""
    date: date
    start_minute: int
    end_minute: int
    free_members: frozenset
    busy_members: frozenset

    def __post_init__(self):
        if self.start_minute >= self.end_minute:
            raise ValueError("Segment start must be before its end")
        if self.free_members & self.busy_members:
            raise ValueError("A member cannot be both free and busy")


class SlotType(str, Enum):
    AVAILABLE = "available"
    NEGOTIABLE = "negotiable"


@dataclass
class AvailableSlot:
    """A time window where all (available) or some (negotiable) members are free.

    ``conflicting_members`` is only meaningful for negotiable slots; the
    constructor rejects any combination that breaks the free/busy partition.
    """
    date: date
    start_minute: int
    end_minute: int
    type: SlotType
    available_members: List[str] = field(default_factory=list)
    conflicting_members: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.start_minute >= self.end_minute:
            raise ValueError("Slot start must be before its end")
        if set(self.available_members) & set(self.conflicting_members):
            raise ValueError("Available and conflicting members must be disjoint")
        if self.type == SlotType.AVAILABLE and self.conflicting_members:
            raise ValueError("An available slot cannot have conflicting members")
        if self.type == SlotType.NEGOTIABLE and not (self.available_members and self.conflicting_members):
            raise ValueError("A negotiable slot needs both free and conflicting members")

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def start_time(self) -> str:
        return format_minute(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minute(self.end_minute)

    @property
    def sort_key(self) -> Tuple[date, int]:
        return self.date, self.start_minute

    def start_datetime(self) -> datetime:
        return datetime.combine(self.date, datetime.min.time()) + timedelta(minutes=self.start_minute)

    def end_datetime(self) -> datetime:
        return datetime.combine(self.date, datetime.min.time()) + timedelta(minutes=self.end_minute)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "type": self.type.value,
            "available_members": list(self.available_members),
        }
        if self.type == SlotType.NEGOTIABLE:
            data["conflicting_members"] = list(self.conflicting_members)
        return data


class RecommendationTier(str, Enum):
    BEST = "best"
    ALTERNATIVE = "alternative"


@dataclass
class Recommendation:
    slot: AvailableSlot
    score: float
    tier: RecommendationTier
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.slot.to_dict()
        data.update({
            "recommendation_type": self.tier.value,
            "reason": self.reason,
            "score": round(self.score, 2),
        })
        return data


@dataclass
class MemberFetchResult:
    """Outcome of fetching one member's calendar: records or a reason it failed"""
    member_id: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    unavailable_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.unavailable_reason is None

    @classmethod
    def success(cls, member_id: str, records: List[Dict[str, Any]]) -> "MemberFetchResult":
        return cls(member_id=member_id, records=list(records or []))

    @classmethod
    def unavailable(cls, member_id: str, reason: str) -> "MemberFetchResult":
        return cls(member_id=member_id, unavailable_reason=reason)


@dataclass
class AvailabilityResult:
    slots: List[AvailableSlot]
    start_date: date
    end_date: date
    member_count: int
    unavailable_members: Dict[str, str] = field(default_factory=dict)
    invalid_records: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.unavailable_members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slots": [slot.to_dict() for slot in self.slots],
            "member_count": self.member_count,
            "date_range": {
                "start": self.start_date.isoformat(),
                "end": self.end_date.isoformat(),
            },
            "partial": self.partial,
            "unavailable_members": sorted(self.unavailable_members),
            "invalid_records": len(self.invalid_records),
        }


@dataclass
class RecommendationResult:
    recommendations: List[Recommendation]
    degraded: bool = False
    total_available: int = 0
    total_negotiable: int = 0
    unavailable_members: Dict[str, str] = field(default_factory=dict)

    @property
    def partial(self) -> bool:
        return bool(self.unavailable_members)

    @property
    def best(self) -> List[Recommendation]:
        return [r for r in self.recommendations if r.tier == RecommendationTier.BEST]

    @property
    def alternatives(self) -> List[Recommendation]:
        return [r for r in self.recommendations if r.tier == RecommendationTier.ALTERNATIVE]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "total_available": self.total_available,
            "total_negotiable": self.total_negotiable,
            "degraded": self.degraded,
            "partial": self.partial,
        }
