"""
Validation utilities for availability requests
"""
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple

from src.availability.errors import InvalidRequest, RangeTooLarge
from src.availability.models import MINUTES_PER_DAY, parse_time_of_day


class RequestValidator:
    """Validator for incoming availability and recommendation requests"""

    @staticmethod
    def validate_date_format(date_str: str, format_str: str = "%Y-%m-%d") -> bool:
        """Validate date format"""
        try:
            datetime.strptime(date_str, format_str)
            return True
        except (TypeError, ValueError):
            return False

    @staticmethod
    def parse_date(value: Any, field: str) -> Optional[date]:
        """Parse an optional YYYY-MM-DD parameter"""
        if value in (None, ""):
            return None
        if isinstance(value, date):
            return value
        if not RequestValidator.validate_date_format(str(value)):
            raise InvalidRequest(f"Invalid {field}: {value}. Expected: YYYY-MM-DD")
        return datetime.strptime(str(value), "%Y-%m-%d").date()

    @staticmethod
    def parse_time_of_day(value: Any, field: str) -> Optional[int]:
        """Parse an optional time of day given as whole hours ("9") or "HH:MM" into minutes"""
        if value in (None, ""):
            return None
        try:
            if isinstance(value, int) or re.fullmatch(r'\d{1,2}', str(value).strip()):
                minutes = int(value) * 60
            else:
                minutes = parse_time_of_day(str(value))
        except ValueError:
            raise InvalidRequest(f"Invalid {field}: {value}. Expected: HH:MM or whole hours")

        if not 0 <= minutes <= MINUTES_PER_DAY:
            raise InvalidRequest(f"Invalid {field}: {value}. Must be within the day")
        return minutes

    @staticmethod
    def parse_positive_int(value: Any, field: str, maximum: Optional[int] = None) -> Optional[int]:
        """Parse an optional positive integer parameter"""
        if value in (None, ""):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise InvalidRequest(f"Invalid {field}: {value}. Expected a positive integer")
        if number <= 0:
            raise InvalidRequest(f"Invalid {field}: {value}. Expected a positive integer")
        if maximum is not None and number > maximum:
            raise InvalidRequest(f"Invalid {field}: {value}. Maximum is {maximum}")
        return number

    @staticmethod
    def resolve_date_range(start_date: Optional[date], end_date: Optional[date], today: date,
                           default_days: int, max_days: int) -> Tuple[date, date]:
        """Apply range defaults (today .. +default_days) and the range cap"""
        start = start_date or today
        end = end_date or start + timedelta(days=default_days)

        if end < start:
            raise InvalidRequest(f"end_date {end} is before start_date {start}")

        days = (end - start).days
        if days > max_days:
            raise RangeTooLarge(days, max_days)

        return start, end

    @staticmethod
    def validate_work_window(work_start: int, work_end: int) -> None:
        if work_start >= work_end:
            raise InvalidRequest("work_start must be before work_end")


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_member_id(member_id: str) -> str:
        """Sanitize member identifier"""
        return str(member_id).strip()

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Sanitize text content"""
        # Remove excessive whitespace
        text = re.sub(r'\s+', ' ', str(text).strip())
        # Remove potentially harmful characters
        text = re.sub(r'[<>"\']', '', text)
        return text
