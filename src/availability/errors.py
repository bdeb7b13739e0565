"""
Error taxonomy for the availability engine.

Only ``RequestValidationError`` subclasses are surfaced to callers as request
failures. ``InvalidInterval`` and ``MemberDataUnavailable`` are absorbed by
the engine and reported through the ``invalid_records`` / ``partial`` fields
of the result.
"""
from typing import Any, Optional


class AvailabilityError(Exception):
    """Base class for availability engine errors"""


class InvalidInterval(AvailabilityError):
    """A calendar record that cannot be turned into a busy interval"""

    def __init__(self, reason: str, member_id: Optional[str] = None, record: Any = None):
        super().__init__(reason)
        self.reason = reason
        self.member_id = member_id
        self.record = record

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "reason": self.reason,
            "record": self.record if isinstance(self.record, dict) else repr(self.record),
        }


class MemberDataUnavailable(AvailabilityError):
    """A member's calendar could not be fetched"""

    def __init__(self, member_id: str, reason: str):
        super().__init__(f"Calendar unavailable for {member_id}: {reason}")
        self.member_id = member_id
        self.reason = reason


class RequestValidationError(AvailabilityError):
    """Input validation failure surfaced to the caller"""

    code = "INVALID_REQUEST"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidRequest(RequestValidationError):
    """Malformed query or body parameter"""

    code = "INVALID_REQUEST"


class RangeTooLarge(RequestValidationError):
    """Requested date range exceeds the configured cap"""

    code = "RANGE_TOO_LARGE"

    def __init__(self, days: int, max_days: int):
        super().__init__(f"Date range of {days} days exceeds the maximum of {max_days} days")
        self.days = days
        self.max_days = max_days


class EmptyGroup(RequestValidationError):
    """Group has no resolvable members"""

    code = "EMPTY_GROUP"

    def __init__(self, group_id: str):
        super().__init__(f"Group {group_id} has no members")
        self.group_id = group_id
