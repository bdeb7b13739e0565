"""
Configuration settings for the Smart Group Calendar availability engine
"""
import os
from typing import Dict


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


class Config:
    # API Configuration
    API_HOST = os.getenv("GROUP_CALENDAR_HOST", "0.0.0.0")
    API_PORT = _env_int("GROUP_CALENDAR_PORT", 5000)
    API_TIMEOUT = 10  # seconds, request-level deadline

    # Calendar Configuration
    # "memory" reads groups and events from DATA_FILE; "google" reads events
    # from Google Calendar and only groups from DATA_FILE
    CALENDAR_BACKEND = os.getenv("CALENDAR_BACKEND", "memory")
    DATA_FILE = os.getenv("GROUP_CALENDAR_DATA", "./data/calendar.json")
    CALENDAR_TOKENS_PATH = os.getenv("CALENDAR_TOKENS_PATH", "./calendar_tokens")
    TIMEZONE = os.getenv("GROUP_CALENDAR_TIMEZONE", "Asia/Seoul")
    GOOGLE_MAX_RESULTS = 250

    # Working-hours window (whole hours) used to bound availability slots
    WORK_HOURS_START = _env_int("WORK_HOURS_START", 9)   # 9 AM
    WORK_HOURS_END = _env_int("WORK_HOURS_END", 21)      # 9 PM

    # Preferred "business hours" sub-window for recommendation scoring
    BUSINESS_HOURS_START = 9   # 9 AM
    BUSINESS_HOURS_END = 18    # 6 PM

    # Slot and event durations (minutes)
    MIN_SLOT_DURATION = _env_int("MIN_SLOT_DURATION", 60)
    DEFAULT_EVENT_DURATION = 60
    DEFAULT_MEETING_DURATION = 60
    MAX_MEETING_DURATION = 480  # 8 hours

    # Date range handling (days)
    DEFAULT_RANGE_DAYS = 7
    MAX_RANGE_DAYS = _env_int("MAX_RANGE_DAYS", 90)
    PLANNING_HORIZON_DAYS = 14

    # Per-member calendar fetch fan-out
    FETCH_MAX_WORKERS = _env_int("FETCH_MAX_WORKERS", 5)
    MEMBER_FETCH_TIMEOUT = _env_float("MEMBER_FETCH_TIMEOUT", 5.0)  # seconds

    # Recommendation tiers
    BEST_TIER_SIZE = 3
    ALTERNATIVE_TIER_SIZE = 3
    BEST_SCORE_CUTOFF = 0.0

    # Scoring weights. "available" must exceed the sum of every other weight
    # so that an all-free slot always outranks a negotiable one.
    RECOMMENDER_WEIGHTS: Dict[str, float] = {
        "available": 200.0,
        "negotiable": 40.0,
        "duration_fit": 30.0,
        "exact_fit": 40.0,
        "recency": 20.0,
        "business_hours": 10.0,
    }

    # Place recommendation collaborator
    PLACES_API_URL = os.getenv("PLACES_API_URL", "http://localhost:4100/api/places/recommend")
    PLACES_API_KEY = os.getenv("PLACES_API_KEY")
    PLACES_TIMEOUT = 5  # seconds
    PLACES_MAX_RETRIES = 2
    PLACES_SEARCH_RADIUS = 1000  # meters
    PLACES_MIN_RATING = 4.0
    PLACES_MAX_RESULTS = 5

    # Date/Time Formats
    TIME_FORMAT = "%H:%M"

    @classmethod
    def work_window_minutes(cls) -> tuple:
        """Default working-hours window as minutes of day"""
        return cls.WORK_HOURS_START * 60, cls.WORK_HOURS_END * 60

    @classmethod
    def get_token_path(cls, member_id: str) -> str:
        """Get token file path for a member's Google Calendar credentials"""
        username = member_id.split("@")[0]
        token_file = f"{username}.token"
        token_path = os.path.join(cls.CALENDAR_TOKENS_PATH, token_file)

        if not os.path.exists(token_path):
            raise FileNotFoundError(f"Token file not found: {token_path}")

        return token_path
