"""
Google Calendar integration for the Smart Group Calendar
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import Config
from src.availability.errors import MemberDataUnavailable
from src.calendar.calendar_store import CalendarStore

logger = logging.getLogger(__name__)


class GoogleCalendarStore(CalendarStore):
    """Reads members' primary calendars through the Google Calendar API"""

    def __init__(self, timezone: Optional[str] = None):
        self.config = Config()
        self.timezone = ZoneInfo(timezone or self.config.TIMEZONE)

    def _get_credentials(self, member_id: str) -> Credentials:
        """Get Google Calendar credentials for a member"""
        try:
            token_path = self.config.get_token_path(member_id)
            return Credentials.from_authorized_user_file(token_path)
        except (ValueError, FileNotFoundError) as e:
            logger.error(f"❌ Calendar token not available for {member_id}: {e}")
            raise MemberDataUnavailable(member_id, "no calendar token")

    def _build_calendar_service(self, member_id: str):
        credentials = self._get_credentials(member_id)
        return build("calendar", "v3", credentials=credentials, cache_discovery=False)

    def get_busy_intervals(self, member_id: str, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """Fetch a member's events and map them to raw records"""
        # Include the previous day so events running past midnight are seen
        time_min = datetime.combine(start_date - timedelta(days=1), time.min, tzinfo=self.timezone)
        time_max = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=self.timezone)

        logger.info(f"📅 Fetching calendar events for member: {member_id}")
        logger.info(f"   Date range: {start_date} to {end_date}")

        calendar_service = self._build_calendar_service(member_id)
        try:
            events_result = calendar_service.events().list(
                calendarId='primary',
                timeMin=time_min.isoformat(),
                timeMax=time_max.isoformat(),
                singleEvents=True,
                orderBy='startTime',
                maxResults=self.config.GOOGLE_MAX_RESULTS
            ).execute()
        except HttpError as e:
            logger.error(f"HTTP error getting events for {member_id}: {e}")
            raise MemberDataUnavailable(member_id, f"Google Calendar HTTP {e.resp.status}")

        records = []
        for event in events_result.get('items', []):
            record = self._to_record(event)
            if record is not None:
                records.append(record)

        logger.info(f"✅ Retrieved {len(records)} busy records for {member_id}")
        return records

    def _to_record(self, event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Map a Google event to a raw record; free or cancelled events are skipped"""
        if event.get('status') == 'cancelled' or event.get('transparency') == 'transparent':
            return None

        start = event.get('start', {})
        end = event.get('end', {})
        summary = event.get('summary', 'Untitled Event')

        if start.get('date'):
            # All-day events carry an exclusive end date
            first = date.fromisoformat(start['date'])
            last = date.fromisoformat(end['date']) - timedelta(days=1) if end.get('date') else first
            return {
                "date": first.isoformat(),
                "end_date": max(first, last).isoformat(),
                "all_day": True,
                "title": summary,
            }

        if not start.get('dateTime'):
            return None

        start_dt = self._to_local(start['dateTime'])
        record = {
            "date": start_dt.date().isoformat(),
            "start_time": start_dt.strftime(self.config.TIME_FORMAT),
            "all_day": False,
            "title": summary,
        }
        if end.get('dateTime'):
            end_dt = self._to_local(end['dateTime'])
            if end_dt.time() == time.min and end_dt.date() > start_dt.date():
                # Ending exactly at midnight: close the previous day at 24:00
                record["end_time"] = "24:00"
                end_day = end_dt.date() - timedelta(days=1)
            else:
                record["end_time"] = end_dt.strftime(self.config.TIME_FORMAT)
                end_day = end_dt.date()
            if end_day != start_dt.date():
                record["end_date"] = end_day.isoformat()
        return record

    def _to_local(self, value: str) -> datetime:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        if parsed.tzinfo is None:
            return parsed
        return parsed.astimezone(self.timezone)
