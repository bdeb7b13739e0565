"""
Meeting planner - pairs recommended meeting times with venue suggestions
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from config.settings import Config
from src.availability.models import Recommendation, SlotType
from src.availability.service import AvailabilityService
from src.planner.place_client import PlaceRecommendationClient
from utils.validators import DataSanitizer

logger = logging.getLogger(__name__)


class MeetingPlanner:
    """Thin orchestration over AvailabilityService recommendations"""

    def __init__(self, service: AvailabilityService,
                 place_client: Optional[PlaceRecommendationClient] = None):
        self.config = Config()
        self.service = service
        self.place_client = place_client

    def plan_meeting(self, group_id: str, title: str = "Group Meeting",
                     duration: Optional[int] = None,
                     location_area: Optional[str] = None,
                     place_type: str = "restaurant",
                     date_range: Optional[Tuple[Optional[date], Optional[date]]] = None,
                     now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        duration = duration or self.config.DEFAULT_MEETING_DURATION
        if date_range is None:
            today = now.date()
            date_range = (today, today + timedelta(days=self.config.PLANNING_HORIZON_DAYS))

        members = self.service.resolve_members(group_id)
        result = self.service.get_recommendations(group_id, date_range, target_duration=duration, now=now)

        logger.info(f"🗺️  Planning '{title}' for group {group_id}: "
                    f"{len(result.best)} best, {len(result.alternatives)} alternative times")

        chosen = (result.best or result.alternatives or [None])[0]
        places = None
        if location_area and chosen is not None and self.place_client is not None:
            places = self.place_client.recommend_places(
                DataSanitizer.sanitize_text(location_area),
                place_type=place_type,
                date=chosen.slot.date.isoformat(),
                start_time=chosen.slot.start_time,
                end_time=chosen.slot.end_time,
            )

        suggested_plan = None
        if result.best and places:
            slot = result.best[0].slot
            place = places[0]
            place_name = place.get("name", "the suggested place") if isinstance(place, dict) else str(place)
            suggested_plan = {
                "date": slot.date.isoformat(),
                "time": slot.start_time,
                "place": place,
                "message": f"How about meeting at {place_name} on {slot.date.isoformat()} at {slot.start_time}?",
            }

        return {
            "group": {"id": group_id, "member_count": len(members)},
            "meeting": {"title": DataSanitizer.sanitize_text(title), "duration": duration},
            "available_times": {
                "best": [self._describe(r) for r in result.best],
                "alternatives": [self._describe(r) for r in result.alternatives],
            },
            "place_recommendations": places,
            "suggested_plan": suggested_plan,
            "degraded": result.degraded,
            "partial": result.partial,
        }

    @staticmethod
    def _describe(recommendation: Recommendation) -> Dict[str, Any]:
        slot = recommendation.slot
        data = {
            "date": slot.date.isoformat(),
            "time": f"{slot.start_time} - {slot.end_time}",
            "type": "all_available" if slot.type == SlotType.AVAILABLE else "negotiable",
            "reason": recommendation.reason,
        }
        if slot.type == SlotType.NEGOTIABLE:
            data["conflicting_members"] = list(slot.conflicting_members)
        return data
