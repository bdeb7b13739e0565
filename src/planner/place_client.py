"""
HTTP client for the external place-recommendation service
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from config.settings import Config

logger = logging.getLogger(__name__)


class PlaceRecommendationClient:
    """Suggests venues near an area for a chosen meeting window.

    Lookups are advisory: any failure is logged and reported as ``None`` so
    the meeting plan can still be returned without venues.
    """

    def __init__(self, base_url: str = None, api_key: str = None,
                 timeout: float = None, max_retries: int = None,
                 session: Optional[requests.Session] = None):
        self.config = Config()
        self.base_url = base_url or self.config.PLACES_API_URL
        self.api_key = api_key or self.config.PLACES_API_KEY
        self.timeout = timeout or self.config.PLACES_TIMEOUT
        self.max_retries = self.config.PLACES_MAX_RETRIES if max_retries is None else max_retries
        self.session = session or requests.Session()

    def recommend_places(self, location: str, place_type: str = "restaurant",
                         date: Optional[str] = None, start_time: Optional[str] = None,
                         end_time: Optional[str] = None,
                         max_results: int = None) -> Optional[List[Dict[str, Any]]]:
        payload = {
            "location": location,
            "type": place_type,
            "radius": self.config.PLACES_SEARCH_RADIUS,
            "minRating": self.config.PLACES_MIN_RATING,
            "maxResults": max_results or self.config.PLACES_MAX_RESULTS,
        }
        if date:
            payload["date"] = date
        if start_time and end_time:
            payload["timeWindow"] = {"start": start_time, "end": end_time}

        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"

        for attempt in range(1, self.max_retries + 2):
            try:
                response = self.session.post(self.base_url, json=payload, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
                places = data.get("places", data.get("restaurants", [])) if isinstance(data, dict) else data
                logger.info(f"📍 Received {len(places)} place recommendations for {location}")
                return places
            except requests.exceptions.Timeout:
                logger.warning(f"Place lookup timed out (attempt {attempt})")
            except requests.exceptions.HTTPError as e:
                logger.error(f"Place lookup failed: {e}")
                # Client errors will not succeed on retry
                if e.response is not None and e.response.status_code < 500:
                    return None
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f"Place lookup error (attempt {attempt}): {e}")

            if attempt <= self.max_retries:
                time.sleep(0.2 * attempt)

        logger.error(f"❌ Place lookup for {location} gave up after {self.max_retries + 1} attempts")
        return None
