# File: tests/test_flask_server.py
"""
API tests through the Flask test client.
"""

import pytest
from datetime import timedelta

from src.api.flask_server import create_app
from src.planner.meeting_planner import MeetingPlanner


class StubPlaceClient:

    def recommend_places(self, location, **kwargs):
        return [{"name": f"{location} Bistro"}]


@pytest.fixture
def client(service):
    app = create_app(service=service, planner=MeetingPlanner(service, StubPlaceClient()))
    app.config["TESTING"] = True
    return app.test_client()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_status_counts_requests(self, client, meeting_day):
        client.get(f"/api/groups/team/available-slots?start_date={meeting_day}&end_date={meeting_day}")
        data = client.get("/status").get_json()
        assert data["status"] == "running"
        assert data["requests_processed"] == 1

    def test_unknown_endpoint(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Endpoint not found"}


class TestAvailableSlots:

    def test_team_slots(self, client, meeting_day):
        response = client.get(
            f"/api/groups/team/available-slots?start_date={meeting_day}&end_date={meeting_day}"
            f"&work_start=9&work_end=18&min_duration=60"
        )
        assert response.status_code == 200

        data = response.get_json()
        assert [(s["start_time"], s["end_time"], s["type"]) for s in data["slots"]] == [
            ("09:00", "10:00", "available"),
            ("10:00", "11:00", "negotiable"),
            ("11:00", "14:00", "available"),
            ("14:00", "15:00", "negotiable"),
            ("15:00", "18:00", "available"),
        ]
        assert data["slots"][1]["conflicting_members"] == ["a"]
        assert "conflicting_members" not in data["slots"][0]
        assert data["member_count"] == 3
        assert data["date_range"] == {"start": meeting_day.isoformat(), "end": meeting_day.isoformat()}
        assert data["partial"] is False

    def test_range_too_large(self, client, meeting_day):
        end = meeting_day + timedelta(days=365)
        response = client.get(f"/api/groups/team/available-slots?start_date={meeting_day}&end_date={end}")
        assert response.status_code == 400
        assert response.get_json()["code"] == "RANGE_TOO_LARGE"

    def test_bad_date(self, client):
        response = client.get("/api/groups/team/available-slots?start_date=tomorrow")
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_REQUEST"

    def test_empty_group(self, client):
        response = client.get("/api/groups/ghosts/available-slots")
        assert response.status_code == 400
        assert response.get_json()["code"] == "EMPTY_GROUP"


class TestFindMeetingTime:

    def test_recommendations(self, client, meeting_day):
        response = client.post(
            "/api/groups/team/find-meeting-time",
            json={"duration": 60, "preferred_dates": [meeting_day.isoformat()]},
        )
        assert response.status_code == 200

        data = response.get_json()
        first = data["recommendations"][0]
        assert first["recommendation_type"] == "best"
        assert first["type"] == "available"
        assert first["end_time"] == "10:00"
        assert data["total_available"] == 3
        assert data["degraded"] is False

    def test_invalid_duration(self, client):
        response = client.post("/api/groups/team/find-meeting-time", json={"duration": -30})
        assert response.status_code == 400

    def test_preferred_dates_must_be_a_list(self, client):
        response = client.post("/api/groups/team/find-meeting-time",
                               json={"preferred_dates": {"from": "2025-07-24"}})
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_REQUEST"


class TestPlanMeeting:

    def test_plan(self, client):
        response = client.post(
            "/api/groups/team/plan-meeting",
            json={"title": "Dinner", "duration": 60, "location_area": "Itaewon"},
        )
        assert response.status_code == 200

        data = response.get_json()
        assert data["group"]["member_count"] == 3
        assert data["meeting"]["title"] == "Dinner"
        assert data["place_recommendations"] == [{"name": "Itaewon Bistro"}]
        assert data["suggested_plan"]["message"].startswith("How about meeting at Itaewon Bistro on ")


class TestMemberEndpoints:

    def test_conflict(self, client, meeting_day):
        response = client.post("/api/members/a/check-conflicts",
                               json={"date": meeting_day.isoformat(), "start_time": "10:30", "duration": 30})
        data = response.get_json()

        assert response.status_code == 200
        assert data["has_conflict"] is True
        assert data["message"] == "Conflict with 1 event(s) at that time."

    def test_touching_event_is_free(self, client, meeting_day):
        response = client.post("/api/members/a/check-conflicts",
                               json={"date": meeting_day.isoformat(), "start_time": "11:00", "end_time": "12:00"})
        assert response.get_json()["has_conflict"] is False

    def test_missing_start_time(self, client, meeting_day):
        response = client.post("/api/members/a/check-conflicts", json={"date": meeting_day.isoformat()})
        assert response.status_code == 400

    def test_free_slots(self, client, meeting_day):
        response = client.get(f"/api/members/a/free-slots?date={meeting_day}&duration=60&work_start=9&work_end=18")
        data = response.get_json()

        assert [(s["start"], s["end"]) for s in data["slots"]] == [("09:00", "10:00"), ("11:00", "18:00")]
        assert data["message"] == f"Found 2 free slots on {meeting_day.isoformat()}."

    def test_unavailable_member(self, client, service, meeting_day):
        service.calendar_store.unavailable["a"] = "token expired"
        response = client.post("/api/members/a/check-conflicts",
                               json={"date": meeting_day.isoformat(), "start_time": "10:00"})
        assert response.status_code == 503
        assert response.get_json()["code"] == "MEMBER_DATA_UNAVAILABLE"
