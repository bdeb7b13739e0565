# File: tests/test_cli.py
"""
Tests for the single-request CLI handlers.
"""

from main import check_member_conflicts, find_group_availability, main, recommend_meeting_times


class TestCommandHandlers:

    def test_find_group_availability(self, calendar_data, meeting_day):
        request_data = dict(calendar_data, group_id="team", start_date=meeting_day.isoformat(),
                            end_date=meeting_day.isoformat(), work_start="09:00", work_end="18:00")

        result = find_group_availability(request_data)

        assert [s["type"] for s in result["slots"]] == [
            "available", "negotiable", "available", "negotiable", "available",
        ]
        assert result["partial"] is False

    def test_find_group_availability_rejects_bad_input(self, calendar_data):
        result = find_group_availability(dict(calendar_data, group_id="team", start_date="24/07/2025"))
        assert result["code"] == "INVALID_REQUEST"

    def test_recommend_meeting_times(self, calendar_data, meeting_day):
        request_data = dict(calendar_data, group_id="team", start_date=meeting_day.isoformat(),
                            end_date=meeting_day.isoformat(), duration=60,
                            now=f"{meeting_day.isoformat()}T08:00:00")

        result = recommend_meeting_times(request_data)

        assert result["recommendations"][0]["start_time"] == "09:00"
        assert result["degraded"] is False

    def test_recommend_with_offset_now(self, calendar_data, meeting_day):
        request_data = dict(calendar_data, group_id="team", start_date=meeting_day.isoformat(),
                            end_date=meeting_day.isoformat(), duration=60,
                            now=f"{meeting_day.isoformat()}T08:00:00+09:00")

        result = recommend_meeting_times(request_data)

        assert "code" not in result
        assert result["recommendations"]

    def test_recommend_for_unknown_group(self, calendar_data):
        assert recommend_meeting_times(dict(calendar_data, group_id="ghosts"))["code"] == "EMPTY_GROUP"

    def test_check_member_conflicts(self, calendar_data, meeting_day):
        request_data = dict(calendar_data, member_id="b", date=meeting_day.isoformat(),
                            start_time="14:30", duration=60)

        result = check_member_conflicts(request_data)

        assert result["has_conflict"] is True
        assert result["end_time"] == "15:30"

    def test_check_member_conflicts_requires_start(self, calendar_data, meeting_day):
        result = check_member_conflicts(dict(calendar_data, member_id="b", date=meeting_day.isoformat()))
        assert result["code"] == "INVALID_REQUEST"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "Smart Group Calendar" in capsys.readouterr().out
