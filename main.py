#!/usr/bin/env python3
"""
Main entry point for the Smart Group Calendar

Runs the API server, or answers a single request read from a JSON file.
The file carries the calendar data and the request parameters together:

    {"groups": {...}, "events": {...}, "unavailable": {...},
     "group_id": "g1", "start_date": "2025-07-24", "end_date": "2025-07-25",
     "duration": 60}
"""

import sys
import json
import logging
from datetime import datetime
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config
from src.availability.errors import RequestValidationError
from src.availability.service import AvailabilityService
from src.calendar.calendar_store import load_fixture
from utils.logger import MeetingFinderLogger
from utils.validators import RequestValidator

logger = logging.getLogger(__name__)


def _service_for(request_data):
    store, directory = load_fixture(request_data)
    return AvailabilityService(store, directory)


def _parse_now(request_data):
    value = request_data.get("now")
    return datetime.fromisoformat(value) if value else None


def find_group_availability(request_data):
    """
    Available and negotiable slots for the group named in the request

    Args:
        request_data (dict): calendar data plus group_id, start_date, end_date,
            min_duration, work_start, work_end

    Returns:
        dict: availability response, or {"error", "code"} for a rejected request
    """
    try:
        service = _service_for(request_data)
        result = service.get_availability(
            request_data.get("group_id", ""),
            start_date=RequestValidator.parse_date(request_data.get("start_date"), "start_date"),
            end_date=RequestValidator.parse_date(request_data.get("end_date"), "end_date"),
            min_duration=RequestValidator.parse_positive_int(request_data.get("min_duration"), "min_duration"),
            work_start=RequestValidator.parse_time_of_day(request_data.get("work_start"), "work_start"),
            work_end=RequestValidator.parse_time_of_day(request_data.get("work_end"), "work_end"),
        )
        return result.to_dict()
    except RequestValidationError as e:
        logger.error(f"Rejected availability request: {e.message}")
        return e.to_dict()


def recommend_meeting_times(request_data):
    """Ranked best/alternative meeting times for the group named in the request"""
    try:
        service = _service_for(request_data)
        date_range = (
            RequestValidator.parse_date(request_data.get("start_date"), "start_date"),
            RequestValidator.parse_date(request_data.get("end_date"), "end_date"),
        )
        result = service.get_recommendations(
            request_data.get("group_id", ""),
            date_range,
            target_duration=RequestValidator.parse_positive_int(request_data.get("duration"), "duration"),
            now=_parse_now(request_data),
        )
        return result.to_dict()
    except RequestValidationError as e:
        logger.error(f"Rejected recommendation request: {e.message}")
        return e.to_dict()


def check_member_conflicts(request_data):
    """Conflicts of one candidate event with a member's calendar"""
    try:
        service = _service_for(request_data)
        day = RequestValidator.parse_date(request_data.get("date"), "date")
        start_time = RequestValidator.parse_time_of_day(request_data.get("start_time"), "start_time")
        if day is None or start_time is None:
            return {"error": "date and start_time are required", "code": "INVALID_REQUEST"}

        report = service.check_conflicts(
            request_data.get("member_id", ""),
            day,
            start_time,
            duration=RequestValidator.parse_positive_int(request_data.get("duration"), "duration"),
            end_time=RequestValidator.parse_time_of_day(request_data.get("end_time"), "end_time"),
        )
        return report.to_dict()
    except RequestValidationError as e:
        logger.error(f"Rejected conflict check: {e.message}")
        return e.to_dict()


def run_server(host=None, port=None):
    """Run the Flask API server"""
    from src.api.flask_server import GroupCalendarAPI

    MeetingFinderLogger.setup_logging(log_level="INFO")
    logger.info("Starting Smart Group Calendar...")

    try:
        api = GroupCalendarAPI()
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


COMMANDS = {
    'availability': find_group_availability,
    'recommend': recommend_meeting_times,
    'check-conflicts': check_member_conflicts,
}


def main(argv=None):
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Group Calendar')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')

    # Single request commands
    for name, handler in COMMANDS.items():
        command_parser = subparsers.add_parser(name, help=handler.__doc__.strip().splitlines()[0])
        command_parser.add_argument('input_file', help='Input JSON file')
        command_parser.add_argument('--output', help='Output JSON file')

    args = parser.parse_args(argv)

    if args.command == 'server':
        run_server(host=args.host, port=args.port)

    elif args.command in COMMANDS:
        MeetingFinderLogger.setup_logging(log_level="WARNING")
        with open(args.input_file, 'r', encoding='utf-8') as f:
            request_data = json.load(f)

        result = COMMANDS[args.command](request_data)

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(result, f, indent=2)
        else:
            print(json.dumps(result, indent=2))

        return 1 if "error" in result else 0

    else:
        parser.print_help()

    return 0


if __name__ == '__main__':
    sys.exit(main())
