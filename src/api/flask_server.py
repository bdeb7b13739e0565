"""
Flask API server for the Smart Group Calendar
"""
import logging
import os
import signal
import sys
import time
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS

from config.settings import Config
from src.availability.errors import InvalidRequest, MemberDataUnavailable, RequestValidationError
from src.availability.service import AvailabilityService
from src.calendar.calendar_store import InMemoryCalendarStore, InMemoryGroupDirectory, load_fixture
from src.planner.meeting_planner import MeetingPlanner
from src.planner.place_client import PlaceRecommendationClient
from utils.logger import MeetingFinderLogger
from utils.validators import DataSanitizer, RequestValidator

logger = logging.getLogger(__name__)


def build_service(config: Config = None) -> AvailabilityService:
    """Wire the availability service from configuration"""
    config = config or Config()

    if os.path.exists(config.DATA_FILE):
        store, directory = load_fixture(config.DATA_FILE)
        logger.info(f"Loaded groups and events from {config.DATA_FILE}")
    else:
        logger.warning(f"⚠️  Data file {config.DATA_FILE} not found, starting with no groups")
        store, directory = InMemoryCalendarStore(), InMemoryGroupDirectory()

    if config.CALENDAR_BACKEND == "google":
        from src.calendar.google_calendar_store import GoogleCalendarStore
        store = GoogleCalendarStore()
        logger.info("✅ Using Google Calendar integration")

    return AvailabilityService(store, directory)


class GroupCalendarAPI:
    """
    Flask API server exposing group availability, recommendations,
    meeting planning and single-member conflict checks
    """

    def __init__(self, service: AvailabilityService = None, planner: MeetingPlanner = None):
        self.config = Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for cross-origin requests

        self.service = service or build_service(self.config)
        self.planner = planner or MeetingPlanner(self.service, PlaceRecommendationClient())

        self.requests_processed = 0
        self.start_time = time.time()

        # Setup routes
        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            return jsonify({
                "status": "running",
                "requests_processed": self.requests_processed,
                "uptime": time.time() - self.start_time,
                "calendar_backend": self.config.CALENDAR_BACKEND,
            })

        @self.app.route('/api/groups/<group_id>/available-slots', methods=['GET'])
        def get_available_slots(group_id):
            """Common available and negotiable time slots of a group"""
            started = time.time()
            args = request.args

            result = self.service.get_availability(
                group_id,
                start_date=RequestValidator.parse_date(args.get('start_date'), 'start_date'),
                end_date=RequestValidator.parse_date(args.get('end_date'), 'end_date'),
                min_duration=RequestValidator.parse_positive_int(
                    args.get('min_duration'), 'min_duration', self.config.MAX_MEETING_DURATION),
                work_start=RequestValidator.parse_time_of_day(args.get('work_start'), 'work_start'),
                work_end=RequestValidator.parse_time_of_day(args.get('work_end'), 'work_end'),
            )

            response = result.to_dict()
            self._log_request('available-slots', group_id, dict(args), response, started)
            return jsonify(response)

        @self.app.route('/api/groups/<group_id>/find-meeting-time', methods=['POST'])
        def find_meeting_time(group_id):
            """Ranked best/alternative meeting times for a group"""
            started = time.time()
            data = request.get_json(silent=True) or {}

            duration = RequestValidator.parse_positive_int(
                data.get('duration'), 'duration', self.config.MAX_MEETING_DURATION
            ) or self.config.DEFAULT_MEETING_DURATION
            preferred_dates = data.get('preferred_dates') or []
            if not isinstance(preferred_dates, list):
                raise InvalidRequest('preferred_dates must be a list of YYYY-MM-DD dates')
            date_range = None
            if preferred_dates:
                date_range = (
                    RequestValidator.parse_date(preferred_dates[0], 'preferred_dates'),
                    RequestValidator.parse_date(preferred_dates[-1], 'preferred_dates'),
                )

            result = self.service.get_recommendations(group_id, date_range, target_duration=duration)

            response = result.to_dict()
            self._log_request('find-meeting-time', group_id, data, response, started)
            return jsonify(response)

        @self.app.route('/api/groups/<group_id>/plan-meeting', methods=['POST'])
        def plan_meeting(group_id):
            """Meeting times plus venue suggestions"""
            data = request.get_json(silent=True) or {}

            plan = self.planner.plan_meeting(
                group_id,
                title=data.get('title') or 'Group Meeting',
                duration=RequestValidator.parse_positive_int(
                    data.get('duration'), 'duration', self.config.MAX_MEETING_DURATION),
                location_area=data.get('location_area'),
                place_type=data.get('place_type') or 'restaurant',
            )
            self.requests_processed += 1
            return jsonify(plan)

        @self.app.route('/api/members/<member_id>/check-conflicts', methods=['POST'])
        def check_conflicts(member_id):
            """Conflicts of a candidate event with the member's calendar"""
            data = request.get_json(silent=True) or {}

            day = RequestValidator.parse_date(data.get('date'), 'date')
            start_time = RequestValidator.parse_time_of_day(data.get('start_time'), 'start_time')
            if day is None or start_time is None:
                raise InvalidRequest('date and start_time are required')

            report = self.service.check_conflicts(
                DataSanitizer.sanitize_member_id(member_id),
                day,
                start_time,
                duration=RequestValidator.parse_positive_int(data.get('duration'), 'duration'),
                end_time=RequestValidator.parse_time_of_day(data.get('end_time'), 'end_time'),
            )
            self.requests_processed += 1
            return jsonify(report.to_dict())

        @self.app.route('/api/members/<member_id>/free-slots', methods=['GET'])
        def get_free_slots(member_id):
            """Free gaps in one member's day"""
            args = request.args
            day = RequestValidator.parse_date(args.get('date'), 'date') or datetime.now().date()
            duration = RequestValidator.parse_positive_int(args.get('duration'), 'duration')

            slots = self.service.find_member_free_slots(
                DataSanitizer.sanitize_member_id(member_id),
                day,
                duration=duration,
                work_start=RequestValidator.parse_time_of_day(args.get('work_start'), 'work_start'),
                work_end=RequestValidator.parse_time_of_day(args.get('work_end'), 'work_end'),
            )
            self.requests_processed += 1

            if slots:
                message = f"Found {len(slots)} free slots on {day.isoformat()}."
            else:
                required = duration or self.config.DEFAULT_MEETING_DURATION
                message = f"No free slots of {required} minutes or more on {day.isoformat()}."

            return jsonify({
                "slots": [
                    {"start": s.start_time, "end": s.end_time, "duration": s.duration_minutes}
                    for s in slots
                ],
                "message": message,
            })

        @self.app.errorhandler(RequestValidationError)
        def validation_error(error):
            logger.warning(f"Rejected request: {error.message}")
            return jsonify(error.to_dict()), 400

        @self.app.errorhandler(MemberDataUnavailable)
        def member_data_unavailable(error):
            logger.warning(f"Member calendar unavailable: {error}")
            return jsonify({"error": str(error), "code": "MEMBER_DATA_UNAVAILABLE"}), 503

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _log_request(self, endpoint, group_id, params, response, started):
        self.requests_processed += 1
        processing_time = time.time() - started
        MeetingFinderLogger.log_request_response(endpoint, group_id, params, response, processing_time)

        # Check if processing time exceeds limit
        if processing_time > self.config.API_TIMEOUT:
            logger.warning(f"⚠️  Processing time ({processing_time:.2f}s) exceeded limit ({self.config.API_TIMEOUT}s)")

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._setup_signal_handlers()
        logger.info(f"Starting Smart Group Calendar API server on {host}:{port}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,  # Enable threading for concurrent requests
                use_reloader=False  # Disable reloader in production
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down Smart Group Calendar API server...")


def create_app(service: AvailabilityService = None, planner: MeetingPlanner = None) -> Flask:
    """Factory function to create Flask app"""
    api = GroupCalendarAPI(service, planner)
    return api.app
