"""
Logging utilities for the Smart Group Calendar
"""
import logging
import sys
from datetime import datetime
import json


class MeetingFinderLogger:
    """Custom logger for the availability engine and its API"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """Setup logging configuration"""

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # Setup root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))

        # Clear existing handlers
        root_logger.handlers.clear()

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        # File handler (if specified)
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('googleapiclient').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(endpoint: str, group_id: str, request_params: dict,
                             response_data: dict, processing_time: float):
        """Log a summarized availability request/response pair"""
        logger = logging.getLogger(__name__)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "group_id": group_id,
            "processing_time_seconds": round(processing_time, 3),
            "request_summary": request_params,
            "response_summary": {
                "slots": len(response_data.get("slots", [])),
                "recommendations": len(response_data.get("recommendations", [])),
                "partial": response_data.get("partial", False),
                "degraded": response_data.get("degraded", False),
            }
        }

        logger.info(f"Request processed: {json.dumps(log_entry, indent=2)}")
