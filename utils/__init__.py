"""
Utility modules for the Smart Group Calendar
"""

from .logger import MeetingFinderLogger
from .validators import RequestValidator, DataSanitizer
from .meeting_logger import MeetingLogger

__all__ = ['MeetingFinderLogger', 'RequestValidator', 'DataSanitizer', 'MeetingLogger']
