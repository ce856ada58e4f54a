"""
Logging for all services.
"""

from shared.reporter.emojis import Emoji
from shared.reporter.system_reporter import SystemReporter, parse_level

__all__ = ["Emoji", "SystemReporter", "parse_level"]
