"""
Utility modules for the Shubhstra clinic bot.
"""

from .date import AppointmentDateParser, format_clock, format_long_datetime, format_short_date
from .logging import configure_logging, get_logger
from .phone import PhoneNumberParser
from .text import TextProcessor

__all__ = [
    "AppointmentDateParser",
    "format_clock",
    "format_long_datetime",
    "format_short_date",
    "configure_logging",
    "get_logger",
    "PhoneNumberParser",
    "TextProcessor",
]
