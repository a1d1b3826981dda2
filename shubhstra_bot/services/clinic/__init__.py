"""
Clinic helper services.
"""

from .hours import ClinicHours, format_clock_label, parse_clock
from .queue import QueueService
from .referral import ReferralService

__all__ = [
    "ClinicHours",
    "format_clock_label",
    "parse_clock",
    "QueueService",
    "ReferralService",
]
