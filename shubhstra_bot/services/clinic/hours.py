"""
Clinic opening-hours check.
"""

from datetime import datetime, time
from typing import Optional

import pytz

from ...core.models import ClinicStatus, Doctor
from ...utils.logging import get_logger

logger = get_logger("shubhstra.clinic")


def parse_clock(value: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS"."""
    parts = [int(p) for p in value.strip().split(":")]
    if len(parts) == 2:
        parts.append(0)
    hour, minute, second = parts
    return time(hour, minute, second)


def format_clock_label(value: str) -> str:
    """Format "09:00" or "09:00:00" as "9:00 AM"."""
    clock = parse_clock(value)
    suffix = "PM" if clock.hour >= 12 else "AM"
    return f"{clock.hour % 12 or 12}:{clock.minute:02d} {suffix}"


class ClinicHours:
    """Decide whether a clinic is open, from its configured hours and holidays."""

    def __init__(self, timezone: str = "Asia/Kolkata"):
        self.tz = pytz.timezone(timezone)

    def status(self, doctor: Doctor, now: Optional[datetime] = None) -> ClinicStatus:
        """
        Get the open/closed status of the doctor's clinic.

        A missing or malformed configuration is treated as open.
        """
        now = now.astimezone(self.tz) if now is not None else datetime.now(self.tz)
        config = doctor.clinic_config

        try:
            opening = parse_clock(config.opening_time)
            closing = parse_clock(config.closing_time)
            opening_label = format_clock_label(config.opening_time)
            closing_label = format_clock_label(config.closing_time)
        except (AttributeError, TypeError, ValueError):
            logger.warning(f"Malformed clinic hours for doctor {doctor.id}; assuming open")
            return ClinicStatus(is_open=True)

        if now.date() in (config.holidays or []):
            return ClinicStatus(
                is_open=False,
                opening_time=opening_label,
                closing_time=closing_label,
                reason="holiday",
            )

        current = now.time().replace(tzinfo=None)
        if opening <= current < closing:
            return ClinicStatus(is_open=True, opening_time=opening_label, closing_time=closing_label)

        return ClinicStatus(
            is_open=False,
            opening_time=opening_label,
            closing_time=closing_label,
            reason="outside_hours",
        )
