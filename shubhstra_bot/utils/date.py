"""
Date and time parsing utilities.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz
from dateparser import parse as parse_date
from dateparser.search import search_dates


class AppointmentDateParser:
    """Extract an appointment instant from free text in the clinic timezone."""

    WEEKDAYS = {
        "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
        "friday": 4, "saturday": 5, "sunday": 6,
        "mon": 0, "tue": 1, "tues": 1, "wed": 2, "thu": 3, "thur": 3,
        "thurs": 3, "fri": 4, "sat": 5, "sun": 6,
    }

    _AMPM_RE = re.compile(r"\b(\d{1,2})(?:[:.](\d{2}))?\s*([ap])\.?\s?m\b\.?", re.IGNORECASE)
    _CLOCK_RE = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")
    _AT_HOUR_RE = re.compile(r"\bat\s+(\d{1,2})\b(?!\s*[:.]\d)", re.IGNORECASE)
    _WEEKDAY_RE = re.compile(
        r"\b(?:(next|this|coming)\s+)?(" + "|".join(sorted(WEEKDAYS, key=len, reverse=True)) + r")\b",
        re.IGNORECASE,
    )
    _NOON_RE = re.compile(r"\b(?:noon|midnight)\b")
    _FILLER_RE = re.compile(r"\b(?:on|the|at|of|for|by)\b")

    # Something dateparser can anchor a calendar day on; bare numbers are not enough.
    _DATE_ANCHOR_RES = (
        re.compile(
            r"\b(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
            r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b"
        ),
        re.compile(r"\b\d{1,4}[/-]\d{1,2}(?:[/-]\d{2,4})?\b"),
        re.compile(r"\b\d{1,2}(?:st|nd|rd|th)\b"),
        re.compile(r"\bin\s+\d+\s+(?:days?|weeks?)\b|\bnext\s+(?:week|month)\b"),
    )

    def __init__(self, timezone: str = "Asia/Kolkata"):
        self.tz = pytz.timezone(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def parse(self, text: str, now: Optional[datetime] = None) -> Optional[datetime]:
        """
        Parse phrases like 'tomorrow 3pm', 'next monday 10am' or 'feb 15 at 2:30pm'.

        A date with no time of day gets noon.

        Args:
            text: Patient message
            now: Reference instant; defaults to the current clinic time

        Returns:
            A timezone-aware datetime in the clinic timezone, or None if no
            date/time could be extracted
        """
        if not text or not text.strip():
            return None

        now = self.localize(now) if now is not None else self.now()
        lowered = text.strip().lower()

        parsed = self._parse_relative_phrase(lowered, now)
        if parsed is None:
            parsed = self._parse_calendar_date(lowered, now)
        if parsed is None:
            return None

        return self.localize(parsed)

    def _parse_relative_phrase(self, lowered: str, now: datetime) -> Optional[datetime]:
        """Handle today/tomorrow/weekday phrases without dateparser."""
        today = now.date()
        target = None

        if "day after tomorrow" in lowered:
            target = today + timedelta(days=2)
        elif re.search(r"\b(tomorrow|tmrw|tmr)\b", lowered):
            target = today + timedelta(days=1)
        elif re.search(r"\b(today|tonight)\b", lowered):
            target = today
        else:
            match = self._WEEKDAY_RE.search(lowered)
            if match:
                idx = self.WEEKDAYS[match.group(2).lower()]
                days_ahead = (idx - today.weekday() + 7) % 7
                if days_ahead == 0 and match.group(1) != "this":
                    days_ahead = 7
                target = today + timedelta(days=days_ahead)

        if target is None:
            return None

        clock = self._extract_time(lowered) or time(12, 0)
        return datetime.combine(target, clock)

    def _parse_calendar_date(self, lowered: str, now: datetime) -> Optional[datetime]:
        """
        Handle explicit dates like 'nov 20 at 10' or a bare clock time like '5pm'.

        The clock token is cut out before dateparser sees the text, since it
        reads 'at 10' as a year.
        """
        clock = self._extract_time(lowered)
        remainder = self._strip_time(lowered)

        if not any(pattern.search(remainder) for pattern in self._DATE_ANCHOR_RES):
            if clock is not None and not re.search(r"\d", remainder):
                return datetime.combine(now.date(), clock)
            return None

        ordinal = re.fullmatch(r"(\d{1,2})(?:st|nd|rd|th)", remainder)
        if ordinal:
            day = self._next_day_of_month(int(ordinal.group(1)), now)
        else:
            parsed = self._parse_with_dateparser(remainder, now)
            day = parsed.date() if parsed is not None else None
        if day is None:
            return None
        return datetime.combine(day, clock or time(12, 0))

    @staticmethod
    def _next_day_of_month(day: int, now: datetime) -> Optional[date]:
        """First date on or after today falling on ``day``, looking a year ahead."""
        year, month = now.year, now.month
        for _ in range(13):
            try:
                candidate = date(year, month, day)
            except ValueError:
                candidate = None
            if candidate is not None and candidate >= now.date():
                return candidate
            month += 1
            if month > 12:
                year, month = year + 1, 1
        return None

    def _strip_time(self, lowered: str) -> str:
        for pattern in (self._AMPM_RE, self._CLOCK_RE, self._AT_HOUR_RE, self._NOON_RE):
            lowered = pattern.sub(" ", lowered)
        return " ".join(self._FILLER_RE.sub(" ", lowered).split())

    def _parse_with_dateparser(self, text: str, now: datetime) -> Optional[datetime]:
        if not text:
            return None
        settings = {
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": now.replace(tzinfo=None),
            "RETURN_AS_TIMEZONE_AWARE": False,
        }
        try:
            parsed = parse_date(text, settings=settings, languages=["en"])
            if parsed:
                return parsed
            found = search_dates(text, settings=settings, languages=["en"])
        except (ValueError, OverflowError):
            return None
        if found:
            return found[0][1]
        return None

    def _extract_time(self, lowered: str) -> Optional[time]:
        match = self._AMPM_RE.search(lowered)
        if match:
            hour = int(match.group(1))
            minute = int(match.group(2) or 0)
            if not 1 <= hour <= 12 or minute > 59:
                return None
            if match.group(3).lower() == "p" and hour != 12:
                hour += 12
            elif match.group(3).lower() == "a" and hour == 12:
                hour = 0
            return time(hour, minute)

        match = self._CLOCK_RE.search(lowered)
        if match:
            return time(int(match.group(1)), int(match.group(2)))

        if "noon" in lowered:
            return time(12, 0)
        if "midnight" in lowered:
            return time(0, 0)

        match = self._AT_HOUR_RE.search(lowered)
        if match and int(match.group(1)) <= 23:
            return time(int(match.group(1)), 0)

        return None

    def localize(self, value: datetime) -> datetime:
        """Attach or convert to the clinic timezone."""
        if value.tzinfo is None:
            return self.tz.localize(value)
        return value.astimezone(self.tz)


def format_long_datetime(value: datetime) -> str:
    """Format like 'Tuesday, 20 October 2026 at 03:00 PM'."""
    return f"{value.strftime('%A')}, {value.day} {value.strftime('%B %Y')} at {value.strftime('%I:%M %p')}"


def format_short_date(value: datetime) -> str:
    """Format like '5 Feb 2025'."""
    return f"{value.day} {value.strftime('%b %Y')}"


def format_clock(value: datetime) -> str:
    """Format like '03:00 PM'."""
    return value.strftime("%I:%M %p")
