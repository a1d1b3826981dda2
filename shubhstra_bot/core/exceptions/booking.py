"""
Booking-related exceptions.
"""


class BookingFlowError(Exception):
    """Base exception for booking flow errors."""
    pass


class BookingValidationError(BookingFlowError):
    """Raised when a requested appointment time fails validation."""

    UNPARSEABLE = "unparseable"
    PAST = "past"
    OUTSIDE_HOURS = "outside_hours"
    SUNDAY = "sunday"

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason
