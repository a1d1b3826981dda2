"""
Booking and conversation-state enums.
"""

from enum import Enum


class ConversationState(str, Enum):
    """Per-patient dialog state."""

    IDLE = "idle"
    BOOKING_APPOINTMENT = "booking_appointment"

    @classmethod
    def from_string(cls, value: str) -> "ConversationState":
        """Convert a stored value to a state, treating unknown values as idle."""
        if not value:
            return cls.IDLE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.IDLE


class BookingStep(str, Enum):
    """Sub-steps of the booking dialog."""

    AWAITING_DATETIME = "awaiting_datetime"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def queue_statuses(cls) -> frozenset:
        """Statuses that count towards the day's queue."""
        return frozenset({cls.PENDING, cls.CONFIRMED})


class BookingOutcomeStatus(str, Enum):
    """Result kind of a single booking-dialog turn."""

    BOOKED = "booked"
    RETRY = "retry"
    CANCELLED = "cancelled"
    RESET = "reset"
