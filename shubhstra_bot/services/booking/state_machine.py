"""
Conversational appointment booking.
"""

from datetime import datetime
from typing import Optional

import pytz

from ...core.enums import BookingOutcomeStatus, BookingStep, ConversationState
from ...core.exceptions import BookingValidationError, DataStoreError
from ...core.models import BookingOutcome, Doctor, Patient
from ...utils.date import AppointmentDateParser, format_long_datetime
from ...utils.event_log import log_event
from ...utils.logging import get_logger
from ..store import DataStore

logger = get_logger("shubhstra.booking")

BACK_HINT = "(Type 'cancel' to go back)"

CANCELLED_MESSAGE = "Booking cancelled. Type 'Hi' to see the menu again."

UNPARSEABLE_MESSAGE = (
    "I couldn't understand that date/time. Please try again.\n\n"
    "Examples:\n"
    "• Tomorrow 3pm\n"
    "• Next Monday 10am\n"
    "• Feb 15 at 2:30pm\n\n"
    f"{BACK_HINT}"
)

OUTSIDE_HOURS_MESSAGE = (
    "⏰ Sorry, we're only open from {open_label} to {close_label}.\n\n"
    "Please choose a time within clinic hours.\n\n"
    f"{BACK_HINT}"
)

SUNDAY_MESSAGE = (
    "📅 Sorry, we're closed on Sundays.\n\n"
    "Please choose a weekday.\n\n"
    f"{BACK_HINT}"
)

CREATE_FAILED_MESSAGE = (
    "Sorry, couldn't book the appointment. Please try again or contact us directly.\n\n"
    "📞 {phone}"
)

CONFIRMATION_MESSAGE = (
    "✅ *Appointment Confirmed!*\n\n"
    "📅 *Date & Time:*\n{when}\n\n"
    "📍 *Location:*\n{clinic_name}\n{clinic_address}\n\n"
    "💡 *What's Next:*\n"
    "• We'll send you a reminder 2 hours before\n"
    "• Please arrive 10 minutes early\n"
    "• Bring any previous medical reports\n\n"
    "See you soon! 😊\n\n"
    "Type 'Hi' to see the menu again."
)

UNKNOWN_STEP_MESSAGE = "Something went wrong. Type 'Hi' to start over."
ERROR_MESSAGE = "Sorry, an error occurred. Type 'Hi' to try again."

APPOINTMENT_NOTES = "Booked via WhatsApp conversational booking"


def _hour_label(hour: int) -> str:
    if hour in (0, 24):
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour % 12} {'AM' if hour < 12 else 'PM'}"


class BookingStateMachine:
    """Drive the ``idle -> booking_appointment -> idle`` dialog.

    The only step is ``awaiting_datetime``: the patient replies with a date
    and time in free text until it validates or they type ``cancel``.
    """

    CANCEL_KEYWORD = "cancel"

    def __init__(
        self,
        store: DataStore,
        date_parser: Optional[AppointmentDateParser] = None,
        open_hour: int = 9,
        close_hour: int = 18,
    ):
        self.store = store
        self.date_parser = date_parser or AppointmentDateParser()
        self.open_hour = open_hour
        self.close_hour = close_hour

    async def start_booking(self, patient: Patient, now: Optional[datetime] = None) -> None:
        """Enter the booking dialog, waiting for a date/time."""
        started_at = (now or datetime.now(pytz.utc)).isoformat()
        await self.store.update_patient_state(
            patient.id,
            ConversationState.BOOKING_APPOINTMENT,
            {"step": BookingStep.AWAITING_DATETIME.value, "started_at": started_at},
        )
        log_event("state_transition", {
            "patient_id": patient.id,
            "from": patient.conversation_state.value,
            "to": ConversationState.BOOKING_APPOINTMENT.value,
        })

    async def handle(
        self,
        patient: Patient,
        text: str,
        doctor: Doctor,
        now: Optional[datetime] = None,
    ) -> BookingOutcome:
        """
        Process one patient reply while in the booking dialog.

        Args:
            patient: Patient in ``booking_appointment`` state
            text: The reply
            doctor: Clinic the appointment is booked with
            now: Reference instant; defaults to the current clinic time

        Returns:
            BookingOutcome with the message to send back
        """
        try:
            if (text or "").strip().lower() == self.CANCEL_KEYWORD:
                await self._reset(patient)
                return BookingOutcome(BookingOutcomeStatus.CANCELLED, CANCELLED_MESSAGE)

            step = (patient.conversation_data or {}).get("step")
            if step != BookingStep.AWAITING_DATETIME.value:
                logger.warning(f"Unknown booking step {step!r} for patient {patient.id}")
                await self._reset(patient)
                return BookingOutcome(BookingOutcomeStatus.RESET, UNKNOWN_STEP_MESSAGE)

            return await self._handle_datetime(patient, text, doctor, now)
        except Exception:
            logger.exception(f"Booking dialog failed for patient {patient.id}")
            try:
                await self._reset(patient)
            except Exception:
                logger.exception(f"Could not reset booking state for patient {patient.id}")
            return BookingOutcome(BookingOutcomeStatus.RESET, ERROR_MESSAGE)

    def validate(self, text: str, now: Optional[datetime] = None) -> datetime:
        """
        Parse and check a requested appointment time.

        Raises:
            BookingValidationError: with the reason that selects the retry prompt
        """
        now = self.date_parser.localize(now) if now is not None else self.date_parser.now()
        when = self.date_parser.parse(text, now)

        if when is None:
            raise BookingValidationError(BookingValidationError.UNPARSEABLE, "No date/time found")
        if when <= now:
            raise BookingValidationError(BookingValidationError.PAST, "Date is in the past")
        if when.hour < self.open_hour or when.hour >= self.close_hour:
            raise BookingValidationError(BookingValidationError.OUTSIDE_HOURS, f"Hour {when.hour} outside clinic hours")
        if when.weekday() == 6:
            raise BookingValidationError(BookingValidationError.SUNDAY, "Clinic closed on Sundays")
        return when

    def retry_message(self, reason: str) -> str:
        if reason == BookingValidationError.OUTSIDE_HOURS:
            return OUTSIDE_HOURS_MESSAGE.format(
                open_label=_hour_label(self.open_hour),
                close_label=_hour_label(self.close_hour),
            )
        if reason == BookingValidationError.SUNDAY:
            return SUNDAY_MESSAGE
        return UNPARSEABLE_MESSAGE

    async def _handle_datetime(
        self,
        patient: Patient,
        text: str,
        doctor: Doctor,
        now: Optional[datetime],
    ) -> BookingOutcome:
        try:
            when = self.validate(text, now)
        except BookingValidationError as e:
            logger.info({"event": "booking_retry", "patient_id": patient.id, "reason": e.reason})
            return BookingOutcome(BookingOutcomeStatus.RETRY, self.retry_message(e.reason))

        try:
            appointment = await self.store.create_appointment(
                patient.id,
                doctor.id,
                when.astimezone(pytz.utc).isoformat(),
                APPOINTMENT_NOTES,
            )
        except DataStoreError:
            logger.exception(f"Failed to create appointment for patient {patient.id}")
            return BookingOutcome(
                BookingOutcomeStatus.RETRY,
                CREATE_FAILED_MESSAGE.format(phone=doctor.phone_number or "Call clinic"),
            )

        logger.info({"event": "appointment_booked", "appointment_id": appointment.id, "patient_id": patient.id})
        await self._reset(patient)

        message = CONFIRMATION_MESSAGE.format(
            when=format_long_datetime(when),
            clinic_name=doctor.display_clinic_name,
            clinic_address=doctor.clinic_address or "",
        )
        return BookingOutcome(BookingOutcomeStatus.BOOKED, message, appointment)

    async def _reset(self, patient: Patient) -> None:
        await self.store.update_patient_state(patient.id, ConversationState.IDLE, {})
        log_event("state_transition", {
            "patient_id": patient.id,
            "from": patient.conversation_state.value,
            "to": ConversationState.IDLE.value,
        })
