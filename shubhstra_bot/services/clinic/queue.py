"""
Patient queue status.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytz

from ...core.enums import AppointmentStatus
from ...core.models import Doctor, Patient, QueueStatus
from ...utils.logging import get_logger
from ..store import DataStore

logger = get_logger("shubhstra.queue")


class QueueService:
    """Compute a patient's token number and expected wait."""

    def __init__(self, store: DataStore, timezone: str = "Asia/Kolkata"):
        self.store = store
        self.tz = pytz.timezone(timezone)

    def day_bounds(self, now: datetime):
        """Return the start of today and of tomorrow in the clinic timezone."""
        local = now.astimezone(self.tz)
        start = self.tz.localize(datetime(local.year, local.month, local.day))
        end = self.tz.localize(datetime.combine(start.date() + timedelta(days=1), datetime.min.time()))
        return start, end

    async def status(self, patient: Patient, doctor: Doctor, now: Optional[datetime] = None) -> QueueStatus:
        """
        Get the queue position for the patient's next appointment.

        Args:
            patient: Patient asking
            doctor: Clinic, for the average consultation time
            now: Reference instant; defaults to the current time

        Returns:
            QueueStatus; ``has_appointment`` is False when there is none or
            the store fails
        """
        now = now or datetime.now(self.tz)
        try:
            appointment = await self.store.get_next_appointment(patient.id, now)
            if appointment is None:
                return QueueStatus(has_appointment=False)

            start_of_today, start_of_tomorrow = self.day_bounds(now)
            ahead = await self.store.list_appointments(
                appointment.doctor_id,
                start_of_today,
                appointment.appointment_time,
                AppointmentStatus.queue_statuses(),
            )
            token_end = min(appointment.appointment_time + timedelta(microseconds=1), start_of_tomorrow)
            today = await self.store.list_appointments(appointment.doctor_id, start_of_today, token_end)
        except Exception:
            logger.exception(f"Queue status failed for patient {patient.id}")
            return QueueStatus(has_appointment=False)

        average = doctor.clinic_config.average_consultation_time or 15
        return QueueStatus(
            has_appointment=True,
            token_number=len(today) or 1,
            people_ahead=len(ahead),
            estimated_wait_minutes=len(ahead) * average,
            appointment_time=appointment.appointment_time,
            status=appointment.status.value,
        )
