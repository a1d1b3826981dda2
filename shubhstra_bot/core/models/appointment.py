"""
Appointment and referral-network models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from ..enums import AppointmentStatus


class Appointment(BaseModel):
    """A booked visit."""

    model_config = ConfigDict(extra="ignore")

    id: str
    patient_id: str
    doctor_id: str
    appointment_time: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None


class ExternalDoctor(BaseModel):
    """One row of a doctor's external referral network."""

    model_config = ConfigDict(extra="ignore")

    name: str
    specialization: Optional[str] = None
    total_referrals: int = 0
    commission_percentage: float = 10.0
    total_commission_due: float = 0.0
