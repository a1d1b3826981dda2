"""
Result objects passed between services.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from ..enums import BookingOutcomeStatus
from .appointment import Appointment
from .knowledge import KnowledgeEntry


@dataclass
class BookingOutcome:
    """Outcome of one booking-dialog turn."""

    status: BookingOutcomeStatus
    message: str
    appointment: Optional[Appointment] = None

    @property
    def success(self) -> bool:
        return self.status in (BookingOutcomeStatus.BOOKED, BookingOutcomeStatus.CANCELLED)


@dataclass
class ResolvedAnswer:
    """Free-text content for a health query or an unclassified message.

    ``entry`` is set when the answer came from the doctor's knowledge base.
    """

    text: str
    entry: Optional[KnowledgeEntry] = None

    @property
    def from_knowledge_base(self) -> bool:
        return self.entry is not None


class QueueStatus(BaseModel):
    """A patient's place in the day's queue."""

    model_config = ConfigDict(extra="forbid")

    has_appointment: bool
    token_number: int = 0
    people_ahead: int = 0
    estimated_wait_minutes: int = 0
    appointment_time: Optional[datetime] = None
    status: Optional[str] = None


class ClinicStatus(BaseModel):
    """Whether the clinic is open right now."""

    model_config = ConfigDict(extra="forbid")

    is_open: bool
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    reason: Optional[str] = None


class ReferralInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: Optional[str] = None
    referral_count: int = 0


class ManualSendResult(BaseModel):
    """Structured result of a doctor-initiated send."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    can_retry: bool = False
    bot_paused: bool = False
