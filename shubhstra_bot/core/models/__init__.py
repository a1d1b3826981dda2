"""
Core data models for the Shubhstra clinic bot.
"""

from .appointment import Appointment, ExternalDoctor
from .doctor import ClinicConfig, Doctor, WhatsAppCredentials
from .inbound import InboundEvent
from .intent import Intent
from .knowledge import KnowledgeEntry
from .outbound import (
    DocumentMessage,
    InteractiveListMessage,
    ListRow,
    ListSection,
    LocationMessage,
    OutboundMessage,
    TemplateMessage,
    TextMessage,
)
from .patient import Patient
from .results import (
    BookingOutcome,
    ClinicStatus,
    ManualSendResult,
    QueueStatus,
    ReferralInfo,
    ResolvedAnswer,
)

__all__ = [
    "Appointment",
    "ExternalDoctor",
    "ClinicConfig",
    "Doctor",
    "WhatsAppCredentials",
    "InboundEvent",
    "Intent",
    "KnowledgeEntry",
    "DocumentMessage",
    "InteractiveListMessage",
    "ListRow",
    "ListSection",
    "LocationMessage",
    "OutboundMessage",
    "TemplateMessage",
    "TextMessage",
    "Patient",
    "BookingOutcome",
    "ClinicStatus",
    "ManualSendResult",
    "QueueStatus",
    "ReferralInfo",
    "ResolvedAnswer",
]
