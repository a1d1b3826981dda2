"""
Enums for the Shubhstra clinic bot.
"""

from .booking import AppointmentStatus, BookingOutcomeStatus, BookingStep, ConversationState
from .intent import InboundMessageType, IntentKind
from .knowledge import KnowledgeCategory
from .language import Language

__all__ = [
    "AppointmentStatus",
    "BookingOutcomeStatus",
    "BookingStep",
    "ConversationState",
    "InboundMessageType",
    "IntentKind",
    "KnowledgeCategory",
    "Language",
]
