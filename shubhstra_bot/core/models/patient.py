"""
Patient-related data models.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict

from ..enums import ConversationState, Language


class Patient(BaseModel):
    """A WhatsApp contact of one clinic, keyed by normalized phone number."""

    model_config = ConfigDict(extra="ignore")

    id: str
    phone_number: str
    doctor_id: Optional[str] = None
    name: Optional[str] = None
    preferred_language: Language = Language.ENGLISH
    conversation_state: ConversationState = ConversationState.IDLE
    conversation_data: Dict[str, Any] = Field(default_factory=dict)
    is_bot_paused: bool = False
    bot_paused_at: Optional[datetime] = None
    bot_paused_by: Optional[str] = None
    last_seen_at: Optional[datetime] = None
    referral_code: Optional[str] = None
    referral_count: int = 0

    @property
    def is_idle(self) -> bool:
        return self.conversation_state == ConversationState.IDLE

    @property
    def display_name(self) -> str:
        return self.name or "Unknown"
