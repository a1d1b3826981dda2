"""
Normalized inbound WhatsApp event.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict

from ..enums import InboundMessageType


class InboundEvent(BaseModel):
    """One message from a Cloud API webhook, flattened for the router."""

    model_config = ConfigDict(extra="forbid")

    message_id: Optional[str] = None
    sender: str
    business_phone: str
    profile_name: Optional[str] = None
    message_type: InboundMessageType = InboundMessageType.TEXT
    text: str = ""
    selection_id: Optional[str] = None
    selection_title: Optional[str] = None
    media_id: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_webhook_message(
        cls,
        message: Dict[str, Any],
        business_phone: str,
        profile_name: Optional[str] = None,
    ) -> "InboundEvent":
        """Build an event from one entry of ``value.messages``."""
        message_type = InboundMessageType.from_string(message.get("type", ""))
        text = ""
        selection_id = None
        selection_title = None
        media_id = None
        mime_type = None

        if message_type == InboundMessageType.TEXT:
            text = ((message.get("text") or {}).get("body") or "").strip()
        elif message_type == InboundMessageType.INTERACTIVE:
            interactive = message.get("interactive") or {}
            reply = interactive.get("list_reply") or interactive.get("button_reply") or {}
            selection_id = reply.get("id")
            selection_title = reply.get("title")
        elif message_type == InboundMessageType.IMAGE:
            image = message.get("image") or {}
            media_id = image.get("id")
            mime_type = image.get("mime_type") or "image/jpeg"
            text = (image.get("caption") or "").strip()

        return cls(
            message_id=message.get("id"),
            sender=message.get("from", ""),
            business_phone=business_phone,
            profile_name=profile_name,
            message_type=message_type,
            text=text,
            selection_id=selection_id,
            selection_title=selection_title,
            media_id=media_id,
            mime_type=mime_type,
        )
