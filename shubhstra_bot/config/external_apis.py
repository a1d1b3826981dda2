"""
External API configuration.
"""

from typing import Optional
from pydantic import BaseModel

from .settings import Settings


class WhatsAppCloudConfig(BaseModel):
    """WhatsApp Cloud (Graph API) endpoints and limits."""

    api_base: str = "https://graph.facebook.com/v18.0"
    timeout: float = 10.0
    upload_timeout: float = 30.0
    max_message_length: int = 4096

    @classmethod
    def from_settings(cls, settings: Settings) -> "WhatsAppCloudConfig":
        return cls(
            api_base=settings.whatsapp_api_base.rstrip("/"),
            timeout=settings.whatsapp_timeout_seconds,
            max_message_length=settings.wa_max_message_length,
        )

    def messages_url(self, phone_number_id: str) -> str:
        """Get the send-message URL for a business number."""
        return f"{self.api_base}/{phone_number_id}/messages"

    def media_upload_url(self, phone_number_id: str) -> str:
        """Get the media upload URL for a business number."""
        return f"{self.api_base}/{phone_number_id}/media"

    def media_url(self, media_id: str) -> str:
        """Get the metadata URL of an uploaded media object."""
        return f"{self.api_base}/{media_id}"


class OpenAIConfig(BaseModel):
    """OpenAI generation configuration."""

    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    text_temperature: float = 0.8
    vision_temperature: float = 0.5
    max_text_tokens: int = 800
    max_vision_tokens: int = 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIConfig":
        return cls(api_key=settings.openai_api_key, model=settings.openai_model)

    def is_configured(self) -> bool:
        """Check if OpenAI API is properly configured."""
        return bool(self.api_key)
