"""
Application settings and configuration.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Shubhstra Clinic Bot"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False)

    # WhatsApp Cloud API (master account)
    whatsapp_token: Optional[str] = Field(default=None)
    phone_number_id: Optional[str] = Field(default=None)
    webhook_verify_token: Optional[str] = Field(default=None)
    whatsapp_api_base: str = Field(default="https://graph.facebook.com/v18.0")
    whatsapp_timeout_seconds: float = Field(default=10.0)
    wa_max_message_length: int = Field(default=4096)

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    generation_timeout_seconds: float = Field(default=10.0)
    vision_timeout_seconds: float = Field(default=30.0)

    # Knowledge base
    faq_match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    # Booking
    booking_open_hour: int = Field(default=9, ge=0, le=23)
    booking_close_hour: int = Field(default=18, ge=1, le=24)

    # Storage
    store_backend: str = Field(default="sqlite")
    sqlite_db_path: str = Field(default="shubhstra.db")
    report_dir: Optional[str] = Field(default=None)

    # Timezone
    timezone: str = Field(default="Asia/Kolkata")

    # Logging
    log_level: str = Field(default="INFO")
    event_log_path: Optional[str] = Field(default=None)


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
