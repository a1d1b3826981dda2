"""
Doctor and clinic configuration models.
"""

from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class ClinicConfig(BaseModel):
    """Per-clinic operating configuration."""

    model_config = ConfigDict(extra="ignore")

    opening_time: str = "09:00"
    closing_time: str = "18:00"
    holidays: List[date] = Field(default_factory=list)
    average_consultation_time: int = 15
    review_link: Optional[str] = None
    latitude: float = 18.5204
    longitude: float = 73.8567


class Doctor(BaseModel):
    """A registered doctor, identified by their WhatsApp business number."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    phone_number: str
    clinic_name: Optional[str] = None
    clinic_address: Optional[str] = None
    welcome_message: Optional[str] = None
    default_fee: Optional[float] = None
    social_links: Dict[str, str] = Field(default_factory=dict)
    whatsapp_access_token: Optional[str] = None
    whatsapp_phone_number_id: Optional[str] = None
    is_active: bool = True
    clinic_config: ClinicConfig = Field(default_factory=ClinicConfig)

    @property
    def display_clinic_name(self) -> str:
        """Clinic name, or a name derived from the doctor."""
        return self.clinic_name or f"Dr. {self.name}'s Clinic"


class WhatsAppCredentials(BaseModel):
    """Credential context for one outbound WhatsApp call."""

    model_config = ConfigDict(extra="forbid")

    access_token: Optional[str] = None
    phone_number_id: Optional[str] = None

    @classmethod
    def resolve(cls, doctor: Optional[Doctor], settings) -> "WhatsAppCredentials":
        """Prefer the doctor's own credentials, else the master account."""
        if doctor and doctor.whatsapp_access_token and doctor.whatsapp_phone_number_id:
            return cls(
                access_token=doctor.whatsapp_access_token,
                phone_number_id=doctor.whatsapp_phone_number_id,
            )
        return cls(
            access_token=settings.whatsapp_token,
            phone_number_id=settings.phone_number_id,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.access_token and self.phone_number_id)
