"""
Pytest configuration and fixtures.
"""

import pytest
from unittest.mock import Mock, AsyncMock

from shubhstra_bot.config import Settings
from shubhstra_bot.core.enums import InboundMessageType, KnowledgeCategory
from shubhstra_bot.core.models import ClinicConfig, Doctor, InboundEvent, KnowledgeEntry, Patient
from shubhstra_bot.services import build_services
from shubhstra_bot.services.generation import AgentsGenerationService
from shubhstra_bot.services.messaging import WhatsAppCloudGateway
from shubhstra_bot.services.reports import TextReportGenerator
from shubhstra_bot.services.store import InMemoryDataStore

DOCTOR_PHONE = "919800000001"
PATIENT_PHONE = "919812345678"


@pytest.fixture
def settings():
    """Settings that never read the developer's .env file."""
    return Settings(
        _env_file=None,
        whatsapp_token="master-token",
        phone_number_id="master-phone-id",
        webhook_verify_token="verify-me",
        openai_api_key=None,
        store_backend="memory",
        event_log_path=None,
    )


@pytest.fixture
def doctor():
    return Doctor(
        id="doc-1",
        name="Asha Patil",
        phone_number=DOCTOR_PHONE,
        clinic_name="Shubh Clinic",
        clinic_address="12 FC Road, Pune",
        social_links={"instagram": "https://instagram.com/shubhclinic", "website": "https://shubh.example"},
        clinic_config=ClinicConfig(review_link="https://g.page/r/shubhclinic/review"),
    )


@pytest.fixture
def patient(doctor):
    return Patient(id="pat-1", phone_number=PATIENT_PHONE, doctor_id=doctor.id, name="Rahul Sharma")


@pytest.fixture
def store(doctor, patient):
    """In-memory store seeded with one doctor, one patient and a small knowledge base."""
    data = InMemoryDataStore()
    data.add_doctor(doctor)
    data.add_patient(patient)
    data.add_knowledge_entry(KnowledgeEntry(
        id="kb-headache",
        doctor_id=doctor.id,
        category=KnowledgeCategory.MEDICAL,
        symptom_name="Headache",
        keywords=["headache", "migraine"],
        medical_advice="Rest in a dark room and drink plenty of water.",
        priority=5,
    ))
    data.add_knowledge_entry(KnowledgeEntry(
        id="faq-timings",
        doctor_id=doctor.id,
        category=KnowledgeCategory.ADMINISTRATIVE,
        question="What are your clinic timings",
        answer="We are open Monday to Saturday, 9 AM to 6 PM.",
        priority=1,
    ))
    return data


@pytest.fixture
def mock_gateway():
    """Mock WhatsApp gateway that accepts every message."""
    gateway = Mock(spec=WhatsAppCloudGateway)
    accepted = {"messages": [{"id": "wamid.test"}]}
    gateway.send_text = AsyncMock(return_value=accepted)
    gateway.send_interactive_list = AsyncMock(return_value=accepted)
    gateway.send_location = AsyncMock(return_value=accepted)
    gateway.send_template = AsyncMock(return_value=accepted)
    gateway.send_document = AsyncMock(return_value=accepted)
    gateway.download_media = AsyncMock(return_value=(b"\x89PNG report", "image/png"))
    return gateway


@pytest.fixture
def mock_generator():
    """Mock generation backend."""
    generator = Mock(spec=AgentsGenerationService)
    generator.generate_text = AsyncMock(return_value="I understand your concern. Stay hydrated and rest.")
    generator.generate_from_image = AsyncMock(return_value="📋 Report Type: Blood Test\n\nAll values are normal.")
    return generator


@pytest.fixture
def services(settings, store, mock_gateway, mock_generator, tmp_path):
    """Full service graph over the in-memory store and mocks."""
    return build_services(
        settings=settings,
        store=store,
        gateway=mock_gateway,
        generator=mock_generator,
        report_generator=TextReportGenerator(str(tmp_path / "reports"), settings.timezone),
    )


@pytest.fixture
def make_event():
    """Factory for inbound events addressed to the seeded doctor."""
    counter = {"n": 0}

    def _make(
        text: str = "",
        sender: str = PATIENT_PHONE,
        message_type: InboundMessageType = InboundMessageType.TEXT,
        **fields,
    ) -> InboundEvent:
        counter["n"] += 1
        return InboundEvent(
            message_id=fields.pop("message_id", f"wamid.{counter['n']}"),
            sender=sender,
            business_phone=fields.pop("business_phone", "+91 98000 00001"),
            profile_name=fields.pop("profile_name", "Rahul Sharma"),
            message_type=message_type,
            text=text,
            **fields,
        )

    return _make
