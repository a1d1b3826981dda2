"""
Service wiring.
"""

from dataclasses import dataclass
from typing import Optional

from ..config import OpenAIConfig, Settings, WhatsAppCloudConfig, get_settings
from ..utils.date import AppointmentDateParser
from .admin import AdminCommandProcessor
from .booking import BookingStateMachine
from .clinic import ClinicHours, QueueService, ReferralService
from .dispatch import ResponseDispatcher
from .generation import AgentsGenerationService, GenerationFallbackAdapter, GenerationService
from .knowledge import KnowledgeResolver
from .livechat import LiveChatService
from .messaging import MessagingGateway, WhatsAppCloudGateway
from .reports import ReportGenerator, TextReportGenerator
from .routing import IntentClassifier, MessageRouter, PatientLockRegistry
from .store import DataStore, InMemoryDataStore, SQLiteDataStore


@dataclass
class BotServices:
    """Every collaborator the HTTP layer needs, built once per process."""

    settings: Settings
    store: DataStore
    gateway: MessagingGateway
    generation: GenerationFallbackAdapter
    knowledge: KnowledgeResolver
    booking: BookingStateMachine
    dispatcher: ResponseDispatcher
    admin: AdminCommandProcessor
    router: MessageRouter
    live_chat: LiveChatService


def build_store(settings: Settings) -> DataStore:
    backend = settings.store_backend.strip().lower()
    if backend == "memory":
        return InMemoryDataStore()
    if backend == "sqlite":
        return SQLiteDataStore(settings.sqlite_db_path)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def build_services(
    settings: Optional[Settings] = None,
    store: Optional[DataStore] = None,
    gateway: Optional[MessagingGateway] = None,
    generator: Optional[GenerationService] = None,
    report_generator: Optional[ReportGenerator] = None,
) -> BotServices:
    """
    Build the full service graph.

    Any collaborator passed in replaces the default built from settings,
    which is how tests inject in-memory stores and mocked gateways.
    """
    settings = settings or get_settings()
    store = store or build_store(settings)
    gateway = gateway or WhatsAppCloudGateway(WhatsAppCloudConfig.from_settings(settings))
    generator = generator or AgentsGenerationService(OpenAIConfig.from_settings(settings))
    report_generator = report_generator or TextReportGenerator(settings.report_dir, settings.timezone)

    generation = GenerationFallbackAdapter(
        generator,
        text_timeout=settings.generation_timeout_seconds,
        vision_timeout=settings.vision_timeout_seconds,
    )
    knowledge = KnowledgeResolver(store, settings.faq_match_threshold)
    booking = BookingStateMachine(
        store,
        AppointmentDateParser(settings.timezone),
        open_hour=settings.booking_open_hour,
        close_hour=settings.booking_close_hour,
    )
    dispatcher = ResponseDispatcher(gateway, settings)
    admin = AdminCommandProcessor(store, gateway, report_generator, settings)

    router = MessageRouter(
        store=store,
        gateway=gateway,
        classifier=IntentClassifier(),
        knowledge=knowledge,
        generation=generation,
        booking=booking,
        dispatcher=dispatcher,
        admin=admin,
        clinic_hours=ClinicHours(settings.timezone),
        queue=QueueService(store, settings.timezone),
        referrals=ReferralService(store),
        locks=PatientLockRegistry(),
    )

    return BotServices(
        settings=settings,
        store=store,
        gateway=gateway,
        generation=generation,
        knowledge=knowledge,
        booking=booking,
        dispatcher=dispatcher,
        admin=admin,
        router=router,
        live_chat=LiveChatService(store, gateway, settings),
    )
