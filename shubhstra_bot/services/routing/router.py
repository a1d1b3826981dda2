"""
Message router: one inbound WhatsApp event in, zero or more replies out.
"""

from typing import Any, Optional

from ...core.enums import InboundMessageType, IntentKind, Language
from ...core.models import Doctor, InboundEvent, Intent, Patient, ReferralInfo, ResolvedAnswer
from ...utils.event_log import log_event, set_message_id
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser
from ..admin import AdminCommandProcessor
from ..booking.state_machine import BookingStateMachine
from ..clinic import ClinicHours, QueueService, ReferralService
from ..dispatch import ResponseDispatcher, render
from ..generation import GenerationFallbackAdapter
from ..knowledge import KnowledgeResolver
from ..messaging import MessagingGateway
from ..store import DataStore
from .classifier import IntentClassifier
from .locks import PatientLockRegistry

logger = get_logger("shubhstra.router")


class MessageRouter:
    """Route inbound events through classification, resolution and dispatch.

    Events from the same patient are handled one at a time; different
    patients run concurrently.
    """

    def __init__(
        self,
        store: DataStore,
        gateway: MessagingGateway,
        classifier: IntentClassifier,
        knowledge: KnowledgeResolver,
        generation: GenerationFallbackAdapter,
        booking: BookingStateMachine,
        dispatcher: ResponseDispatcher,
        admin: AdminCommandProcessor,
        clinic_hours: ClinicHours,
        queue: QueueService,
        referrals: ReferralService,
        locks: Optional[PatientLockRegistry] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.classifier = classifier
        self.knowledge = knowledge
        self.generation = generation
        self.booking = booking
        self.dispatcher = dispatcher
        self.admin = admin
        self.clinic_hours = clinic_hours
        self.queue = queue
        self.referrals = referrals
        self.locks = locks or PatientLockRegistry()

    async def handle(self, event: InboundEvent) -> None:
        """Process one inbound event. Never raises."""
        set_message_id(event.message_id)

        try:
            doctor = await self.store.get_doctor_by_phone(event.business_phone)
        except Exception:
            logger.exception(f"Doctor lookup failed for business number {event.business_phone}")
            return
        if doctor is None:
            logger.warning(f"No active doctor for business number {event.business_phone}")
            log_event("unknown_doctor", {"business_phone": event.business_phone})
            return

        sender = PhoneNumberParser.normalize(event.sender)
        if not sender:
            logger.warning(f"Inbound message {event.message_id} has no sender")
            return

        async with self.locks.hold(sender):
            try:
                await self._handle_locked(event, sender, doctor)
            except Exception:
                logger.exception(f"Failed to handle message {event.message_id} from {PhoneNumberParser.mask(sender)}")
                await self.dispatcher.send_error_text(sender, doctor)

    async def _handle_locked(self, event: InboundEvent, sender: str, doctor: Doctor) -> None:
        patient = await self.store.upsert_patient(sender, doctor.id, event.profile_name)
        is_doctor = PhoneNumberParser.same_number(sender, doctor.phone_number)

        if patient.is_bot_paused and not is_doctor:
            logger.info({"event": "bot_paused_skip", "patient_id": patient.id, "paused_by": patient.bot_paused_by})
            log_event("bot_paused_skip", {"patient_id": patient.id})
            return

        if event.message_type == InboundMessageType.TEXT:
            patient = self._with_message_language(patient, event.text)
            intent = self.classifier.classify(event.text, is_doctor, patient.conversation_state)
        elif event.message_type == InboundMessageType.INTERACTIVE:
            intent = self.classifier.classify_selection(event.selection_id)
        elif event.message_type == InboundMessageType.IMAGE:
            await self._handle_image(event, patient, doctor)
            return
        else:
            logger.info(f"Ignoring unsupported message type from {PhoneNumberParser.mask(sender)}")
            return

        logger.info({"event": "intent_classified", "patient_id": patient.id, "intent": intent.kind.value})
        log_event("intent_classified", {"patient_id": patient.id, "intent": intent.kind.value, "rating": intent.rating})

        content = await self.resolve(intent, event, patient, doctor)
        await self.dispatcher.dispatch(intent, content, patient, doctor)

    async def resolve(self, intent: Intent, event: InboundEvent, patient: Patient, doctor: Doctor) -> Any:
        """Do the store or generation work an intent needs and return its content."""
        kind = intent.kind

        if kind.is_admin:
            return await self.admin.execute(intent, doctor, reply_to=patient.phone_number)

        if kind == IntentKind.BOOKING_RESPONSE:
            return await self.booking.handle(patient, event.text, doctor)

        if kind == IntentKind.GREETING:
            return self.clinic_hours.status(doctor)

        if kind == IntentKind.QUEUE_STATUS:
            return await self.queue.status(patient, doctor)

        if kind == IntentKind.REFERRAL_REQUEST:
            code = await self.referrals.get_or_create_code(patient)
            return ReferralInfo(code=code, referral_count=patient.referral_count)

        if kind == IntentKind.HEALTH_QUERY:
            entry = await self.knowledge.resolve_medical(event.text, doctor.id)
            if entry is not None:
                return ResolvedAnswer(text=entry.medical_advice or "", entry=entry)
            return ResolvedAnswer(
                text=await self.generation.get_health_advice(event.text, doctor.display_clinic_name)
            )

        if kind == IntentKind.UNCLASSIFIED:
            entry = await self.knowledge.resolve_administrative(event.text, doctor.id)
            if entry is not None:
                return ResolvedAnswer(text=entry.answer or "", entry=entry)
            return ResolvedAnswer(
                text=await self.generation.get_health_advice(event.text, doctor.display_clinic_name)
            )

        if kind == IntentKind.BOOK_APPOINTMENT:
            await self.booking.start_booking(patient)

        return None

    async def _handle_image(self, event: InboundEvent, patient: Patient, doctor: Doctor) -> None:
        to = patient.phone_number
        await self.dispatcher.send_text(to, render("image_ack"), doctor)

        if not event.media_id:
            await self.dispatcher.send_text(to, render("image_download_failed"), doctor)
            return

        try:
            image_bytes, mime_type = await self.gateway.download_media(
                event.media_id, self.dispatcher.credentials_for(doctor)
            )
        except Exception:
            logger.exception(f"Media download failed for {event.media_id}")
            await self.dispatcher.send_text(to, render("image_download_failed"), doctor)
            return

        try:
            analysis = await self.generation.analyze_image(
                image_bytes, mime_type or event.mime_type or "image/jpeg", doctor.display_clinic_name
            )
        except Exception:
            logger.exception(f"Image analysis failed for {event.media_id}")
            await self.dispatcher.send_text(to, render("image_error"), doctor)
            return

        intent = Intent(IntentKind.IMAGE_REPORT)
        log_event("intent_classified", {"patient_id": patient.id, "intent": intent.kind.value})
        await self.dispatcher.dispatch(intent, analysis, patient, doctor)

    @staticmethod
    def _with_message_language(patient: Patient, text: str) -> Patient:
        """Answer Devanagari messages in Marathi even if the stored preference is English."""
        detected = Language.detect_from_text(text)
        if detected != Language.ENGLISH and patient.preferred_language == Language.ENGLISH:
            return patient.model_copy(update={"preferred_language": detected})
        return patient
