"""
Response dispatcher: turns a resolved intent into WhatsApp messages.
"""

from typing import Any, Callable, Dict, List, Optional

from ...config.settings import Settings
from ...core.enums import IntentKind, Language
from ...core.exceptions import MessagingGatewayError
from ...core.models import (
    BookingOutcome,
    ClinicStatus,
    Doctor,
    DocumentMessage,
    Intent,
    InteractiveListMessage,
    ListRow,
    ListSection,
    LocationMessage,
    OutboundMessage,
    Patient,
    QueueStatus,
    ReferralInfo,
    ResolvedAnswer,
    TemplateMessage,
    TextMessage,
    WhatsAppCredentials,
)
from ...utils.event_log import log_event
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser
from ...utils.text import TextProcessor
from ..messaging import MessagingGateway
from . import templates
from .templates import render

logger = get_logger("shubhstra.dispatch")

Builder = Callable[[Intent, Any, Patient, Doctor], List[OutboundMessage]]


class ResponseDispatcher:
    """Build and send the outbound messages for one handled intent.

    Every ``IntentKind`` has exactly one builder. Send failures are logged
    and swallowed so one bad message does not stop the rest.
    """

    def __init__(self, gateway: MessagingGateway, settings: Optional[Settings] = None):
        self.gateway = gateway
        self.settings = settings or Settings()
        self.max_message_length = self.settings.wa_max_message_length

        self._builders: Dict[IntentKind, Builder] = {
            IntentKind.ADMIN_SEARCH: self._build_admin,
            IntentKind.ADMIN_QUEUE: self._build_admin,
            IntentKind.ADMIN_REPORT: self._build_admin,
            IntentKind.ADMIN_NETWORK: self._build_admin,
            IntentKind.GREETING: self._build_greeting,
            IntentKind.QUEUE_STATUS: self._build_queue_status,
            IntentKind.SOCIAL_LINKS: self._build_social_links,
            IntentKind.REFERRAL_REQUEST: self._build_referral,
            IntentKind.RATING: self._build_rating,
            IntentKind.HEALTH_QUERY: self._build_health_query,
            IntentKind.BOOKING_RESPONSE: self._build_booking_response,
            IntentKind.UNCLASSIFIED: self._build_answer_text,
            IntentKind.BOOK_APPOINTMENT: self._build_booking_prompt,
            IntentKind.CLINIC_ADDRESS: self._build_clinic_address,
            IntentKind.REVIEW_REQUEST: self._build_review_request,
            IntentKind.IMAGE_REPORT: self._build_image_report,
            IntentKind.UNKNOWN_SELECTION: self._build_unknown_selection,
        }
        missing = [kind.value for kind in IntentKind if kind not in self._builders]
        if missing:
            raise RuntimeError(f"No message builder for intents: {', '.join(missing)}")

    def credentials_for(self, doctor: Optional[Doctor]) -> WhatsAppCredentials:
        return WhatsAppCredentials.resolve(doctor, self.settings)

    def build_messages(self, intent: Intent, content: Any, patient: Patient, doctor: Doctor) -> List[OutboundMessage]:
        """Build the ordered outbound messages for an intent without sending anything."""
        return self._builders[intent.kind](intent, content, patient, doctor)

    async def dispatch(self, intent: Intent, content: Any, patient: Patient, doctor: Doctor) -> None:
        """Build and send the messages for an intent, in order."""
        messages = self.build_messages(intent, content, patient, doctor)
        credentials = self.credentials_for(doctor)
        sent = 0
        for message in messages:
            if await self.send(patient.phone_number, message, credentials):
                sent += 1
        log_event("dispatched", {"intent": intent.kind.value, "messages": len(messages), "sent": sent})

    async def send(self, to: str, message: OutboundMessage, credentials: WhatsAppCredentials) -> bool:
        """
        Send one message through the gateway.

        Returns:
            True if every part was accepted, False if the gateway failed
        """
        try:
            if isinstance(message, TextMessage):
                for chunk in TextProcessor.split_text_for_whatsapp(message.body, self.max_message_length):
                    await self.gateway.send_text(to, chunk, credentials)
            elif isinstance(message, InteractiveListMessage):
                await self.gateway.send_interactive_list(
                    to, message.header, message.body, message.button, message.sections, credentials
                )
            elif isinstance(message, LocationMessage):
                await self.gateway.send_location(
                    to, message.latitude, message.longitude, message.name, message.address, credentials
                )
            elif isinstance(message, TemplateMessage):
                await self.gateway.send_template(
                    to, message.template_name, message.language_code, message.components, credentials
                )
            elif isinstance(message, DocumentMessage):
                await self.gateway.send_document(
                    to, message.file_bytes, message.filename, message.caption, credentials
                )
            else:
                raise TypeError(f"Unsupported outbound message {type(message).__name__}")
        except MessagingGatewayError as e:
            logger.warning({
                "event": "send_failed",
                "to": PhoneNumberParser.mask(to),
                "type": type(message).__name__,
                "code": e.code,
                "error": e.message,
            })
            return False
        return True

    async def send_text(self, to: str, body: str, doctor: Optional[Doctor]) -> bool:
        return await self.send(to, TextMessage(body=body), self.credentials_for(doctor))

    async def send_error_text(self, to: str, doctor: Optional[Doctor]) -> bool:
        """Best-effort apology after an unexpected failure."""
        return await self.send_text(to, render("router_error"), doctor)

    # Builders

    @staticmethod
    def _language(patient: Patient) -> Language:
        return patient.preferred_language or Language.ENGLISH

    def _build_greeting(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        language = self._language(patient)
        messages: List[OutboundMessage] = []

        if isinstance(content, ClinicStatus) and not content.is_open:
            messages.append(TextMessage(body=render(
                "clinic_closed", language, opening_time=content.opening_time or doctor.clinic_config.opening_time
            )))

        rows = [
            ListRow(id=row_id, title=title, description=description)
            for row_id, title, description in templates.menu_rows(language)
        ]
        messages.append(InteractiveListMessage(
            header=doctor.display_clinic_name,
            body=doctor.welcome_message or render("welcome", language),
            button=render("menu_button", language),
            sections=[ListSection(title=render("menu_section", language), rows=rows)],
        ))
        messages.append(TextMessage(body=render("menu_tip", language)))
        return messages

    def _build_admin(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        # None means the processor already sent its own messages
        if not content:
            return []
        return [TextMessage(body=content)]

    def _build_booking_response(self, intent, content: BookingOutcome, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=content.message)]

    def _build_health_query(self, intent, content: ResolvedAnswer, patient, doctor) -> List[OutboundMessage]:
        if content.from_knowledge_base:
            entry = content.entry
            return [TextMessage(body=render(
                "knowledge_answer",
                symptom=entry.symptom_name or "",
                advice=entry.medical_advice or "",
                doctor_name=doctor.name,
            ))]
        return [TextMessage(body=content.text)]

    def _build_answer_text(self, intent, content: ResolvedAnswer, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=content.text)]

    def _build_rating(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        language = self._language(patient)
        if intent.rating == 5:
            review_link = (doctor.clinic_config.review_link or "").strip()
            if review_link:
                return [TextMessage(body=render("rating_review_link", language, review_link=review_link))]
            return [TextMessage(body=render("rating_thanks", language))]
        return [TextMessage(body=render("rating_feedback", language))]

    def _build_queue_status(self, intent, content: QueueStatus, patient, doctor) -> List[OutboundMessage]:
        language = self._language(patient)
        if content is None or not content.has_appointment:
            return [TextMessage(body=render("queue_none", language))]
        return [TextMessage(body=render(
            "queue_status",
            language,
            token=content.token_number,
            ahead=content.people_ahead,
            wait=content.estimated_wait_minutes,
        ))]

    def _build_social_links(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        language = self._language(patient)
        links = {k: v for k, v in (doctor.social_links or {}).items() if v and str(v).strip()}
        lines = [f"{label}: {links[key]}" for key, label in templates.SOCIAL_PLATFORMS if key in links]
        if not lines:
            return [TextMessage(body=render("social_none", language))]

        body = render("social_header", language) + "\n\n"
        body += "".join(f"{line}\n\n" for line in lines)
        body += render("social_footer", language)
        return [TextMessage(body=body)]

    def _build_referral(self, intent, content: ReferralInfo, patient, doctor) -> List[OutboundMessage]:
        language = self._language(patient)
        if content is None or not content.code:
            return [TextMessage(body=render("referral_failed", language))]
        return [TextMessage(body=render("referral_code", language, code=content.code, count=content.referral_count))]

    def _build_booking_prompt(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=render("booking_prompt", self._language(patient)))]

    def _build_clinic_address(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        name = doctor.display_clinic_name
        address = doctor.clinic_address or templates.DEFAULT_CLINIC_ADDRESS
        return [
            LocationMessage(
                latitude=doctor.clinic_config.latitude,
                longitude=doctor.clinic_config.longitude,
                name=name,
                address=address,
            ),
            TextMessage(body=render("clinic_directions", clinic_name=name, clinic_address=address)),
        ]

    def _build_review_request(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=render("review_prompt", self._language(patient)))]

    def _build_image_report(self, intent, content: str, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=render("image_report", analysis=content, doctor_name=doctor.name))]

    def _build_unknown_selection(self, intent, content, patient, doctor) -> List[OutboundMessage]:
        return [TextMessage(body=render("unknown_selection"))]
