"""
Tests for the response dispatcher.
"""

import pytest

from shubhstra_bot.core.enums import BookingOutcomeStatus, IntentKind, Language
from shubhstra_bot.core.exceptions import MessagingGatewayError
from shubhstra_bot.core.models import (
    BookingOutcome,
    ClinicStatus,
    Intent,
    InteractiveListMessage,
    LocationMessage,
    QueueStatus,
    ReferralInfo,
    ResolvedAnswer,
    TextMessage,
    WhatsAppCredentials,
)
from shubhstra_bot.services.dispatch import ResponseDispatcher, render


@pytest.fixture
def dispatcher(mock_gateway, settings):
    return ResponseDispatcher(mock_gateway, settings)


def _bodies(messages):
    return [m.body for m in messages if isinstance(m, TextMessage)]


class TestBuilderTable:
    """Test the intent-to-builder table."""

    def test_every_intent_has_a_builder(self, dispatcher):
        """Test dispatch is exhaustive over IntentKind."""
        assert set(dispatcher._builders) == set(IntentKind)


class TestGreeting:
    """Test the main menu."""

    def test_open_clinic(self, dispatcher, patient, doctor):
        """Test the menu list followed by the tip."""
        messages = dispatcher.build_messages(
            Intent(IntentKind.GREETING), ClinicStatus(is_open=True), patient, doctor
        )
        assert len(messages) == 2
        menu = messages[0]
        assert isinstance(menu, InteractiveListMessage)
        assert menu.header == "Shubh Clinic"
        row_ids = [row.id for row in menu.sections[0].rows]
        assert row_ids == ["book", "address", "queue", "social", "referral", "review"]
        assert "Tip" in messages[1].body

    def test_closed_clinic(self, dispatcher, patient, doctor):
        """Test a closed notice precedes the menu."""
        messages = dispatcher.build_messages(
            Intent(IntentKind.GREETING),
            ClinicStatus(is_open=False, opening_time="9:00 AM", reason="outside_hours"),
            patient,
            doctor,
        )
        assert len(messages) == 3
        assert "Clinic is Currently Closed" in messages[0].body
        assert "9:00 AM" in messages[0].body

    def test_doctor_welcome_message(self, dispatcher, patient, doctor):
        """Test the doctor's own welcome text replaces the default."""
        custom = doctor.model_copy(update={"welcome_message": "Welcome to Dr. Asha's clinic"})
        messages = dispatcher.build_messages(Intent(IntentKind.GREETING), None, patient, custom)
        assert messages[0].body == "Welcome to Dr. Asha's clinic"

    def test_marathi(self, dispatcher, patient, doctor):
        """Test Marathi patients get Marathi copy."""
        marathi = patient.model_copy(update={"preferred_language": Language.MARATHI})
        messages = dispatcher.build_messages(Intent(IntentKind.GREETING), None, marathi, doctor)
        assert messages[0].body == render("welcome", Language.MARATHI)
        assert messages[0].sections[0].rows[0].title == "📅 अपॉइंटमेंट बुक करा"


class TestRatings:
    """Test rating replies."""

    def test_five_with_review_link(self, dispatcher, patient, doctor):
        """Test five stars point to the review link."""
        messages = dispatcher.build_messages(Intent(IntentKind.RATING, rating=5), None, patient, doctor)
        assert doctor.clinic_config.review_link in messages[0].body

    def test_five_without_review_link(self, dispatcher, patient, doctor):
        """Test five stars without a link just thank the patient."""
        doctor.clinic_config.review_link = "  "
        messages = dispatcher.build_messages(Intent(IntentKind.RATING, rating=5), None, patient, doctor)
        assert messages[0].body == render("rating_thanks")

    @pytest.mark.parametrize("rating", [1, 2, 3, 4])
    def test_lower_ratings_ask_for_feedback(self, dispatcher, patient, doctor, rating):
        """Test ratings below five ask what went wrong."""
        messages = dispatcher.build_messages(Intent(IntentKind.RATING, rating=rating), None, patient, doctor)
        assert messages[0].body == render("rating_feedback")


class TestContentBuilders:
    """Test builders that render resolved content."""

    def test_knowledge_answer_is_personalized(self, dispatcher, patient, doctor, store):
        """Test knowledge-base answers name the doctor."""
        entry = store._knowledge["kb-headache"]
        answer = ResolvedAnswer(text=entry.medical_advice, entry=entry)
        messages = dispatcher.build_messages(Intent(IntentKind.HEALTH_QUERY), answer, patient, doctor)
        body = messages[0].body
        assert "*Headache*" in body
        assert entry.medical_advice in body
        assert "Dr. Asha Patil" in body

    def test_generated_answer_verbatim(self, dispatcher, patient, doctor):
        """Test generated answers are sent as-is."""
        answer = ResolvedAnswer(text="Drink water.")
        messages = dispatcher.build_messages(Intent(IntentKind.HEALTH_QUERY), answer, patient, doctor)
        assert _bodies(messages) == ["Drink water."]
        messages = dispatcher.build_messages(Intent(IntentKind.UNCLASSIFIED), answer, patient, doctor)
        assert _bodies(messages) == ["Drink water."]

    def test_booking_outcome(self, dispatcher, patient, doctor):
        """Test the booking outcome message is sent."""
        outcome = BookingOutcome(BookingOutcomeStatus.RETRY, "Try again")
        messages = dispatcher.build_messages(Intent(IntentKind.BOOKING_RESPONSE), outcome, patient, doctor)
        assert _bodies(messages) == ["Try again"]

    def test_queue_status(self, dispatcher, patient, doctor):
        """Test the token, people ahead and wait are rendered."""
        status = QueueStatus(has_appointment=True, token_number=4, people_ahead=3, estimated_wait_minutes=45)
        body = dispatcher.build_messages(Intent(IntentKind.QUEUE_STATUS), status, patient, doctor)[0].body
        assert "#4" in body
        assert "People ahead of you: 3" in body
        assert "45 minutes" in body

    def test_queue_without_appointment(self, dispatcher, patient, doctor):
        """Test patients without an appointment are told so."""
        status = QueueStatus(has_appointment=False)
        messages = dispatcher.build_messages(Intent(IntentKind.QUEUE_STATUS), status, patient, doctor)
        assert _bodies(messages) == [render("queue_none")]

    def test_social_links_in_platform_order(self, dispatcher, patient, doctor):
        """Test only configured platforms are listed, in a fixed order."""
        body = dispatcher.build_messages(Intent(IntentKind.SOCIAL_LINKS), None, patient, doctor)[0].body
        assert body.index("Instagram") < body.index("Website")
        assert "YouTube" not in body

    def test_no_social_links(self, dispatcher, patient, doctor):
        """Test the fallback when no links are configured."""
        bare = doctor.model_copy(update={"social_links": {"instagram": " "}})
        messages = dispatcher.build_messages(Intent(IntentKind.SOCIAL_LINKS), None, patient, bare)
        assert _bodies(messages) == [render("social_none")]

    def test_referral(self, dispatcher, patient, doctor):
        """Test the code and count, or the failure text."""
        messages = dispatcher.build_messages(
            Intent(IntentKind.REFERRAL_REQUEST), ReferralInfo(code="RAH5678", referral_count=2), patient, doctor
        )
        assert "RAH5678" in messages[0].body
        assert "referred 2 friends" in messages[0].body
        messages = dispatcher.build_messages(Intent(IntentKind.REFERRAL_REQUEST), ReferralInfo(), patient, doctor)
        assert _bodies(messages) == [render("referral_failed")]

    def test_clinic_address(self, dispatcher, patient, doctor):
        """Test a location pin followed by directions."""
        messages = dispatcher.build_messages(Intent(IntentKind.CLINIC_ADDRESS), None, patient, doctor)
        assert isinstance(messages[0], LocationMessage)
        assert messages[0].address == "12 FC Road, Pune"
        assert "Shubh Clinic" in messages[1].body

    def test_admin_reply(self, dispatcher, patient, doctor):
        """Test admin replies are sent, and None sends nothing."""
        intent = Intent(IntentKind.ADMIN_QUEUE)
        assert _bodies(dispatcher.build_messages(intent, "Queue text", patient, doctor)) == ["Queue text"]
        assert dispatcher.build_messages(intent, None, patient, doctor) == []

    def test_image_report(self, dispatcher, patient, doctor):
        """Test the analysis is wrapped with the doctor's name."""
        body = dispatcher.build_messages(Intent(IntentKind.IMAGE_REPORT), "All normal", patient, doctor)[0].body
        assert "All normal" in body
        assert "Asha Patil" in body


class TestSending:
    """Test delivery through the gateway."""

    @pytest.mark.asyncio
    async def test_dispatch_uses_master_credentials(self, dispatcher, mock_gateway, patient, doctor):
        """Test doctors without their own credentials use the master account."""
        await dispatcher.dispatch(Intent(IntentKind.REVIEW_REQUEST), None, patient, doctor)

        to, body, credentials = mock_gateway.send_text.await_args.args
        assert to == patient.phone_number
        assert body == render("review_prompt")
        assert credentials == WhatsAppCredentials(access_token="master-token", phone_number_id="master-phone-id")

    @pytest.mark.asyncio
    async def test_dispatch_uses_doctor_credentials(self, dispatcher, mock_gateway, patient, doctor):
        """Test a doctor's own WhatsApp credentials take precedence."""
        own = doctor.model_copy(update={"whatsapp_access_token": "doc-token", "whatsapp_phone_number_id": "doc-phone"})
        await dispatcher.dispatch(Intent(IntentKind.REVIEW_REQUEST), None, patient, own)

        credentials = mock_gateway.send_text.await_args.args[2]
        assert credentials.access_token == "doc-token"
        assert credentials.phone_number_id == "doc-phone"

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self, dispatcher, mock_gateway, patient, doctor):
        """Test one failed send does not stop the following messages."""
        mock_gateway.send_location.side_effect = MessagingGatewayError(131047, "Re-engagement message")

        await dispatcher.dispatch(Intent(IntentKind.CLINIC_ADDRESS), None, patient, doctor)

        mock_gateway.send_location.assert_awaited_once()
        mock_gateway.send_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_send_reports_failure(self, dispatcher, mock_gateway, doctor):
        """Test send returns False when the gateway fails."""
        mock_gateway.send_text.side_effect = MessagingGatewayError("NO_RESPONSE", "timeout", retryable=True)
        assert await dispatcher.send_text("919812345678", "hello", doctor) is False

    @pytest.mark.asyncio
    async def test_long_text_is_split(self, mock_gateway, settings, patient, doctor):
        """Test long bodies are split to the configured length."""
        settings.wa_max_message_length = 40
        dispatcher = ResponseDispatcher(mock_gateway, settings)
        body = "\n".join(f"line number {i}" for i in range(10))

        await dispatcher.send_text(patient.phone_number, body, doctor)

        chunks = [call.args[1] for call in mock_gateway.send_text.await_args_list]
        assert len(chunks) > 1
        assert all(len(chunk) <= 40 for chunk in chunks)
        assert "\n".join(chunks) == body
