"""
Tests for the HTTP surface.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock

from shubhstra_bot.api import create_app
from shubhstra_bot.api.webhooks import WhatsAppWebhook
from shubhstra_bot.core.enums import InboundMessageType
from shubhstra_bot.core.exceptions import DataStoreError, MessagingGatewayError


def _payload(*messages, display_phone="+91 98000 00001", obj="whatsapp_business_account", name="Rahul Sharma"):
    return {
        "object": obj,
        "entry": [{
            "id": "waba-1",
            "changes": [{
                "field": "messages",
                "value": {
                    "messaging_product": "whatsapp",
                    "metadata": {"display_phone_number": display_phone, "phone_number_id": "master-phone-id"},
                    "contacts": [{"profile": {"name": name}, "wa_id": "919812345678"}],
                    "messages": list(messages),
                },
            }],
        }],
    }


def _text(body, message_id="wamid.A1", sender="919812345678"):
    return {"from": sender, "id": message_id, "timestamp": "1760860800", "type": "text", "text": {"body": body}}


@pytest.fixture
def client(services):
    app = create_app(services)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestVerification:
    """Test Meta's subscription handshake."""

    @pytest.mark.asyncio
    async def test_challenge_returned(self, client):
        """Test a matching token echoes the challenge as plain text."""
        async with client as ac:
            resp = await ac.get("/webhook/whatsapp", params={
                "hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "1158201444",
            })
        assert resp.status_code == 200
        assert resp.text == "1158201444"
        assert resp.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_wrong_token(self, client):
        """Test a mismatched token is forbidden."""
        async with client as ac:
            resp = await ac.get("/webhook/whatsapp", params={
                "hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1",
            })
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_params(self, client):
        """Test missing mode or token is a bad request."""
        async with client as ac:
            resp = await ac.get("/webhook/whatsapp", params={"hub.challenge": "1"})
        assert resp.status_code == 400


class TestInbound:
    """Test inbound message delivery."""

    @pytest.mark.asyncio
    async def test_text_message(self, client, mock_gateway):
        """Test a text message is routed and acknowledged."""
        async with client as ac:
            resp = await ac.post("/webhook/whatsapp", json=_payload(_text("I have a headache")))

        assert resp.status_code == 200
        assert resp.text == "EVENT_RECEIVED"
        mock_gateway.send_text.assert_awaited_once()
        assert "Rest in a dark room" in mock_gateway.send_text.await_args.args[1]

    @pytest.mark.asyncio
    async def test_wrong_object(self, client, mock_gateway):
        """Test payloads from other products are rejected."""
        async with client as ac:
            resp = await ac.post("/webhook/whatsapp", json=_payload(_text("Hi"), obj="page"))
        assert resp.status_code == 404
        mock_gateway.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        """Test malformed bodies are rejected."""
        async with client as ac:
            resp = await ac.post(
                "/webhook/whatsapp", content=b"not json", headers={"content-type": "application/json"}
            )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_delivery(self, client, mock_gateway):
        """Test redelivered message ids are handled once."""
        payload = _payload(_text("I have a headache", message_id="wamid.DUP"))
        async with client as ac:
            first = await ac.post("/webhook/whatsapp", json=payload)
            second = await ac.post("/webhook/whatsapp", json=payload)

        assert first.status_code == second.status_code == 200
        assert mock_gateway.send_text.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_doctor_still_200(self, client, mock_gateway):
        """Test unknown business numbers are acknowledged so Meta stops retrying."""
        async with client as ac:
            resp = await ac.post("/webhook/whatsapp", json=_payload(_text("Hi"), display_phone="15550000000"))
        assert resp.status_code == 200
        assert resp.text == "EVENT_RECEIVED"
        mock_gateway.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_callback(self, client, mock_gateway):
        """Test delivery-status callbacks carry no messages and are acknowledged."""
        payload = _payload()
        payload["entry"][0]["changes"][0]["value"].pop("messages")
        payload["entry"][0]["changes"][0]["value"]["statuses"] = [{"id": "wamid.X", "status": "delivered"}]
        async with client as ac:
            resp = await ac.post("/webhook/whatsapp", json=payload)
        assert resp.status_code == 200
        mock_gateway.send_text.assert_not_awaited()


class TestEventExtraction:
    """Test flattening of webhook payloads."""

    def test_extract_events(self):
        """Test every message in every change becomes an event."""
        interactive = {
            "from": "919812345678", "id": "wamid.B2", "type": "interactive",
            "interactive": {"type": "list_reply", "list_reply": {"id": "queue", "title": "📊 Queue Status"}},
        }
        events = WhatsAppWebhook.extract_events(_payload(_text("Hi"), interactive))

        assert [e.message_type for e in events] == [InboundMessageType.TEXT, InboundMessageType.INTERACTIVE]
        assert events[0].business_phone == "+91 98000 00001"
        assert events[0].profile_name == "Rahul Sharma"
        assert events[1].selection_id == "queue"

    def test_dedupe_is_bounded(self, services):
        """Test the oldest ids are forgotten past capacity."""
        webhook = WhatsAppWebhook(services, dedupe_capacity=2)
        assert not webhook._is_duplicate_message("a")
        assert not webhook._is_duplicate_message("b")
        assert not webhook._is_duplicate_message("c")
        assert not webhook._is_duplicate_message("a")
        assert webhook._is_duplicate_message("c")


class TestLiveChatRoutes:
    """Test the live chat endpoints."""

    @pytest.mark.asyncio
    async def test_send(self, client, store, mock_gateway):
        """Test a successful manual send."""
        async with client as ac:
            resp = await ac.post("/api/live-chat/send", json={
                "patientId": "pat-1", "doctorId": "doc-1", "messageBody": "See you at 5",
            })
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert (await store.get_patient_by_id("pat-1")).is_bot_paused is True

    @pytest.mark.asyncio
    async def test_send_gateway_failure(self, client, mock_gateway):
        """Test gateway failures return 400 with the structured result."""
        mock_gateway.send_text.side_effect = MessagingGatewayError(
            "NO_RESPONSE", "timeout", "WhatsApp API not responding. Please try again.", retryable=True
        )
        async with client as ac:
            resp = await ac.post("/api/live-chat/send", json={
                "patientId": "pat-1", "doctorId": "doc-1", "messageBody": "Hello",
            })
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["can_retry"] is True
        assert body["error_code"] == "NO_RESPONSE"

    @pytest.mark.asyncio
    async def test_send_not_found(self, client):
        """Test unknown patients return 404."""
        async with client as ac:
            resp = await ac.post("/api/live-chat/send", json={
                "patientId": "pat-missing", "doctorId": "doc-1", "messageBody": "Hello",
            })
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_send_missing_fields(self, client):
        """Test missing fields return 400."""
        async with client as ac:
            resp = await ac.post("/api/live-chat/send", json={"patientId": "pat-1"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_toggle_and_messages(self, client):
        """Test pausing via the API and reading the history."""
        async with client as ac:
            toggled = await ac.post("/api/live-chat/toggle-bot", json={"patientId": "pat-1", "pause": True})
            history = await ac.get("/api/live-chat/messages/pat-1")

        assert toggled.status_code == 200
        assert toggled.json()["isBotPaused"] is True
        assert history.status_code == 200
        assert history.json() == {"patientId": "pat-1", "messages": []}

    @pytest.mark.asyncio
    async def test_toggle_validation(self, client):
        """Test malformed toggle requests return 400."""
        async with client as ac:
            resp = await ac.post("/api/live-chat/toggle-bot", json={"patientId": "pat-1"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_toggle_not_found(self, client):
        """Test toggling an unknown patient returns 404."""
        async with client as ac:
            resp = await ac.post("/api/live-chat/toggle-bot", json={"patientId": "pat-missing", "pause": False})
        assert resp.status_code == 404


class TestHealth:
    """Test health endpoints and middleware."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        """Test the health check and security headers."""
        async with client as ac:
            resp = await ac.get("/health/")
            ready = await ac.get("/health/ready")
            live = await ac.get("/health/live")

        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["store"] == "memory"
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["x-frame-options"] == "DENY"
        assert ready.json() == {"status": "ready", "store": True, "whatsapp": True}
        assert live.json() == {"status": "alive"}

    @pytest.mark.asyncio
    async def test_not_ready_when_store_down(self, client, store):
        """Test readiness fails while the data store is unavailable."""
        store.ping = AsyncMock(side_effect=DataStoreError("down"))
        async with client as ac:
            resp = await ac.get("/health/ready")

        assert resp.status_code == 503
        assert resp.json() == {"status": "not_ready", "store": False, "whatsapp": True}
