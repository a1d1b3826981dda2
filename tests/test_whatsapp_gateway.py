"""
Tests for the WhatsApp Cloud API gateway.
"""

import json

import httpx
import pytest

from shubhstra_bot.config import WhatsAppCloudConfig
from shubhstra_bot.core.exceptions import MessagingGatewayError
from shubhstra_bot.core.models import ListRow, ListSection, WhatsAppCredentials
from shubhstra_bot.services.messaging import WhatsAppCloudGateway

API = "https://graph.test/v18.0"
CREDS = WhatsAppCredentials(access_token="tok", phone_number_id="pn-1")


def _gateway(handler):
    return WhatsAppCloudGateway(WhatsAppCloudConfig(api_base=API), transport=httpx.MockTransport(handler))


class TestSendText:
    """Test plain text sends."""

    @pytest.mark.asyncio
    async def test_payload_and_auth(self):
        """Test the Graph API payload and bearer token."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"messages": [{"id": "wamid.OUT"}]})

        result = await _gateway(handler).send_text("919812345678", "Hello", CREDS)

        assert result == {"messages": [{"id": "wamid.OUT"}]}
        assert seen["url"] == f"{API}/pn-1/messages"
        assert seen["auth"] == "Bearer tok"
        assert seen["body"] == {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": "919812345678",
            "type": "text",
            "text": {"preview_url": False, "body": "Hello"},
        }

    @pytest.mark.asyncio
    async def test_window_expired_is_not_retryable(self):
        """Test provider code 131047 maps to the doctor-facing window message."""
        def handler(request):
            return httpx.Response(400, json={"error": {
                "code": 131047, "message": "Re-engagement message", "error_subcode": 2494010,
            }})

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).send_text("919812345678", "Hello", CREDS)

        error = exc_info.value
        assert error.code == 131047
        assert error.subcode == 2494010
        assert error.retryable is False
        assert error.user_message.startswith("24-hour window expired")

    @pytest.mark.asyncio
    async def test_unknown_api_error(self):
        """Test unrecognized codes fall back to the generic message."""
        def handler(request):
            return httpx.Response(500, text="upstream down")

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).send_text("919812345678", "Hello", CREDS)

        assert exc_info.value.code == 500
        assert exc_info.value.user_message == "Failed to send WhatsApp message"

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        """Test timeouts become NO_RESPONSE."""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).send_text("919812345678", "Hello", CREDS)

        assert exc_info.value.code == "NO_RESPONSE"
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("credentials", [
        WhatsAppCredentials(access_token=None, phone_number_id="pn-1"),
        WhatsAppCredentials(access_token="tok", phone_number_id=None),
    ])
    async def test_missing_credentials(self, credentials):
        """Test nothing is sent without a token and phone number id."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).send_text("919812345678", "Hello", credentials)

        assert exc_info.value.code == "REQUEST_ERROR"
        assert calls == []


class TestOtherMessages:
    """Test list, location, template and document sends."""

    @pytest.mark.asyncio
    async def test_interactive_list(self):
        """Test rows without descriptions omit the key."""
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        sections = [ListSection(title="Services", rows=[ListRow(id="book", title="Book")])]
        await _gateway(handler).send_interactive_list("919812345678", "Clinic", "Welcome", "View Options", sections, CREDS)

        interactive = seen["body"]["interactive"]
        assert interactive["type"] == "list"
        assert interactive["header"] == {"type": "text", "text": "Clinic"}
        assert interactive["action"]["sections"] == [{"title": "Services", "rows": [{"id": "book", "title": "Book"}]}]

    @pytest.mark.asyncio
    async def test_location_coordinates_are_strings(self):
        """Test coordinates are sent as strings."""
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await _gateway(handler).send_location("919812345678", 18.52, 73.85, "Clinic", "Pune", CREDS)

        assert seen["body"]["location"] == {
            "latitude": "18.52", "longitude": "73.85", "name": "Clinic", "address": "Pune",
        }

    @pytest.mark.asyncio
    async def test_template_without_components(self):
        """Test empty components are left out."""
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await _gateway(handler).send_template("919812345678", "appointment_reminder", "en_US", [], CREDS)

        assert seen["body"]["template"] == {"name": "appointment_reminder", "language": {"code": "en_US"}}

    @pytest.mark.asyncio
    async def test_document_uploads_then_sends(self):
        """Test the file is uploaded and sent by media id."""
        requests = []

        def handler(request):
            request.read()
            requests.append(request)
            if request.url.path.endswith("/media"):
                return httpx.Response(200, json={"id": "media-42"})
            return httpx.Response(200, json={"messages": [{"id": "wamid.DOC"}]})

        await _gateway(handler).send_document(
            "919800000001", b"report body", "Rahul_Report.txt", "Medical report", CREDS
        )

        upload, send = requests
        assert str(upload.url) == f"{API}/pn-1/media"
        assert b"report body" in upload.content
        assert b"Rahul_Report.txt" in upload.content
        assert json.loads(send.content)["document"] == {
            "id": "media-42", "filename": "Rahul_Report.txt", "caption": "Medical report",
        }

    @pytest.mark.asyncio
    async def test_document_upload_without_id(self):
        """Test an upload without a media id fails before sending."""
        def handler(request):
            return httpx.Response(200, json={})

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).send_document("919800000001", b"x", "r.txt", "", CREDS)

        assert exc_info.value.code == "UPLOAD_ERROR"


class TestDownloadMedia:
    """Test the two-step media download."""

    @pytest.mark.asyncio
    async def test_resolves_url_then_downloads(self):
        """Test the metadata lookup and byte download."""
        def handler(request):
            assert request.headers["authorization"] == "Bearer tok"
            if str(request.url) == f"{API}/media-1":
                return httpx.Response(200, json={"url": "https://cdn.test/media-1", "mime_type": "image/png"})
            return httpx.Response(200, content=b"\x89PNG")

        content, mime_type = await _gateway(handler).download_media("media-1", CREDS)

        assert content == b"\x89PNG"
        assert mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_missing_url(self):
        """Test metadata without a URL."""
        def handler(request):
            return httpx.Response(200, json={"id": "media-1"})

        with pytest.raises(MessagingGatewayError) as exc_info:
            await _gateway(handler).download_media("media-1", CREDS)

        assert exc_info.value.code == "MEDIA_ERROR"
