"""
WhatsApp Cloud API gateway.
"""

import mimetypes
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ...config.external_apis import WhatsAppCloudConfig
from ...core.exceptions import MessagingGatewayError
from ...core.models import ListSection, WhatsAppCredentials
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser

logger = get_logger("shubhstra.whatsapp")


class WhatsAppCloudGateway:
    """Sends messages through the Meta Graph API with httpx."""

    # Provider codes that will not succeed on retry, with doctor-facing text.
    NON_RETRYABLE = {
        131047: "24-hour window expired. Patient must reply to the bot first before you can send messages.",
        131026: "24-hour window expired. Patient must reply to the bot first before you can send messages.",
        131031: "Invalid phone number format",
        131051: "Message undeliverable. Number may be invalid or blocked.",
        100: "Invalid message format",
        190: "WhatsApp access token expired. Please contact admin.",
    }

    def __init__(
        self,
        config: Optional[WhatsAppCloudConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or WhatsAppCloudConfig()
        self._transport = transport

    async def _make_request(
        self,
        method: str,
        url: str,
        credentials: WhatsAppCredentials,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Make an authorized Graph API request and map failures to gateway errors."""
        if not credentials.access_token:
            raise MessagingGatewayError(
                "REQUEST_ERROR",
                "WhatsApp access token is not available",
                "Failed to send message. Please try again.",
                retryable=True,
            )

        headers = {"Authorization": f"Bearer {credentials.access_token}"}
        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    data=data,
                    files=files,
                    headers=headers,
                )
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise self._api_error(e.response) from e
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning(f"No response from WhatsApp API: {e!r}")
            raise MessagingGatewayError(
                "NO_RESPONSE",
                "No response from WhatsApp API",
                "WhatsApp API not responding. Please try again.",
                retryable=True,
            ) from e
        except httpx.HTTPError as e:
            raise MessagingGatewayError(
                "REQUEST_ERROR",
                str(e),
                "Failed to send message. Please try again.",
                retryable=True,
            ) from e

    def _api_error(self, response: httpx.Response) -> MessagingGatewayError:
        try:
            error = (response.json() or {}).get("error") or {}
        except ValueError:
            error = {}

        code = error.get("code", response.status_code)
        message = error.get("message") or f"HTTP error {response.status_code}"
        user_message = self.NON_RETRYABLE.get(code, "Failed to send WhatsApp message")

        logger.error({
            "event": "wa_api_error",
            "status": response.status_code,
            "code": code,
            "subcode": error.get("error_subcode"),
            "message": message,
        })
        return MessagingGatewayError(
            code,
            message,
            user_message,
            retryable=False,
            subcode=error.get("error_subcode"),
        )

    async def _send(self, to: str, data: Dict[str, Any], credentials: WhatsAppCredentials) -> Dict[str, Any]:
        if not credentials.phone_number_id:
            raise MessagingGatewayError(
                "REQUEST_ERROR",
                "WhatsApp phone number ID is not available",
                "Failed to send message. Please try again.",
                retryable=True,
            )

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            **data,
        }
        logger.info({
            "event": "wa_send",
            "to": PhoneNumberParser.mask(to),
            "type": data.get("type"),
        })
        response = await self._make_request(
            "POST",
            self.config.messages_url(credentials.phone_number_id),
            credentials,
            json=payload,
        )
        return response.json()

    async def send_text(self, to: str, body: str, credentials: WhatsAppCredentials) -> Dict[str, Any]:
        data = {
            "type": "text",
            "text": {"preview_url": False, "body": body},
        }
        return await self._send(to, data, credentials)

    async def send_interactive_list(
        self,
        to: str,
        header: str,
        body: str,
        button: str,
        sections: List[ListSection],
        credentials: WhatsAppCredentials,
    ) -> Dict[str, Any]:
        data = {
            "type": "interactive",
            "interactive": {
                "type": "list",
                "header": {"type": "text", "text": header},
                "body": {"text": body},
                "action": {
                    "button": button,
                    "sections": [section.model_dump(exclude_none=True) for section in sections],
                },
            },
        }
        return await self._send(to, data, credentials)

    async def send_location(
        self,
        to: str,
        latitude: float,
        longitude: float,
        name: str,
        address: str,
        credentials: WhatsAppCredentials,
    ) -> Dict[str, Any]:
        data = {
            "type": "location",
            "location": {
                "latitude": str(latitude),
                "longitude": str(longitude),
                "name": name,
                "address": address,
            },
        }
        return await self._send(to, data, credentials)

    async def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str,
        components: List[Dict[str, Any]],
        credentials: WhatsAppCredentials,
    ) -> Dict[str, Any]:
        template: Dict[str, Any] = {
            "name": template_name,
            "language": {"code": language_code},
        }
        if components:
            template["components"] = components
        return await self._send(to, {"type": "template", "template": template}, credentials)

    async def send_document(
        self,
        to: str,
        file_bytes: bytes,
        filename: str,
        caption: str,
        credentials: WhatsAppCredentials,
    ) -> Dict[str, Any]:
        """Upload a document to the media endpoint, then send it by media id."""
        if not credentials.phone_number_id:
            raise MessagingGatewayError(
                "REQUEST_ERROR",
                "WhatsApp phone number ID is not available",
                "Failed to send message. Please try again.",
                retryable=True,
            )

        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        upload = await self._make_request(
            "POST",
            self.config.media_upload_url(credentials.phone_number_id),
            credentials,
            data={"messaging_product": "whatsapp", "type": content_type},
            files={"file": (filename, file_bytes, content_type)},
            timeout=self.config.upload_timeout,
        )
        media_id = upload.json().get("id")
        if not media_id:
            raise MessagingGatewayError(
                "UPLOAD_ERROR",
                "Media upload returned no id",
                "Failed to upload document. Please try again.",
                retryable=True,
            )

        document: Dict[str, Any] = {"id": media_id, "filename": filename}
        if caption:
            document["caption"] = caption
        return await self._send(to, {"type": "document", "document": document}, credentials)

    async def download_media(self, media_id: str, credentials: WhatsAppCredentials) -> Tuple[bytes, str]:
        """Resolve a media id to its URL and download the bytes."""
        meta = await self._make_request("GET", self.config.media_url(media_id), credentials)
        info = meta.json()
        url = info.get("url")
        if not url:
            raise MessagingGatewayError(
                "MEDIA_ERROR",
                f"No URL for media {media_id}",
                "Couldn't download the media. Please try again.",
                retryable=True,
            )

        content = await self._make_request("GET", url, credentials, timeout=self.config.upload_timeout)
        return content.content, info.get("mime_type") or content.headers.get("content-type", "image/jpeg")
