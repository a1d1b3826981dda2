"""
WhatsApp Cloud API webhook handler.
"""

from collections import OrderedDict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import PlainTextResponse

from ...core.models import InboundEvent
from ...services.factory import BotServices
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser

logger = get_logger("shubhstra.webhook")

WHATSAPP_OBJECT = "whatsapp_business_account"
DEDUPE_CAPACITY = 1024


class WhatsAppWebhook:
    """Handler for Meta verification and inbound WhatsApp events."""

    def __init__(self, services: BotServices, dedupe_capacity: int = DEDUPE_CAPACITY):
        self.services = services
        self.settings = services.settings
        self.router = APIRouter()

        # message ids already handed to the router, oldest first
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        self._dedupe_capacity = dedupe_capacity

        self._setup_routes()

    def _setup_routes(self):

        @self.router.get("/whatsapp")
        async def verify_webhook(request: Request):
            """Answer Meta's subscription handshake."""
            params = request.query_params
            mode = params.get("hub.mode")
            token = params.get("hub.verify_token")
            challenge = params.get("hub.challenge") or ""

            if not mode or not token:
                return Response(status_code=status.HTTP_400_BAD_REQUEST)

            expected = self.settings.webhook_verify_token
            if mode == "subscribe" and expected and token == expected:
                logger.info("Webhook verified")
                return PlainTextResponse(challenge, status_code=status.HTTP_200_OK)

            logger.warning({"event": "webhook_verify_failed", "mode": mode})
            return Response(status_code=status.HTTP_403_FORBIDDEN)

        @self.router.post("/whatsapp")
        async def receive_whatsapp_message(request: Request):
            """Handle incoming WhatsApp messages."""
            try:
                body = await request.json()
            except ValueError:
                return Response(status_code=status.HTTP_400_BAD_REQUEST)

            if not isinstance(body, dict) or body.get("object") != WHATSAPP_OBJECT:
                return Response(status_code=status.HTTP_404_NOT_FOUND)

            for event in self.extract_events(body):
                if self._is_duplicate_message(event.message_id):
                    logger.info({"event": "wa_duplicate", "msg_id": event.message_id})
                    continue
                logger.info({
                    "event": "wa_inbound",
                    "sender": PhoneNumberParser.mask(event.sender),
                    "msg_id": event.message_id,
                    "type": event.message_type.value,
                })
                await self.services.router.handle(event)

            return PlainTextResponse("EVENT_RECEIVED", status_code=status.HTTP_200_OK)

    @staticmethod
    def extract_events(body: Dict[str, Any]) -> List[InboundEvent]:
        """Flatten ``entry[*].changes[*].value.messages[*]`` into events."""
        events: List[InboundEvent] = []
        for entry in body.get("entry") or []:
            for change in entry.get("changes") or []:
                value = change.get("value") or {}
                messages = value.get("messages") or []
                if not messages:
                    # status callbacks carry no messages
                    continue

                business_phone = (value.get("metadata") or {}).get("display_phone_number", "")
                contacts = value.get("contacts") or []
                profile_name: Optional[str] = None
                if contacts:
                    profile_name = (contacts[0].get("profile") or {}).get("name")

                for message in messages:
                    try:
                        events.append(InboundEvent.from_webhook_message(message, business_phone, profile_name))
                    except ValueError:
                        logger.exception(f"Malformed webhook message {message.get('id')}")
        return events

    def _is_duplicate_message(self, message_id: Optional[str]) -> bool:
        if not message_id:
            return False
        if message_id in self._seen:
            self._seen.move_to_end(message_id)
            return True
        self._seen[message_id] = None
        if len(self._seen) > self._dedupe_capacity:
            self._seen.popitem(last=False)
        return False
