"""
Messaging-gateway interface.
"""

from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ...core.models import ListSection, WhatsAppCredentials


@runtime_checkable
class MessagingGateway(Protocol):
    """Outbound WhatsApp transport.

    Every method raises ``MessagingGatewayError`` on failure.
    """

    async def send_text(self, to: str, body: str, credentials: WhatsAppCredentials) -> Optional[Dict[str, Any]]: ...

    async def send_interactive_list(
        self,
        to: str,
        header: str,
        body: str,
        button: str,
        sections: List[ListSection],
        credentials: WhatsAppCredentials,
    ) -> Optional[Dict[str, Any]]: ...

    async def send_location(
        self,
        to: str,
        latitude: float,
        longitude: float,
        name: str,
        address: str,
        credentials: WhatsAppCredentials,
    ) -> Optional[Dict[str, Any]]: ...

    async def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str,
        components: List[Dict[str, Any]],
        credentials: WhatsAppCredentials,
    ) -> Optional[Dict[str, Any]]: ...

    async def send_document(
        self,
        to: str,
        file_bytes: bytes,
        filename: str,
        caption: str,
        credentials: WhatsAppCredentials,
    ) -> Optional[Dict[str, Any]]: ...

    async def download_media(self, media_id: str, credentials: WhatsAppCredentials) -> Tuple[bytes, str]: ...
