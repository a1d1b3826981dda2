"""
Messaging-gateway module.
"""

from .base import MessagingGateway
from .whatsapp import WhatsAppCloudGateway

__all__ = [
    "MessagingGateway",
    "WhatsAppCloudGateway",
]
