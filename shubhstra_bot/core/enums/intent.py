"""
Intent enums.
"""

from enum import Enum


class IntentKind(str, Enum):
    """Closed set of classifications for one inbound message."""

    # Doctor slash-commands
    ADMIN_SEARCH = "admin_search"
    ADMIN_QUEUE = "admin_queue"
    ADMIN_REPORT = "admin_report"
    ADMIN_NETWORK = "admin_network"

    # Text classification
    GREETING = "greeting"
    QUEUE_STATUS = "queue_status"
    SOCIAL_LINKS = "social_links"
    REFERRAL_REQUEST = "referral_request"
    RATING = "rating"
    HEALTH_QUERY = "health_query"
    BOOKING_RESPONSE = "booking_response"
    UNCLASSIFIED = "unclassified"

    # Menu selections and media
    BOOK_APPOINTMENT = "book_appointment"
    CLINIC_ADDRESS = "clinic_address"
    REVIEW_REQUEST = "review_request"
    IMAGE_REPORT = "image_report"
    UNKNOWN_SELECTION = "unknown_selection"

    @property
    def is_admin(self) -> bool:
        return self.value.startswith("admin_")


class InboundMessageType(str, Enum):
    """WhatsApp message types the router understands."""

    TEXT = "text"
    INTERACTIVE = "interactive"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_string(cls, value: str) -> "InboundMessageType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNSUPPORTED
