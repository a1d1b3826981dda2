"""
External API-related exceptions.
"""

from typing import Optional, Union


class ExternalAPIError(Exception):
    """Base exception for external API errors."""
    pass


class MessagingGatewayError(ExternalAPIError):
    """Raised when an outbound WhatsApp call fails.

    Carries the provider error code, the raw cause, a message that can be
    shown to a doctor, and whether retrying the same call can succeed.
    """

    def __init__(
        self,
        code: Union[int, str, None],
        message: str,
        user_message: str = "Failed to send WhatsApp message",
        retryable: bool = False,
        subcode: Optional[int] = None,
    ):
        super().__init__(user_message)
        self.code = code
        self.message = message
        self.user_message = user_message
        self.retryable = retryable
        self.subcode = subcode

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "userMessage": self.user_message,
            "canRetry": self.retryable,
        }
