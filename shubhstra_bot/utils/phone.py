"""
Phone number normalization utilities.
"""

import re
from typing import Optional


class PhoneNumberParser:
    """Phone number helpers for WhatsApp identities."""

    @classmethod
    def normalize(cls, phone: Optional[str]) -> str:
        """
        Reduce a phone number to its digits.

        WhatsApp sends ``from`` as bare digits ("919876543210") while
        ``display_phone_number`` may be formatted ("+91 98765-43210").

        Args:
            phone: Phone number in any format

        Returns:
            Digits only, or an empty string
        """
        if not phone:
            return ""
        # Drop a chat-id suffix such as "@c.us"
        phone = phone.split("@", 1)[0]
        return re.sub(r"\D", "", phone)

    @classmethod
    def same_number(cls, first: Optional[str], second: Optional[str]) -> bool:
        """Check if two phone numbers normalize to the same digits."""
        a = cls.normalize(first)
        return bool(a) and a == cls.normalize(second)

    @classmethod
    def mask(cls, phone: Optional[str], visible: int = 6) -> str:
        """
        Mask a phone number for display in admin digests.

        Args:
            phone: Phone number to mask
            visible: Number of leading characters to keep

        Returns:
            The leading characters followed by an ellipsis
        """
        if not phone:
            return "..."
        return f"{phone[:visible]}..."
