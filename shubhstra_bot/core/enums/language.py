"""
Language-related enums.
"""

from enum import Enum


class Language(str, Enum):
    """Supported patient languages."""

    ENGLISH = "en"
    MARATHI = "mr"
    HINDI = "hi"

    @classmethod
    def from_code(cls, code: str) -> "Language":
        """Convert a stored language code, defaulting to English."""
        if not code:
            return cls.ENGLISH
        try:
            return cls(code.strip().lower()[:2])
        except ValueError:
            return cls.ENGLISH

    @classmethod
    def detect_from_text(cls, text: str) -> "Language":
        """Guess the language of free text. Devanagari maps to Marathi."""
        if not text:
            return cls.ENGLISH

        if any("\u0900" <= char <= "\u097f" for char in text):
            return cls.MARATHI

        return cls.ENGLISH
