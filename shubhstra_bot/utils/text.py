"""
Text processing utilities.
"""

import re
from typing import Iterable, List


class TextProcessor:
    """Text processing utilities."""

    @staticmethod
    def normalize_for_matching(text: str) -> str:
        """Lowercase and trim text before keyword matching."""
        if not isinstance(text, str):
            text = str(text or "")
        return text.strip().lower()

    @staticmethod
    def contains_any(text: str, keywords: Iterable[str]) -> bool:
        """Check if any keyword occurs as a substring of already-normalized text."""
        return any(keyword and keyword in text for keyword in keywords)

    @staticmethod
    def underscore_name(name: str) -> str:
        """Collapse whitespace runs to underscores, for filenames."""
        return re.sub(r"\s+", "_", (name or "").strip()) or "Patient"

    @staticmethod
    def split_text_for_whatsapp(text: str, max_length: int = 4096) -> List[str]:
        """Split text into chunks suitable for WhatsApp, keeping line breaks."""
        if len(text) <= max_length:
            return [text]

        chunks = []
        current_chunk = ""

        for line in text.split("\n"):
            candidate = f"{current_chunk}\n{line}" if current_chunk else line
            if len(candidate) <= max_length:
                current_chunk = candidate
                continue

            if current_chunk:
                chunks.append(current_chunk)
                current_chunk = ""

            if len(line) <= max_length:
                current_chunk = line
                continue

            for word in line.split():
                if len(current_chunk + " " + word) <= max_length:
                    current_chunk += (" " + word) if current_chunk else word
                else:
                    if current_chunk:
                        chunks.append(current_chunk)
                    while len(word) > max_length:
                        chunks.append(word[:max_length])
                        word = word[max_length:]
                    current_chunk = word

        if current_chunk:
            chunks.append(current_chunk)

        return chunks
