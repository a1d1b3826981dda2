"""
Knowledge-base enums.
"""

from enum import Enum


class KnowledgeCategory(str, Enum):
    """Tier of a doctor-authored knowledge entry."""

    MEDICAL = "medical"
    ADMINISTRATIVE = "administrative"
