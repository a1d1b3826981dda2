"""
Inbound message routing.
"""

from .classifier import IntentClassifier
from .keywords import KEYWORDS, keywords_for
from .locks import PatientLockRegistry
from .router import MessageRouter

__all__ = [
    "IntentClassifier",
    "KEYWORDS",
    "keywords_for",
    "PatientLockRegistry",
    "MessageRouter",
]
