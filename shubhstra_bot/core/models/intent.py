"""
Intent model.
"""

from dataclasses import dataclass
from typing import Optional

from ..enums import IntentKind


@dataclass(frozen=True)
class Intent:
    """Classification of one inbound message.

    ``rating`` is set only for ``IntentKind.RATING``; ``argument`` holds the
    text after an admin slash-command.
    """

    kind: IntentKind
    rating: Optional[int] = None
    argument: Optional[str] = None
