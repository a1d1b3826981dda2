"""
API route handlers.
"""

from .health import HealthHandler
from .live_chat import LiveChatHandler

__all__ = [
    "HealthHandler",
    "LiveChatHandler",
]
