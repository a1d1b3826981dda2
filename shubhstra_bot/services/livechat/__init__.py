"""
Live chat services.
"""

from .service import LiveChatService

__all__ = ["LiveChatService"]
