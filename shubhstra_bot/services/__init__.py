"""
Service layer for the Shubhstra clinic bot.
"""

from .factory import BotServices, build_services, build_store

__all__ = [
    "BotServices",
    "build_services",
    "build_store",
]
