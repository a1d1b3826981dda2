"""
Doctor admin commands.
"""

from .commands import AdminCommandProcessor

__all__ = ["AdminCommandProcessor"]
