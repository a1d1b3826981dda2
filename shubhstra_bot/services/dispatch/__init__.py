"""
Response dispatch.
"""

from .dispatcher import ResponseDispatcher
from .templates import render

__all__ = ["ResponseDispatcher", "render"]
