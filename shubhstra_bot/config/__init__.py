"""
Configuration management for the Shubhstra clinic bot.
"""

from .settings import Settings, get_settings
from .external_apis import OpenAIConfig, WhatsAppCloudConfig

__all__ = [
    "Settings",
    "get_settings",
    "OpenAIConfig",
    "WhatsAppCloudConfig",
]
