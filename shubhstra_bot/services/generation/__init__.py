"""
AI generation services.
"""

from .adapter import (
    IMAGE_FALLBACKS,
    TEXT_FALLBACKS,
    FallbackMessages,
    GenerationFailure,
    GenerationFallbackAdapter,
    classify_generation_error,
)
from .base import GenerationService
from .service import AgentsGenerationService

__all__ = [
    "IMAGE_FALLBACKS",
    "TEXT_FALLBACKS",
    "FallbackMessages",
    "GenerationFailure",
    "GenerationFallbackAdapter",
    "classify_generation_error",
    "GenerationService",
    "AgentsGenerationService",
]
