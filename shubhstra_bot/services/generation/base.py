"""
Generation-service interface.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationService(Protocol):
    """Plain-text AI generation. Any failure is raised as an exception."""

    async def generate_text(self, prompt: str) -> str: ...

    async def generate_from_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str: ...
