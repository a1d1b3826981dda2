"""
Generation fallback adapter.

Wraps a ``GenerationService`` so that every call resolves to a string a
patient can read: prompts are fixed, input is validated, a hard timeout is
applied, and failures are classified into a small set of canned replies.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

import httpx
import openai

from ...core.exceptions import (
    GenerationCredentialsError,
    GenerationQuotaError,
    GenerationTimeoutError,
)
from ...utils.logging import get_logger
from .base import GenerationService
from .prompts import build_health_prompt, build_report_prompt

logger = get_logger("shubhstra.generation")

EMPTY_QUERY_MESSAGE = "Please describe your health concern, and I'll try to help."
EMPTY_IMAGE_MESSAGE = (
    "I couldn't read that image. Please upload a clear photo of your lab test, "
    "blood test, X-ray, or medical prescription."
)
EMPTY_TEXT_REPLY = "I couldn't generate a response. Please type 'Hi' to see the menu."
EMPTY_IMAGE_REPLY = "I couldn't analyze this image. Please try uploading a clearer photo."


class GenerationFailure(str, Enum):
    """Kinds of generation failure a patient is told about."""

    CREDENTIALS = "credentials"
    QUOTA = "quota"
    TIMEOUT = "timeout"
    GENERIC = "generic"


@dataclass(frozen=True)
class FallbackMessages:
    """One canned reply per failure kind."""

    credentials: str
    quota: str
    timeout: str
    generic: str

    def for_failure(self, failure: GenerationFailure) -> str:
        return getattr(self, failure.value)


TEXT_FALLBACKS = FallbackMessages(
    credentials="I'm currently unable to process your query. Please type 'Hi' to see the menu or book an appointment.",
    quota="I'm experiencing high demand right now. Please type 'Hi' to see the menu or book an appointment directly.",
    timeout="I'm taking too long to respond. Please type 'Hi' to see the menu.",
    generic="I couldn't process your question right now. Please type 'Hi' to see the menu or book an appointment.",
)

IMAGE_FALLBACKS = FallbackMessages(
    credentials="I'm currently unable to analyze images. Please type 'Hi' to see the menu.",
    quota="I'm experiencing high demand right now. Please try again in a few minutes.",
    timeout="The image analysis is taking too long. Please try with a smaller image or try again later.",
    generic="I couldn't analyze this image. Please try again or type 'Hi' to see the menu.",
)

_TIMEOUT_ERRORS = (
    asyncio.TimeoutError,
    TimeoutError,
    GenerationTimeoutError,
    httpx.TimeoutException,
    openai.APITimeoutError,
)


def classify_generation_error(error: BaseException) -> GenerationFailure:
    """Map any exception raised by a generation call to a failure kind."""
    if isinstance(error, (GenerationCredentialsError, openai.AuthenticationError, openai.PermissionDeniedError)):
        return GenerationFailure.CREDENTIALS
    if isinstance(error, (GenerationQuotaError, openai.RateLimitError)):
        return GenerationFailure.QUOTA
    if isinstance(error, _TIMEOUT_ERRORS):
        return GenerationFailure.TIMEOUT

    message = str(error).lower()
    if "api key" in message or "api_key" in message:
        return GenerationFailure.CREDENTIALS
    if any(marker in message for marker in ("quota", "rate limit", "rate_limit", "429", "resource exhausted")):
        return GenerationFailure.QUOTA
    if "timeout" in message or "timed out" in message:
        return GenerationFailure.TIMEOUT
    return GenerationFailure.GENERIC


class GenerationFallbackAdapter:
    """Last-resort free-text answers for health questions and report photos."""

    def __init__(
        self,
        generator: GenerationService,
        text_timeout: float = 10.0,
        vision_timeout: float = 30.0,
    ):
        self.generator = generator
        self.text_timeout = text_timeout
        self.vision_timeout = vision_timeout

    async def get_health_advice(self, text: str, clinic_name: str = "our clinic") -> str:
        """
        Answer a free-text health question.

        Args:
            text: Patient message
            clinic_name: Name used to personalize the prompt

        Returns:
            The generated answer, or a canned reply when generation fails
        """
        if not text or not text.strip():
            return EMPTY_QUERY_MESSAGE

        prompt = build_health_prompt(text.strip(), clinic_name)
        try:
            reply = await asyncio.wait_for(self.generator.generate_text(prompt), timeout=self.text_timeout)
        except Exception as e:
            failure = classify_generation_error(e)
            logger.warning({"event": "generation_failed", "kind": failure.value, "error": repr(e)})
            return TEXT_FALLBACKS.for_failure(failure)

        reply = (reply or "").strip()
        return reply or EMPTY_TEXT_REPLY

    async def analyze_image(self, image_bytes: bytes, mime_type: str = "image/jpeg", clinic_name: str = "our clinic") -> str:
        """Analyze a photo of a medical report."""
        if not image_bytes:
            return EMPTY_IMAGE_MESSAGE

        prompt = build_report_prompt(clinic_name)
        try:
            reply = await asyncio.wait_for(
                self.generator.generate_from_image(prompt, image_bytes, mime_type or "image/jpeg"),
                timeout=self.vision_timeout,
            )
        except Exception as e:
            failure = classify_generation_error(e)
            logger.warning({"event": "image_analysis_failed", "kind": failure.value, "error": repr(e)})
            return IMAGE_FALLBACKS.for_failure(failure)

        reply = (reply or "").strip()
        return reply or EMPTY_IMAGE_REPLY
