"""
Tests for the generation fallback adapter.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from shubhstra_bot.core.exceptions import (
    GenerationCredentialsError,
    GenerationError,
    GenerationQuotaError,
    GenerationTimeoutError,
)
from shubhstra_bot.services.generation import (
    IMAGE_FALLBACKS,
    TEXT_FALLBACKS,
    AgentsGenerationService,
    GenerationFailure,
    GenerationFallbackAdapter,
    classify_generation_error,
)
from shubhstra_bot.services.generation.adapter import (
    EMPTY_IMAGE_MESSAGE,
    EMPTY_IMAGE_REPLY,
    EMPTY_QUERY_MESSAGE,
    EMPTY_TEXT_REPLY,
)
from shubhstra_bot.services.generation.prompts import BOOKING_CLOSER, build_health_prompt


def _generator(**kwargs):
    generator = Mock(spec=AgentsGenerationService)
    generator.generate_text = AsyncMock(**kwargs)
    generator.generate_from_image = AsyncMock(**kwargs)
    return generator


class TestHealthAdvice:
    """Test free-text health answers."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test the generated answer is returned trimmed."""
        generator = _generator(return_value="  Drink warm water.  ")
        adapter = GenerationFallbackAdapter(generator)

        reply = await adapter.get_health_advice("I have a sore throat", "Shubh Clinic")

        assert reply == "Drink warm water."
        prompt = generator.generate_text.await_args.args[0]
        assert "I have a sore throat" in prompt
        assert "Shubh Clinic" in prompt
        assert BOOKING_CLOSER in prompt

    @pytest.mark.asyncio
    async def test_empty_query_skips_generation(self):
        """Test empty input never reaches the backend."""
        generator = _generator(return_value="unused")
        adapter = GenerationFallbackAdapter(generator)

        assert await adapter.get_health_advice("   ") == EMPTY_QUERY_MESSAGE
        generator.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        """Test a blank answer becomes the fixed empty reply."""
        adapter = GenerationFallbackAdapter(_generator(return_value=""))
        assert await adapter.get_health_advice("fever") == EMPTY_TEXT_REPLY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,expected", [
        (GenerationCredentialsError("OPENAI_API_KEY is not configured"), TEXT_FALLBACKS.credentials),
        (GenerationQuotaError("quota exceeded"), TEXT_FALLBACKS.quota),
        (GenerationTimeoutError("slow"), TEXT_FALLBACKS.timeout),
        (RuntimeError("boom"), TEXT_FALLBACKS.generic),
    ])
    async def test_failures_map_to_fixed_strings(self, error, expected):
        """Test each failure kind has its own canned reply."""
        adapter = GenerationFallbackAdapter(_generator(side_effect=error))
        assert await adapter.get_health_advice("fever") == expected

    @pytest.mark.asyncio
    async def test_timeout_is_enforced(self):
        """Test a slow backend is cut off at the configured timeout."""
        async def slow(prompt):
            await asyncio.sleep(5)
            return "too late"

        generator = Mock(spec=AgentsGenerationService)
        generator.generate_text = AsyncMock(side_effect=slow)
        adapter = GenerationFallbackAdapter(generator, text_timeout=0.01)

        assert await adapter.get_health_advice("fever") == TEXT_FALLBACKS.timeout


class TestImageAnalysis:
    """Test report photo analysis."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test the image and its mime type reach the backend."""
        generator = _generator(return_value="📋 Report Type: CBC")
        adapter = GenerationFallbackAdapter(generator)

        reply = await adapter.analyze_image(b"bytes", "image/png", "Shubh Clinic")

        assert reply == "📋 Report Type: CBC"
        prompt, image_bytes, mime_type = generator.generate_from_image.await_args.args
        assert "Shubh Clinic" in prompt
        assert image_bytes == b"bytes"
        assert mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_empty_image(self):
        """Test empty bytes never reach the backend."""
        generator = _generator(return_value="unused")
        adapter = GenerationFallbackAdapter(generator)

        assert await adapter.analyze_image(b"") == EMPTY_IMAGE_MESSAGE
        generator.generate_from_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        """Test a blank analysis."""
        adapter = GenerationFallbackAdapter(_generator(return_value=None))
        assert await adapter.analyze_image(b"bytes") == EMPTY_IMAGE_REPLY

    @pytest.mark.asyncio
    async def test_failure(self):
        """Test image failures use the image fallbacks."""
        adapter = GenerationFallbackAdapter(_generator(side_effect=GenerationError("bad output")))
        assert await adapter.analyze_image(b"bytes") == IMAGE_FALLBACKS.generic


class TestErrorClassification:
    """Test mapping of arbitrary errors to failure kinds."""

    @pytest.mark.parametrize("message,expected", [
        ("Incorrect API key provided", GenerationFailure.CREDENTIALS),
        ("Error 429: rate limit reached", GenerationFailure.QUOTA),
        ("RESOURCE EXHAUSTED", GenerationFailure.QUOTA),
        ("request timed out", GenerationFailure.TIMEOUT),
        ("something else", GenerationFailure.GENERIC),
    ])
    def test_message_markers(self, message, expected):
        """Test classification falls back to the error text."""
        assert classify_generation_error(RuntimeError(message)) == expected

    def test_asyncio_timeout(self):
        """Test asyncio timeouts are timeouts."""
        assert classify_generation_error(asyncio.TimeoutError()) == GenerationFailure.TIMEOUT


class TestPrompts:
    """Test prompt construction."""

    def test_health_prompt_carries_query(self):
        """Test the query and clinic are substituted."""
        prompt = build_health_prompt("how to reduce fever", "Shubh Clinic")
        assert "Patient Query: how to reduce fever" in prompt
        assert "{" not in prompt


class TestAgentsGenerationService:
    """Test the Agents SDK backend without calling it."""

    @pytest.mark.asyncio
    async def test_missing_key_raises_credentials_error(self):
        """Test no request is attempted without an API key."""
        service = AgentsGenerationService()
        with pytest.raises(GenerationCredentialsError):
            await service.generate_text("hello")
        with pytest.raises(GenerationCredentialsError):
            await service.generate_from_image("prompt", b"bytes", "image/jpeg")

    def test_final_text_requires_output(self):
        """Test an empty run result is an error."""
        with pytest.raises(GenerationError):
            AgentsGenerationService._final_text(Mock(final_output=None))
        assert AgentsGenerationService._final_text(Mock(final_output="ok")) == "ok"
