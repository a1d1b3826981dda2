"""
OpenAI generation service built on the Agents SDK.
"""

import base64
from typing import Optional

from agents import Agent, ModelSettings, Runner, set_default_openai_key

from ...config.external_apis import OpenAIConfig
from ...core.exceptions import GenerationCredentialsError, GenerationError
from ...utils.logging import get_logger

logger = get_logger("shubhstra.generation")


class AgentsGenerationService:
    """``GenerationService`` that runs single-turn agents.

    The full prompt, rules included, arrives as the user input so the agent
    itself carries no instructions.
    """

    def __init__(self, config: Optional[OpenAIConfig] = None):
        self.config = config or OpenAIConfig()
        if self.config.is_configured():
            set_default_openai_key(self.config.api_key)
        self.text_agent = self._create_agent(
            "Shubhstra health assistant",
            self.config.text_temperature,
            self.config.max_text_tokens,
        )
        self.vision_agent = self._create_agent(
            "Shubhstra report analyst",
            self.config.vision_temperature,
            self.config.max_vision_tokens,
        )

    def _create_agent(self, name: str, temperature: float, max_tokens: int) -> Agent:
        return Agent(
            name=name,
            model=self.config.model,
            model_settings=ModelSettings(temperature=temperature, max_tokens=max_tokens),
        )

    def _require_key(self) -> None:
        if not self.config.is_configured():
            raise GenerationCredentialsError("OPENAI_API_KEY is not configured")

    async def generate_text(self, prompt: str) -> str:
        self._require_key()
        result = await Runner.run(self.text_agent, prompt)
        return self._final_text(result)

    async def generate_from_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        self._require_key()
        encoded = base64.b64encode(image_bytes).decode("ascii")
        items = [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {
                        "type": "input_image",
                        "image_url": f"data:{mime_type};base64,{encoded}",
                        "detail": "auto",
                    },
                ],
            }
        ]
        result = await Runner.run(self.vision_agent, items)
        return self._final_text(result)

    @staticmethod
    def _final_text(result) -> str:
        output = result.final_output
        if output is None:
            raise GenerationError("Agent produced no output")
        return str(output)
