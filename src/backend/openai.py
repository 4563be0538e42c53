"""OpenAI provider."""

import logging
from typing import Any

from src.backend.base import LLMProvider, schema_instruction

logger = logging.getLogger(__name__)


def build_messages(prompt: str, schema: dict[str, Any] | None) -> list[dict[str, str]]:
    """Chat messages for OpenAI-compatible APIs; the schema rides in the system turn."""
    messages: list[dict[str, str]] = []
    if schema is not None:
        messages.append({"role": "system", "content": schema_instruction(schema)})
    messages.append({"role": "user", "content": prompt})
    return messages


class OpenAIProvider(LLMProvider):
    """Backend using the OpenAI chat completions API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        schema: dict[str, Any] | None = None,
        web_search: bool = False,
    ) -> str | None:
        api_key = self.api_key()

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for the OpenAI backend. "
                "Install with: pip install 'lead-hunter[openai]'"
            )
            raise ImportError(msg) from None

        if web_search:
            logger.debug("OpenAI chat completions have no web search; continuing without it")

        client = openai.AsyncOpenAI(api_key=api_key)
        use_model = model or self.default_model

        logger.info("Sending prompt to OpenAI API (%s)...", use_model)
        response = await client.chat.completions.create(
            model=use_model,
            messages=build_messages(prompt, schema),
        )

        return response.choices[0].message.content or None
