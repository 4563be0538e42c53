"""Ollama local provider (OpenAI-compatible API)."""

import logging
from typing import Any

from src.backend.base import LLMProvider
from src.backend.openai import build_messages

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """Backend using a local Ollama instance via OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        schema: dict[str, Any] | None = None,
        web_search: bool = False,
    ) -> str | None:
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for Ollama (OpenAI-compatible API). "
                "Install with: pip install 'lead-hunter[openai]'"
            )
            raise ImportError(msg) from None

        if web_search:
            logger.debug("Ollama has no web search; results come from model knowledge only")

        client = openai.AsyncOpenAI(base_url=_OLLAMA_BASE_URL, api_key="ollama")
        use_model = model or self.default_model

        logger.info("Sending prompt to Ollama (%s)...", use_model)
        response = await client.chat.completions.create(
            model=use_model,
            messages=build_messages(prompt, schema),
        )

        return response.choices[0].message.content or None
