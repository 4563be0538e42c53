"""Anthropic Claude provider with the server-side web search tool."""

import logging
from typing import Any

from src.backend.base import LLMProvider, schema_instruction

logger = logging.getLogger(__name__)

_WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search", "max_uses": 5}


class AnthropicProvider(LLMProvider):
    """Backend using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

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
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for the Anthropic backend. "
                "Install with: pip install 'lead-hunter[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.AsyncAnthropic(api_key=api_key)
        use_model = model or self.default_model

        kwargs: dict[str, Any] = {
            "model": use_model,
            "max_tokens": 8192,
            "messages": [{"role": "user", "content": prompt}],
        }
        if schema is not None:
            kwargs["system"] = schema_instruction(schema)
        if web_search:
            kwargs["tools"] = [_WEB_SEARCH_TOOL]

        logger.info("Sending prompt to Anthropic API (%s, web_search=%s)...", use_model, web_search)
        message = await client.messages.create(**kwargs)

        # Web search interleaves tool blocks with text; keep only the text.
        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        return text or None
