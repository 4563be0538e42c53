"""Google Gemini provider (google-genai SDK) with Google Search grounding."""

import logging
import os
from typing import Any

from src.backend.base import LLMProvider

logger = logging.getLogger(__name__)

# Older deployments only export the generic name.
_FALLBACK_ENV_VAR = "API_KEY"


def _to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON-shape descriptor to Gemini's upper-case type names."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {name: _to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items" and isinstance(value, dict):
            converted[key] = _to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


class GeminiProvider(LLMProvider):
    """Backend using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-3-flash-preview"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def api_key(self) -> str:
        key = os.environ.get(self.env_var) or os.environ.get(_FALLBACK_ENV_VAR)
        if not key:
            msg = f"{self.env_var} environment variable is required"
            raise ValueError(msg)
        return key

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
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for the Gemini backend. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from None

        config_kwargs: dict[str, Any] = {}
        if schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = _to_gemini_schema(schema)
        if web_search:
            config_kwargs["tools"] = [genai_types.Tool(google_search=genai_types.GoogleSearch())]

        use_model = model or self.default_model
        logger.info("Sending prompt to Gemini API (%s, web_search=%s)...", use_model, web_search)
        client = genai.Client(api_key=api_key)
        response = await client.aio.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(**config_kwargs),
        )

        return response.text or None
