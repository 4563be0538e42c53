"""Abstract base class for search/generation backends and shared helpers."""

import json
import os
import re
from abc import ABC, abstractmethod
from typing import Any


def strip_code_fences(raw_text: str) -> str:
    """Remove a markdown ```json ... ``` wrapper if the model added one."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    return re.sub(r"\n?```\s*$", "", cleaned)


def schema_instruction(schema: dict[str, Any]) -> str:
    """System instruction for providers without native structured output."""
    return (
        "Respond with JSON only (no markdown, no explanation). "
        "The response must match this JSON schema:\n"
        f"{json.dumps(schema, ensure_ascii=False)}"
    )


class LLMProvider(ABC):
    """Base class that every backend provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'gemini')."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        schema: dict[str, Any] | None = None,
        web_search: bool = False,
    ) -> str | None:
        """Send a prompt to the backend and return its raw text.

        Args:
            prompt: Instruction prompt.
            model: Override the provider's default model. None uses default.
            schema: JSON-shape descriptor the output must follow. None accepts
                free text.
            web_search: Enable live web search augmentation where supported.

        Returns:
            Raw response text, or None when the backend returned no text.
        """

    def api_key(self) -> str:
        """Read the API key from the environment.

        Raises:
            ValueError: If the variable is unset or empty.
        """
        name = self.env_var
        key = os.environ.get(name) if name else None
        if not key:
            msg = f"{name} environment variable is required"
            raise ValueError(msg)
        return key
