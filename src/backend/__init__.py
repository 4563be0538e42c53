"""Backend provider registry with lazy loading.

Usage:
    from src.backend import get_provider

    provider = get_provider("gemini")
    text = await provider.generate(prompt, schema=schema, web_search=True)
"""

from __future__ import annotations

import importlib

from src.backend.base import LLMProvider, strip_code_fences

__all__ = ["LLMProvider", "available_providers", "get_provider", "strip_code_fences"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("src.backend.anthropic", "AnthropicProvider"),
    "gemini": ("src.backend.gemini", "GeminiProvider"),
    "ollama": ("src.backend.ollama", "OllamaProvider"),
    "openai": ("src.backend.openai", "OpenAIProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return a backend provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
