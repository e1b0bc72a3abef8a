"""Enrichment providers (remote text completion backends)."""

from __future__ import annotations

from .anthropic import AnthropicProvider
from .base import CompletionConfig, LLMProvider, Message, ProviderError, Role, is_transient
from .ollama import OllamaProvider
from .openai import OpenAIProvider

_ALIASES = {
    "anthropic": "anthropic",
    "claude": "anthropic",
    "openai": "openai",
    "gpt": "openai",
    "ollama": "ollama",
    "local": "ollama",
}


def get_provider(
    name: str, model: str | None = None, *, request_timeout: float | None = None
) -> LLMProvider:
    """Instantiate the backend registered under ``name``."""
    canonical = _ALIASES.get(name.strip().lower())
    kwargs = {} if request_timeout is None else {"request_timeout": request_timeout}
    if canonical == "anthropic":
        return AnthropicProvider(model, **kwargs)
    if canonical == "openai":
        return OpenAIProvider(model, **kwargs)
    if canonical == "ollama":
        return OllamaProvider(model, **kwargs)
    raise ValueError(f"Unknown LLM provider: {name}. Supported: anthropic, openai, ollama")


__all__ = [
    "AnthropicProvider",
    "CompletionConfig",
    "LLMProvider",
    "Message",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderError",
    "Role",
    "get_provider",
    "is_transient",
]
