"""Local Ollama backend."""

from __future__ import annotations

import os
from typing import Sequence

from .base import CompletionConfig, LLMProvider, Message, ProviderError
from .http import post_json


class OllamaProvider(LLMProvider):
    """Non-streaming calls to ``/api/chat`` on a local Ollama server."""

    name = "ollama"
    DEFAULT_MODEL = "llama3"
    DEFAULT_URL = "http://localhost:11434"

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        request_timeout: float = 300.0,
    ) -> None:
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or os.getenv("OLLAMA_URL") or self.DEFAULT_URL).rstrip("/")
        self.request_timeout = request_timeout

    def complete(self, messages: Sequence[Message], config: CompletionConfig) -> str:
        payload = {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": message.role.value, "content": message.content} for message in messages
            ],
            "options": {
                "num_predict": config.max_tokens,
                "temperature": config.temperature,
            },
        }
        response = post_json(
            f"{self.base_url}/api/chat",
            payload,
            timeout=self.request_timeout,
            provider="Ollama",
        )
        message = response.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        raise ProviderError("Ollama response missing message content")


__all__ = ["OllamaProvider"]
