"""OpenAI-compatible chat completions backend."""

from __future__ import annotations

import os
from typing import Sequence

from .base import CompletionConfig, LLMProvider, Message, ProviderError
from .http import post_json


class OpenAIProvider(LLMProvider):
    name = "openai"
    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        request_timeout: float = 120.0,
    ) -> None:
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ProviderError("OPENAI_API_KEY not set")
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or os.getenv("OPENAI_BASE_URL") or self.DEFAULT_BASE_URL).rstrip("/")
        self.request_timeout = request_timeout

    def complete(self, messages: Sequence[Message], config: CompletionConfig) -> str:
        payload = {
            "model": self.model,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "messages": [
                {"role": message.role.value, "content": message.content} for message in messages
            ],
        }
        response = post_json(
            f"{self.base_url}/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.request_timeout,
            provider="OpenAI",
        )
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ProviderError("No response from OpenAI")
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        raise ProviderError("No response from OpenAI")


__all__ = ["OpenAIProvider"]
