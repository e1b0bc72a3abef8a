"""Anthropic Messages API backend."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Sequence

from .base import CompletionConfig, LLMProvider, Message, ProviderError, Role
from .http import post_json


class AnthropicProvider(LLMProvider):
    """Sends chat messages to ``/v1/messages``."""

    name = "anthropic"
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        request_timeout: float = 120.0,
    ) -> None:
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ProviderError("ANTHROPIC_API_KEY not set")
        self.model = model or self.DEFAULT_MODEL
        self.request_timeout = request_timeout

    def complete(self, messages: Sequence[Message], config: CompletionConfig) -> str:
        system: Optional[str] = None
        api_messages: List[Dict[str, str]] = []
        for message in messages:
            if message.role is Role.SYSTEM:
                system = message.content
            else:
                api_messages.append({"role": message.role.value, "content": message.content})

        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": config.max_tokens,
            "messages": api_messages,
            "temperature": config.temperature,
        }
        if system is not None:
            payload["system"] = system

        response = post_json(
            self.API_URL,
            payload,
            headers={"x-api-key": self.api_key or "", "anthropic-version": self.API_VERSION},
            timeout=self.request_timeout,
            provider="Anthropic",
        )
        blocks = response.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("Anthropic response missing content")
        return "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )


__all__ = ["AnthropicProvider"]
