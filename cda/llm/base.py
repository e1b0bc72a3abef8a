"""Provider-neutral chat completion contract."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    role: Role
    content: str


@dataclass(frozen=True)
class CompletionConfig:
    """Per-request generation settings."""

    max_tokens: int = 4096
    temperature: float = 0.0


class ProviderError(RuntimeError):
    """Raised by providers; the message carries the provider's explanation."""


_TRANSIENT_SIGNATURES = (
    "rate limit",
    "rate_limit",
    "ratelimit",
    "too many requests",
    "overloaded",
)
# Status codes only count in the "API error <code>" form raised by post_json.
_TRANSIENT_STATUS = re.compile(r"\berror (?:429|529)\b")


def is_transient(error: BaseException) -> bool:
    """Return True when ``error`` looks like rate limiting or overload."""
    message = str(error).lower()
    if _TRANSIENT_STATUS.search(message):
        return True
    return any(signature in message for signature in _TRANSIENT_SIGNATURES)


class LLMProvider(ABC):
    """A remote text-completion backend."""

    name: str = "provider"

    @abstractmethod
    def complete(self, messages: Sequence[Message], config: CompletionConfig) -> str:
        """Return the completion text or raise :class:`ProviderError`."""


__all__ = [
    "CompletionConfig",
    "LLMProvider",
    "Message",
    "ProviderError",
    "Role",
    "is_transient",
]
