"""Tests for the provider-neutral contract and error classification."""

from __future__ import annotations

import pytest

from cda.llm import CompletionConfig, ProviderError, is_transient


@pytest.mark.parametrize(
    "message",
    [
        "Anthropic API error 429: slow down",
        "OpenAI API error 400: Rate limit reached for requests",
        "rate_limit_error",
        "Anthropic API error 529: Overloaded",
        "Too Many Requests",
    ],
)
def test_transient_signatures(message: str) -> None:
    assert is_transient(ProviderError(message))


@pytest.mark.parametrize(
    "message",
    [
        "Anthropic API error 401: invalid x-api-key",
        "OpenAI request failed: connection refused",
        "No response from OpenAI",
        "Anthropic API error 400: prompt is too long: 204291 tokens > 200000 maximum",
        "OpenAI API error 400: max_tokens 5290 exceeds the limit",
    ],
)
def test_terminal_errors(message: str) -> None:
    assert not is_transient(ProviderError(message))


def test_completion_config_defaults() -> None:
    config = CompletionConfig()

    assert config.max_tokens == 4096
    assert config.temperature == 0.0
