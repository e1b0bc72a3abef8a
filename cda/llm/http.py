"""JSON-over-HTTP helper shared by the provider backends."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .base import ProviderError


def post_json(
    url: str,
    payload: Mapping[str, Any],
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float = 120.0,
    provider: str = "LLM",
) -> Dict[str, Any]:
    """POST ``payload`` and return the decoded JSON object."""
    data = json.dumps(payload).encode("utf-8")
    request_headers = {"Content-Type": "application/json"}
    if headers:
        request_headers.update(headers)
    request = Request(url, data=data, headers=request_headers, method="POST")

    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = ""
        try:
            detail = exc.read().decode("utf-8", errors="ignore").strip()
        except (OSError, AttributeError):
            detail = ""
        message = detail or str(exc.reason)
        raise ProviderError(f"{provider} API error {exc.code}: {message}") from exc
    except URLError as exc:
        raise ProviderError(f"{provider} request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise ProviderError(f"{provider} request timed out after {timeout}s") from exc

    try:
        decoded = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProviderError(f"{provider} returned invalid JSON") from exc
    if not isinstance(decoded, dict):
        raise ProviderError(f"{provider} returned an unexpected payload")
    return decoded


__all__ = ["post_json"]
