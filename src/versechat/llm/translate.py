"""Request translation - ProviderRequest to provider wire JSON.

Each translator returns a plain dict ready for ``httpx`` ``json=``.
Streaming is always on.
"""

from __future__ import annotations

from typing import Any, Optional

from .types import ProviderRequest

ANTHROPIC_DEFAULT_MAX_TOKENS = 256


def to_openai_payload(
    request: ProviderRequest, default_max_tokens: Optional[int] = None
) -> dict[str, Any]:
    """Build a Chat Completions body.

    The system prompt, if any, becomes the first message.
    """
    messages = []
    if request.system:
        messages.append({"role": "system", "content": request.system})
    messages.extend(message.to_dict() for message in request.messages)

    payload: dict[str, Any] = {
        "model": request.model,
        "messages": messages,
        "stream": True,
    }

    max_tokens = request.max_tokens if request.max_tokens is not None else default_max_tokens
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    if request.temperature is not None:
        payload["temperature"] = request.temperature

    return payload


def to_anthropic_payload(
    request: ProviderRequest,
    default_max_tokens: Optional[int] = ANTHROPIC_DEFAULT_MAX_TOKENS,
) -> dict[str, Any]:
    """Build a Messages API body.

    The system prompt travels in its own top-level field and never appears
    in ``messages``. ``max_tokens`` is mandatory for this API.
    """
    if request.max_tokens is not None:
        max_tokens = request.max_tokens
    elif default_max_tokens is not None:
        max_tokens = default_max_tokens
    else:
        max_tokens = ANTHROPIC_DEFAULT_MAX_TOKENS

    payload: dict[str, Any] = {
        "model": request.model,
        "max_tokens": max_tokens,
        "messages": [message.to_dict() for message in request.messages],
        "stream": True,
    }
    if request.system:
        payload["system"] = request.system
    if request.temperature is not None:
        payload["temperature"] = request.temperature

    return payload


__all__ = ["ANTHROPIC_DEFAULT_MAX_TOKENS", "to_openai_payload", "to_anthropic_payload"]
