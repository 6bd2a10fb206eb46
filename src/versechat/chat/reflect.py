"""One-shot reflection on a passage, streamed through the chat providers."""

from __future__ import annotations

from typing import Optional, Sequence

from ..config import ChatConfig
from ..llm.provider import LLMProvider
from ..llm.types import Message, ProviderRequest, StreamDelta
from .history import build_passage_text
from .session import ProviderFactory
from .sink import OutputSink

REFLECT_SYSTEM_PROMPT = "You are a thoughtful Bible assistant."


def build_reflection_prompt(passages: Sequence[str]) -> str:
    return (
        "You are a helpful assistant. Provide a concise reflection on the passage below.\n\n"
        f"Passage:\n{build_passage_text(passages)}\nResponse:"
    )


async def reflect(
    passages: Sequence[str],
    sink: OutputSink,
    config: Optional[ChatConfig] = None,
    provider_factory: Optional[ProviderFactory] = None,
) -> str:
    """Stream a single reflection on ``passages`` to ``sink``.

    Errors propagate; there is no session to fall back to.

    Raises:
        SessionError: Unknown provider
        ConfigurationError: Missing credential or out-of-range limits
        TransportError: The request failed
    """
    config = config or ChatConfig()
    config.validate()
    factory = provider_factory or LLMProvider.from_name
    provider = factory(config.provider)

    request = ProviderRequest(
        model=config.resolved_model(),
        system=REFLECT_SYSTEM_PROMPT,
        messages=[Message("user", build_reflection_prompt(passages))],
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )

    chunks: list[str] = []
    sink.begin_response()
    async for event in provider.stream(request):
        if isinstance(event, StreamDelta):
            sink.write_delta(event.text)
            chunks.append(event.text)

    text = "".join(chunks)
    sink.end_response(text)
    return text


__all__ = ["REFLECT_SYSTEM_PROMPT", "build_reflection_prompt", "reflect"]
