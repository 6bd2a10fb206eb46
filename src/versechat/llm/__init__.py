"""LLM module - Streaming HTTP calls to LLM APIs.

This module provides:
- LLMProvider: OpenAI and Anthropic streaming clients
- LLMConfig: Connection settings and presets
- Stream decoders: SSE-style bytes to StreamEvents
- Translators: ProviderRequest to provider wire JSON
"""

from .config import PRESETS, LLMConfig
from .decoder import AnthropicStreamDecoder, OpenAIStreamDecoder, StreamDecoder, decode_stream
from .provider import PROVIDERS, AnthropicProvider, LLMProvider, OpenAIProvider
from .translate import to_anthropic_payload, to_openai_payload
from .types import (
    Message,
    ProviderRequest,
    StreamDelta,
    StreamDone,
    StreamEvent,
    StreamStart,
)

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "PROVIDERS",
    "LLMConfig",
    "PRESETS",
    "StreamDecoder",
    "OpenAIStreamDecoder",
    "AnthropicStreamDecoder",
    "decode_stream",
    "to_openai_payload",
    "to_anthropic_payload",
    "Message",
    "ProviderRequest",
    "StreamEvent",
    "StreamStart",
    "StreamDelta",
    "StreamDone",
]
