"""LLM Provider - streaming HTTP calls to OpenAI and Anthropic.

Each provider owns a credential resolved from the environment and exposes
``stream(request)``, an async iterator of StreamEvents:

    provider = LLMProvider.from_name("anthropic")
    async for event in provider.stream(request):
        ...

Adding a provider means subclassing LLMProvider, adding a preset in
``llm.config`` and registering the class in ``PROVIDERS``.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
from opentelemetry import trace

from ..errors import ConfigurationError, SessionError, TransportError
from .config import PRESETS, LLMConfig
from .decoder import AnthropicStreamDecoder, OpenAIStreamDecoder, StreamDecoder, decode_stream
from .translate import to_anthropic_payload, to_openai_payload
from .types import ProviderRequest, StreamDelta, StreamEvent, StreamStart

# Get tracer for LLM operation spans
tracer = trace.get_tracer(__name__)


def require_env(key: str) -> str:
    """Return a non-empty environment variable or raise ConfigurationError."""
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(f"Missing required environment variable: {key}")
    return value


class LLMProvider:
    """Base class for streaming providers."""

    name = "base"
    display_name = "LLM"
    decoder_class: type[StreamDecoder] = StreamDecoder

    def __init__(
        self,
        config: LLMConfig,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize provider.

        Args:
            config: Connection settings
            api_key: Resolved credential
            client: Shared HTTP client (a new one is opened per call when None)
        """
        self.config = config
        self.api_key = api_key
        self._client = client

    @classmethod
    def from_name(
        cls,
        provider_name: str,
        config: Optional[LLMConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> LLMProvider:
        """Create provider from name.

        Args:
            provider_name: One of "openai", "anthropic" (case-insensitive)
            config: Settings override (defaults to the built-in preset)
            client: Optional shared HTTP client

        Raises:
            SessionError: Unknown provider name
            ConfigurationError: Credential variable unset
        """
        key = provider_name.strip().lower()
        provider_cls = PROVIDERS.get(key)
        if provider_cls is None:
            raise SessionError(
                f"Unknown provider: {provider_name} (supported: {', '.join(PROVIDERS)})"
            )
        config = config or PRESETS[key]
        return provider_cls(config, require_env(config.api_key_env), client=client)

    @property
    def endpoint(self) -> str:
        raise NotImplementedError

    def headers(self) -> dict[str, str]:
        raise NotImplementedError

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        raise NotImplementedError

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.config.timeout_ms / 1000.0) as client:
            yield client

    async def stream(self, request: ProviderRequest) -> AsyncIterator[StreamEvent]:
        """Start a streaming exchange.

        Yields StreamStart once the server answers with a success status,
        then deltas, then exactly one StreamDone.

        Raises:
            TransportError: Connection failure, timeout or non-success status
        """
        payload = self.build_payload(request)
        response_length = 0

        with tracer.start_as_current_span(
            "llm.stream",
            attributes={
                "llm.provider": self.name,
                "llm.model": request.model,
                "llm.messages.count": len(request.messages),
                "llm.max_tokens": payload.get("max_tokens") or 0,
            },
        ) as span:
            try:
                async with self._http_client() as client:
                    async with client.stream(
                        "POST", self.endpoint, json=payload, headers=self.headers()
                    ) as response:
                        if not response.is_success:
                            body = (await response.aread()).decode("utf-8", errors="replace")
                            raise TransportError.from_status(
                                self.display_name, response.status_code, body
                            )

                        yield StreamStart()

                        decoder = self.decoder_class()
                        async for event in decode_stream(decoder, response.aiter_bytes()):
                            if isinstance(event, StreamDelta):
                                response_length += len(event.text)
                            yield event

                span.set_attribute("llm.response.length", response_length)
                span.set_attribute("llm.status", "success")
                span.set_status(trace.Status(trace.StatusCode.OK))

            except TransportError as e:
                span.set_attribute("llm.status", "error")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                raise
            except httpx.TimeoutException as e:
                span.set_attribute("llm.status", "timeout")
                span.record_exception(e)
                raise TransportError(f"{self.display_name} request timed out") from e
            except httpx.HTTPError as e:
                span.set_attribute("llm.status", "error")
                span.record_exception(e)
                raise TransportError(f"Failed to send {self.display_name} request: {e}") from e


class OpenAIProvider(LLMProvider):
    """Chat Completions API with bearer auth."""

    name = "openai"
    display_name = "OpenAI"
    decoder_class = OpenAIStreamDecoder

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        return to_openai_payload(request, default_max_tokens=self.config.default_max_tokens)


class AnthropicProvider(LLMProvider):
    """Messages API with ``x-api-key`` and ``anthropic-version`` headers."""

    name = "anthropic"
    display_name = "Anthropic"
    decoder_class = AnthropicStreamDecoder

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/messages"

    def headers(self) -> dict[str, str]:
        headers = {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        if self.config.version:
            headers["anthropic-version"] = self.config.version
        return headers

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        return to_anthropic_payload(request, default_max_tokens=self.config.default_max_tokens)


PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "PROVIDERS",
    "require_env",
]
