"""Test fixtures and configuration for versechat tests.

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures (recording sink, scripted providers)
    ├── test_config.py       # versechat.toml / .env loading
    └── unit/                # Unit tests (no network, use mocks)
        ├── test_decoder.py
        ├── test_translate.py
        ├── test_provider.py # httpx.MockTransport
        ├── test_history.py
        ├── test_commands.py
        ├── test_session.py
        └── test_cli.py

Running tests:
    pytest tests -v
    pytest tests/unit -v
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional, Sequence

import pytest

from versechat.errors import ConfigurationError, SessionError
from versechat.llm.types import ProviderRequest, StreamDelta, StreamDone, StreamEvent, StreamStart

# ============================================================================
# Mock Fixtures
# ============================================================================


class RecordingSink:
    """OutputSink that records every call."""

    def __init__(self):
        self.begun = 0
        self.deltas: list[str] = []
        self.responses: list[str] = []
        self.infos: list[str] = []
        self.errors: list[str] = []
        self.help: list[str] = []

    def begin_response(self) -> None:
        self.begun += 1

    def write_delta(self, text: str) -> None:
        self.deltas.append(text)

    def end_response(self, text: str) -> None:
        self.responses.append(text)

    def info(self, message: str) -> None:
        self.infos.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def show_help(self, lines: Sequence[str]) -> None:
        self.help.extend(lines)


class MockProvider:
    """Provider that replays scripted turns.

    Each ``queue`` call scripts one ``stream`` call: the deltas to yield and
    an optional error raised after them (or before Start when
    ``fail_before_start`` is set).
    """

    def __init__(self, name: str = "openai"):
        self.name = name
        self.requests: list[ProviderRequest] = []
        self._scripts: list[tuple[Sequence[str], Optional[Exception], bool]] = []
        self.hang: Optional[asyncio.Event] = None

    def queue(
        self,
        *chunks: str,
        error: Optional[Exception] = None,
        fail_before_start: bool = False,
    ) -> MockProvider:
        self._scripts.append((chunks, error, fail_before_start))
        return self

    async def stream(self, request: ProviderRequest) -> AsyncIterator[StreamEvent]:
        self.requests.append(request)
        chunks, error, fail_before_start = (
            self._scripts.pop(0) if self._scripts else ((), None, False)
        )

        if error is not None and fail_before_start:
            raise error

        yield StreamStart()
        for chunk in chunks:
            yield StreamDelta(chunk)
            await asyncio.sleep(0)  # Allow other coroutines to run

        if self.hang is not None:
            await self.hang.wait()
        if error is not None:
            raise error
        yield StreamDone()


class MockProviderFactory:
    """Provider factory over a fixed set of MockProviders."""

    def __init__(self, *names: str):
        self.providers = {name: MockProvider(name) for name in names}
        self.missing_credentials: set[str] = set()
        self.calls: list[str] = []

    def __call__(self, name: str) -> MockProvider:
        self.calls.append(name)
        key = name.strip().lower()
        if key not in self.providers:
            raise SessionError(f"Unknown provider: {name} (supported: openai, anthropic)")
        if key in self.missing_credentials:
            raise ConfigurationError(f"Missing required environment variable: {key.upper()}_API_KEY")
        return self.providers[key]


@pytest.fixture
def sink() -> RecordingSink:
    """Create a recording sink."""
    return RecordingSink()


@pytest.fixture
def factory() -> MockProviderFactory:
    """Create a factory with openai and anthropic mock providers."""
    return MockProviderFactory("openai", "anthropic")
