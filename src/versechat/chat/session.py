"""Chat session - multi-turn conversation about a seed passage.

A ChatSession owns its history, the current provider/model selection and
the output sink. Lines go in through ``handle_line``; each ordinary line
becomes one streamed turn. Turns are strictly sequential.

    session = ChatSession(passages, sink=TerminalSink())
    await session.run(read_line)
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from opentelemetry import trace

from ..config import ChatConfig
from ..errors import ConfigurationError, SessionError, TransportError
from ..llm.provider import LLMProvider
from ..llm.types import ProviderRequest, StreamDelta, StreamDone
from .commands import HELP_LINES, Command, CommandKind, parse_command
from .history import ChatHistory
from .sink import OutputSink

tracer = trace.get_tracer(__name__)

ProviderFactory = Callable[[str], LLMProvider]
LineReader = Callable[[], Awaitable[Optional[str]]]


class SessionState(Enum):
    """Where the session is in its turn cycle."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    TERMINATED = "terminated"


class ChatSession:
    """Interactive chat session seeded with a passage."""

    def __init__(
        self,
        passages: Sequence[str],
        sink: OutputSink,
        config: Optional[ChatConfig] = None,
        provider_factory: Optional[ProviderFactory] = None,
    ):
        """Initialize a session.

        Args:
            passages: Ordered passage strings for the pinned base message
            sink: Output sink for deltas, responses and diagnostics
            config: Chat defaults (provider, model, limits)
            provider_factory: Builds a provider from its name; raises
                SessionError for unknown names and ConfigurationError for
                missing credentials. Defaults to ``LLMProvider.from_name``.

        Raises:
            ConfigurationError: The chat limits are out of range
        """
        self.config = config or ChatConfig()
        self.config.validate()
        self.sink = sink
        self.history = ChatHistory.from_passages(passages, self.config.max_history)
        self.provider_name = self.config.provider.lower()
        self.model = self.config.resolved_model()
        self.state = SessionState.IDLE

        self._provider_factory = provider_factory or LLMProvider.from_name
        self._provider: Optional[LLMProvider] = None
        self._turn_task: Optional[asyncio.Task] = None
        self._interrupted = False

    # ------------------------------------------------------------------
    # Command loop
    # ------------------------------------------------------------------

    async def run(self, read_line: LineReader) -> None:
        """Read and handle lines until quit or end of input."""
        while self.state is not SessionState.TERMINATED:
            line = await read_line()
            if line is None:
                self.state = SessionState.TERMINATED
                break
            await self.handle_line(line)

    async def handle_line(self, line: str) -> SessionState:
        """Handle one interactive line and return the resulting state."""
        if self.state is SessionState.TERMINATED:
            return self.state

        text = line.strip()
        if not text:
            return self.state

        try:
            command = parse_command(text)
        except SessionError as e:
            self.sink.error(str(e))
            return self.state

        if command is None:
            await self.send(text)
        else:
            self.apply_command(command)
        return self.state

    def apply_command(self, command: Command) -> None:
        """Apply a control command. Never raises; failures go to the sink."""
        if command.kind is CommandKind.QUIT:
            self.state = SessionState.TERMINATED

        elif command.kind is CommandKind.RESET:
            self.history.reset()
            self.sink.info("(chat reset)")

        elif command.kind is CommandKind.HELP:
            self.sink.show_help(HELP_LINES)

        elif command.kind is CommandKind.SET_MODEL:
            if command.argument is None:
                self.sink.info(f"Current model: {self.model}")
                self.sink.info("Usage: /model <name>")
            else:
                self.model = command.argument
                self.sink.info(f"Model set to {self.model}")

        elif command.kind is CommandKind.SET_PROVIDER:
            if command.argument is None:
                self.sink.info(f"Current provider: {self.provider_name}")
                self.sink.info("Usage: /provider <openai|anthropic>")
                return
            try:
                self.switch_provider(command.argument)
            except (SessionError, ConfigurationError) as e:
                self.sink.error(str(e))
            else:
                self.sink.info(f"Provider set to {self.provider_name}")

    def switch_provider(self, name: str) -> None:
        """Resolve ``name`` now and make it the target of the next request.

        On failure the previous provider stays active.

        Raises:
            SessionError: Unknown provider
            ConfigurationError: Missing credential
        """
        provider = self._provider_factory(name)
        self._provider = provider
        self.provider_name = provider.name

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def build_request(self) -> ProviderRequest:
        return ProviderRequest(
            model=self.model,
            system=self.config.system_prompt or None,
            messages=self.history.messages(),
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

    async def send(self, text: str) -> Optional[str]:
        """Run one turn for a user message.

        Returns the assistant response, or None when the turn failed. A
        failed turn leaves history exactly as it was before the turn.
        """
        snapshot = self.history.snapshot()
        self.history.append("user", text)
        try:
            request = self.build_request()
        except ValueError as e:
            self.history.restore(snapshot)
            self.sink.error(f"Error: {e}")
            return None

        self.state = SessionState.AWAITING_RESPONSE

        try:
            provider = self._current_provider()
            response_text = await self._run_turn(provider, request)
        except (TransportError, ConfigurationError, SessionError) as e:
            logging.debug("[versechat.session] Turn failed: %s", e)
            self.history.restore(snapshot)
            self.sink.error(f"Error: {e}")
            self.state = SessionState.IDLE
            return None

        self.sink.end_response(response_text)
        if response_text:
            self.history.append("assistant", response_text)
        self.state = SessionState.IDLE
        return response_text

    def interrupt(self) -> bool:
        """Cancel the in-flight turn, if any. The turn reports an error."""
        if self._turn_task is None or self._turn_task.done():
            return False
        self._interrupted = True
        self._turn_task.cancel()
        return True

    def _current_provider(self) -> LLMProvider:
        if self._provider is None or self._provider.name != self.provider_name:
            self._provider = self._provider_factory(self.provider_name)
        return self._provider

    async def _run_turn(self, provider: LLMProvider, request: ProviderRequest) -> str:
        self._interrupted = False
        self._turn_task = asyncio.ensure_future(self._stream_response(provider, request))
        try:
            if self.config.timeout_sec:
                return await asyncio.wait_for(self._turn_task, self.config.timeout_sec)
            return await self._turn_task
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"No complete response within {self.config.timeout_sec:g}s"
            ) from e
        except asyncio.CancelledError:
            if not self._interrupted:
                raise
            raise TransportError("Response interrupted") from None
        finally:
            self._turn_task = None
            self._interrupted = False

    async def _stream_response(self, provider: LLMProvider, request: ProviderRequest) -> str:
        # Partial text lives only here until the turn completes
        pending: list[str] = []
        done = False

        with tracer.start_as_current_span(
            "chat.turn",
            attributes={
                "chat.provider": provider.name,
                "chat.model": request.model,
                "chat.history.length": len(request.messages),
            },
        ) as span:
            self.sink.begin_response()
            async for event in provider.stream(request):
                if done:
                    continue
                if isinstance(event, StreamDelta):
                    self.sink.write_delta(event.text)
                    pending.append(event.text)
                elif isinstance(event, StreamDone):
                    done = True
            span.set_attribute("chat.response.length", sum(len(p) for p in pending))

        return "".join(pending)


__all__ = ["ChatSession", "SessionState", "ProviderFactory", "LineReader"]
