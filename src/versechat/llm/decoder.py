"""Stream decoders - raw response bytes to StreamEvents.

One decoder per HTTP response body. Bytes are fed as they arrive; the
decoder buffers partial lines, picks out ``data: `` records and hands each
payload to the provider-specific ``_decode_payload``.

Example:
    decoder = OpenAIStreamDecoder()
    for chunk in chunks:
        for event in decoder.feed(chunk):
            ...
    for event in decoder.finish():
        ...
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterator, Optional

from ..errors import DecodeError
from .types import StreamDelta, StreamDone, StreamEvent

DATA_PREFIX = "data: "
OPENAI_DONE_SENTINEL = "[DONE]"


class StreamDecoder:
    """Incremental line decoder for SSE-style response bodies.

    Single use: once Done has been emitted the decoder ignores further input.
    """

    provider = "base"

    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._done = False

    @property
    def done(self) -> bool:
        """Whether the terminal Done event has been emitted."""
        return self._done

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        """Consume one chunk and return the events it completes."""
        if self._done or not chunk:
            return []

        self._buffer += self._utf8.decode(chunk)

        events: list[StreamEvent] = []
        while not self._done:
            line_end = self._buffer.find("\n")
            if line_end < 0:
                break
            line = self._buffer[:line_end].strip()
            self._buffer = self._buffer[line_end + 1 :]

            event = self._decode_line(line)
            if event is not None:
                events.append(event)

        return events

    def finish(self) -> list[StreamEvent]:
        """Signal end of body. Synthesizes Done if the stream never sent one."""
        if self._done:
            return []
        self._done = True
        self._buffer = ""
        return [StreamDone()]

    def _decode_line(self, line: str) -> Optional[StreamEvent]:
        if not line or not line.startswith(DATA_PREFIX):
            return None

        payload = line[len(DATA_PREFIX) :]
        try:
            event = self._decode_payload(payload)
        except DecodeError as e:
            # Heartbeats and unknown shapes are expected
            logging.debug("[versechat.decoder] Skipping %s payload: %s", self.provider, e)
            return None

        if isinstance(event, StreamDone):
            self._done = True
            self._buffer = ""
        return event

    def _decode_payload(self, payload: str) -> Optional[StreamEvent]:
        raise NotImplementedError

    @staticmethod
    def _parse_json(payload: str) -> Any:
        try:
            return json.loads(payload)
        except ValueError as e:
            raise DecodeError(f"invalid JSON: {e}") from e


class OpenAIStreamDecoder(StreamDecoder):
    """Chat Completions stream: ``choices[0].delta.content`` until ``[DONE]``."""

    provider = "openai"

    def _decode_payload(self, payload: str) -> Optional[StreamEvent]:
        if payload == OPENAI_DONE_SENTINEL:
            return StreamDone()

        data = self._parse_json(payload)
        try:
            content = data["choices"][0]["delta"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise DecodeError(f"unexpected chunk shape: {e!r}") from e

        if isinstance(content, str) and content:
            return StreamDelta(content)
        return None


class AnthropicStreamDecoder(StreamDecoder):
    """Messages stream: ``content_block_delta`` text until ``message_stop``."""

    provider = "anthropic"

    def _decode_payload(self, payload: str) -> Optional[StreamEvent]:
        data = self._parse_json(payload)
        if not isinstance(data, dict):
            raise DecodeError("event payload is not an object")

        event_type = data.get("type")
        if event_type == "message_stop":
            return StreamDone()
        if event_type != "content_block_delta":
            return None

        delta = data.get("delta")
        text = delta.get("text") if isinstance(delta, dict) else None
        if isinstance(text, str) and text:
            return StreamDelta(text)
        return None


async def decode_stream(
    decoder: StreamDecoder, chunks: AsyncIterator[bytes]
) -> AsyncIterator[StreamEvent]:
    """Feed an async byte stream through ``decoder``.

    Ends with exactly one Done: the explicit one from the stream, or a
    synthesized one when the body ends first.
    """
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
        if decoder.done:
            return

    for event in decoder.finish():
        yield event


__all__ = [
    "DATA_PREFIX",
    "StreamDecoder",
    "OpenAIStreamDecoder",
    "AnthropicStreamDecoder",
    "decode_stream",
]
