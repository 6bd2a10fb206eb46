"""LLM Types - Data structures for provider exchanges.

This module defines the conversation and stream event types shared by
translators, decoders, providers and the chat session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

ROLES = ("system", "user", "assistant")


@dataclass
class Message:
    """A chat message.

    Attributes:
        role: Message role (system, user, assistant)
        content: Message content
    """

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role}")

    def to_dict(self) -> dict[str, str]:
        """Convert to API format."""
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ProviderRequest:
    """One request to a provider, built per turn and discarded after.

    Attributes:
        model: Model name
        messages: Ordered conversation (no system entries)
        system: Optional system prompt
        max_tokens: Token limit; translators fill a provider default when None
        temperature: Sampling temperature, omitted from the wire when None
    """

    model: str
    messages: tuple[Message, ...] = field(default_factory=tuple)
    system: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_tokens is not None and self.max_tokens < 0:
            raise ValueError(f"max_tokens must not be negative: {self.max_tokens}")
        # Accept any sequence but store an immutable copy
        object.__setattr__(self, "messages", tuple(self.messages))


@dataclass(frozen=True)
class StreamStart:
    """The provider accepted the request; deltas may follow."""


@dataclass(frozen=True)
class StreamDelta:
    """An incremental text fragment."""

    text: str


@dataclass(frozen=True)
class StreamDone:
    """Terminal event. Nothing follows it."""


StreamEvent = Union[StreamStart, StreamDelta, StreamDone]


__all__ = [
    "ROLES",
    "Message",
    "ProviderRequest",
    "StreamStart",
    "StreamDelta",
    "StreamDone",
    "StreamEvent",
]
