"""Chat history - pinned base prefix plus a bounded recent suffix.

The base prefix holds the seed passage and is never evicted. Once the
recent suffix grows past ``max_recent`` messages, the oldest recent
messages are dropped.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from ..llm.types import Message

DEFAULT_MAX_RECENT = 16


class ChatHistory:
    """Conversation history for one chat session."""

    def __init__(self, base: Sequence[Message], max_recent: int = DEFAULT_MAX_RECENT):
        """Initialize history.

        Args:
            base: Pinned leading messages (the seed passage)
            max_recent: Maximum number of messages kept after the base prefix
        """
        if max_recent < 1:
            raise ValueError(f"max_recent must be at least 1: {max_recent}")
        self._base: tuple[Message, ...] = tuple(base)
        self._recent: list[Message] = []
        self.max_recent = max_recent

    @classmethod
    def from_passages(
        cls, passages: Sequence[str], max_recent: int = DEFAULT_MAX_RECENT
    ) -> ChatHistory:
        """Seed a history with a single user message carrying the passage text."""
        return cls([Message("user", f"Passage:\n{build_passage_text(passages)}")], max_recent)

    @property
    def base(self) -> tuple[Message, ...]:
        return self._base

    @property
    def recent(self) -> list[Message]:
        return list(self._recent)

    def messages(self) -> list[Message]:
        """Full ordered history: base prefix then recent suffix."""
        return [*self._base, *self._recent]

    def append(self, role: str, content: str) -> Message:
        """Append a message and apply the retention policy."""
        message = Message(role, content)
        self._recent.append(message)
        self.trim()
        return message

    def trim(self) -> None:
        """Drop the oldest recent messages until the suffix fits ``max_recent``."""
        overflow = len(self._recent) - self.max_recent
        if overflow > 0:
            del self._recent[:overflow]

    def reset(self) -> None:
        """Truncate to the base prefix."""
        self._recent.clear()

    def snapshot(self) -> list[Message]:
        """Copy of the recent suffix, for ``restore`` after a failed turn."""
        return list(self._recent)

    def restore(self, snapshot: Sequence[Message]) -> None:
        self._recent = list(snapshot)

    def __len__(self) -> int:
        return len(self._base) + len(self._recent)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages())


def build_passage_text(passages: Sequence[str]) -> str:
    """Concatenate passages one per line."""
    return "".join(f"{passage.rstrip()}\n" for passage in passages)


__all__ = ["DEFAULT_MAX_RECENT", "ChatHistory", "build_passage_text"]
