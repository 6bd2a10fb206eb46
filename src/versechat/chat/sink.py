"""Output sink protocol for chat sessions."""

from __future__ import annotations

from typing import Protocol, Sequence

_MARKDOWN_MARKERS = ("```", "**", "##", "- ", "1. ", "> ")


class OutputSink(Protocol):
    """Where a session sends everything the user sees."""

    def begin_response(self) -> None:
        """A request was sent; no text has arrived yet."""

    def write_delta(self, text: str) -> None:
        """Show a text fragment immediately."""

    def end_response(self, text: str) -> None:
        """The turn finished; ``text`` is the full accumulated response."""

    def info(self, message: str) -> None:
        """One-line status message."""

    def error(self, message: str) -> None:
        """One-line diagnostic."""

    def show_help(self, lines: Sequence[str]) -> None:
        """Show the command list."""


def contains_markdown(text: str) -> bool:
    """Whether ``text`` has structural markers worth re-rendering."""
    return any(marker in text for marker in _MARKDOWN_MARKERS)


__all__ = ["OutputSink", "contains_markdown"]
