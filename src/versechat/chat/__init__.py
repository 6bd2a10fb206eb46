"""Chat module - Multi-turn sessions over a seed passage.

- ChatSession: turn sequencing, control commands, provider switching
- ChatHistory: pinned base prefix with bounded recent suffix
- reflect: one-shot streamed reflection
"""

from .commands import HELP_LINES, Command, CommandKind, parse_command
from .history import ChatHistory, build_passage_text
from .reflect import reflect
from .session import ChatSession, SessionState
from .sink import OutputSink, contains_markdown

__all__ = [
    "ChatSession",
    "SessionState",
    "ChatHistory",
    "build_passage_text",
    "Command",
    "CommandKind",
    "HELP_LINES",
    "parse_command",
    "OutputSink",
    "contains_markdown",
    "reflect",
]
