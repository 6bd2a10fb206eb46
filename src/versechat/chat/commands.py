"""In-band chat control commands.

Lines starting with ``/`` are commands; everything else is a message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import SessionError

COMMAND_PREFIX = "/"


class CommandKind(Enum):
    """Supported chat commands."""

    RESET = "reset"
    SET_MODEL = "model"
    SET_PROVIDER = "provider"
    HELP = "help"
    QUIT = "quit"


_ALIASES = {
    "reset": CommandKind.RESET,
    "model": CommandKind.SET_MODEL,
    "provider": CommandKind.SET_PROVIDER,
    "help": CommandKind.HELP,
    "quit": CommandKind.QUIT,
    "exit": CommandKind.QUIT,
}

HELP_LINES = (
    "Commands:",
    "  /help     Show this help",
    "  /model    Show or change the model",
    "  /provider Show or change the provider",
    "  /reset    Clear conversation history",
    "  /exit     Quit chat",
)


@dataclass(frozen=True)
class Command:
    """A parsed control command.

    Attributes:
        kind: Which command
        argument: Text after the command word, None when absent
    """

    kind: CommandKind
    argument: Optional[str] = None


def parse_command(line: str) -> Optional[Command]:
    """Parse a control line.

    Returns None for ordinary (non-command) lines.

    Raises:
        SessionError: The line uses the command prefix but names no known command
    """
    text = line.strip()
    if not text.startswith(COMMAND_PREFIX):
        return None

    word, _, rest = text[len(COMMAND_PREFIX) :].partition(" ")
    kind = _ALIASES.get(word.lower())
    if kind is None:
        raise SessionError(f"Unknown command: {COMMAND_PREFIX}{word}. Type /help for commands.")

    argument = rest.strip() or None
    return Command(kind, argument)


__all__ = [
    "COMMAND_PREFIX",
    "HELP_LINES",
    "Command",
    "CommandKind",
    "parse_command",
]
