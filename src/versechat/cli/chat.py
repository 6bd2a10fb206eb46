"""versechat Chat CLI - Interactive chat about a passage.

This module provides the terminal UI: an OutputSink that prints streamed
text as it arrives and the interactive loop that feeds a ChatSession.
"""

from __future__ import annotations

import asyncio
import re
import shutil
import signal
from typing import Optional, Sequence

from ..chat import ChatSession, contains_markdown, reflect
from ..chat.session import LineReader, ProviderFactory
from ..config import ChatConfig

# ============================================================================
# Terminal UI Helpers
# ============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"

    BRIGHT_BLUE = "\033[94m"


def get_terminal_width() -> int:
    """Get terminal width, default to 80."""
    return shutil.get_terminal_size((80, 24)).columns


_BOLD_SPAN = re.compile(r"\*\*(.+?)\*\*")
_INLINE_CODE = re.compile(r"`([^`]+)`")


def render_markdown(text: str) -> str:
    """Light ANSI rendering for headings, bold, code and list markers."""
    lines = []
    in_fence = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            lines.append(f"{Colors.CYAN}    {line}{Colors.RESET}")
            continue
        if stripped.startswith("#"):
            heading = stripped.lstrip("#").strip()
            lines.append(f"{Colors.BOLD}{heading}{Colors.RESET}")
            continue
        if stripped.startswith(("- ", "* ")):
            indent = line[: len(line) - len(line.lstrip())]
            line = f"{indent}{Colors.GRAY}•{Colors.RESET} {stripped[2:]}"
        line = _BOLD_SPAN.sub(lambda m: f"{Colors.BOLD}{m.group(1)}{Colors.RESET}", line)
        line = _INLINE_CODE.sub(lambda m: f"{Colors.CYAN}{m.group(1)}{Colors.RESET}", line)
        lines.append(line)
    return "\n".join(lines)


class TerminalSink:
    """OutputSink that writes to stdout."""

    def __init__(self, color: bool = True):
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def divider(self, char: str = "─") -> None:
        width = min(get_terminal_width(), 60)
        if self.color:
            print(f"{Colors.GRAY}{char * width}{Colors.RESET}")
        else:
            print(char * width)

    def begin_response(self) -> None:
        print()

    def write_delta(self, text: str) -> None:
        print(text, end="", flush=True)

    def end_response(self, text: str) -> None:
        print()
        # Re-render formatted answers once the full text is known
        if self.color and text and contains_markdown(text):
            print()
            self.divider()
            print(render_markdown(text))
            self.divider()
        print()

    def info(self, message: str) -> None:
        print(f"{self._c(Colors.DIM)}{message}{self._c(Colors.RESET)}")

    def error(self, message: str) -> None:
        print(f"\n{self._c(Colors.RED)}{message}{self._c(Colors.RESET)}")

    def show_help(self, lines: Sequence[str]) -> None:
        for line in lines:
            self.info(line)

    def print_passages(self, passages: Sequence[str]) -> None:
        self.divider()
        for passage in passages:
            print(passage)
        self.divider()
        print()

    def print_intro(self) -> None:
        self.info("Chat mode. /help for commands, /exit to quit.")
        print()

    def user_prompt(self) -> str:
        return f"{self._c(Colors.BRIGHT_BLUE)}{self._c(Colors.BOLD)}you>{self._c(Colors.RESET)} "


# ============================================================================
# Interrupt handling
# ============================================================================


def _install_interrupt(loop: asyncio.AbstractEventLoop, session: ChatSession) -> bool:
    """Route Ctrl+C to ``session.interrupt`` while a turn is streaming."""
    try:
        loop.add_signal_handler(signal.SIGINT, session.interrupt)
    except (NotImplementedError, RuntimeError, ValueError):
        # No loop signal support (Windows or non-main thread)
        return False
    return True


def _remove_interrupt(loop: asyncio.AbstractEventLoop) -> None:
    try:
        loop.remove_signal_handler(signal.SIGINT)
    except (NotImplementedError, RuntimeError, ValueError):
        pass


def make_line_reader(session: ChatSession, sink: TerminalSink) -> LineReader:
    """Blocking ``input()`` reader; Ctrl+C at the prompt only prints a hint."""
    loop = asyncio.get_running_loop()

    async def read_line() -> Optional[str]:
        _remove_interrupt(loop)
        try:
            return input(sink.user_prompt())
        except EOFError:
            return None
        except KeyboardInterrupt:
            print()
            sink.info("Use /exit to quit")
            return ""
        finally:
            _install_interrupt(loop, session)

    return read_line


# ============================================================================
# CLI Runners
# ============================================================================


async def run_chat_cli(
    passages: Sequence[str],
    config: ChatConfig,
    provider_factory: Optional[ProviderFactory] = None,
    color: bool = True,
) -> int:
    """Run interactive CLI chat."""
    sink = TerminalSink(color=color)
    session = ChatSession(passages, sink, config=config, provider_factory=provider_factory)

    sink.print_passages(passages)
    sink.print_intro()

    loop = asyncio.get_running_loop()
    try:
        await session.run(make_line_reader(session, sink))
    finally:
        _remove_interrupt(loop)

    return 0


async def run_ask_cli(
    passages: Sequence[str],
    config: ChatConfig,
    provider_factory: Optional[ProviderFactory] = None,
    color: bool = True,
) -> int:
    """Print the passage and stream one reflection on it."""
    sink = TerminalSink(color=color)
    for passage in passages:
        print(passage)

    await reflect(passages, sink, config=config, provider_factory=provider_factory)
    return 0


__all__ = [
    "Colors",
    "TerminalSink",
    "render_markdown",
    "make_line_reader",
    "run_chat_cli",
    "run_ask_cli",
]
