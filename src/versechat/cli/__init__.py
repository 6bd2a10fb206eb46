"""CLI module - Command line interface for versechat.

This module provides the CLI entry points:
- versechat chat: Interactive chat about a passage
- versechat ask: One streamed reflection on a passage
"""

from .main import main

__all__ = ["main"]
